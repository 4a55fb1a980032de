"""ChromaDB retrieval against an in-memory fake client."""

from types import SimpleNamespace

import pytest

from agent_router.retrieval import chroma_retriever
from agent_router.retrieval.chroma_retriever import ChromaRetrievalService
from agent_router.utils.exceptions import RetrievalError


class FakeCollection:
    def __init__(self, name, rows):
        self.name = name
        self.rows = rows
        self.queries = []

    def query(self, query_embeddings, n_results, include):
        self.queries.append({"query_embeddings": query_embeddings, "n_results": n_results, "include": include})
        rows = self.rows[:n_results]
        return {
            "ids": [[r[0] for r in rows]],
            "documents": [[r[1] for r in rows]],
            "metadatas": [[r[2] for r in rows]],
            "distances": [[r[3] for r in rows]],
        }


class FakeClient:
    def __init__(self, collections, listed=None):
        self.collections = {c.name: c for c in collections}
        self.listed = listed
        self.fail_list = False

    def list_collections(self):
        if self.fail_list:
            raise ConnectionError("chroma unreachable")
        return self.listed if self.listed is not None else list(self.collections)

    def get_collection(self, name):
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        return self.collections[name]


class FakeEmbedding:
    def __init__(self, fail=False):
        self.fail = fail
        self.queries = []

    async def aget_query_embedding(self, query):
        self.queries.append(query)
        if self.fail:
            raise RuntimeError("embedding quota exceeded")
        return [0.1, 0.2, 0.3]


@pytest.fixture
def collections():
    return [
        FakeCollection(
            "openai",
            [
                ("o1", "OpenAI doc one", {"page": 1}, 0.1),
                ("o2", "OpenAI doc two", None, 0.5),
                ("o3", "OpenAI doc three", {}, 0.9),
            ],
        ),
        FakeCollection("memory", [("m1", "Memory note", {"kind": "note"}, 0.2)]),
    ]


@pytest.fixture
def embedding():
    return FakeEmbedding()


@pytest.fixture
def service(collections, embedding):
    return ChromaRetrievalService(client=FakeClient(collections), embedding_fn=embedding)


@pytest.mark.asyncio
async def test_search_merges_and_ranks(service, collections, embedding):
    passages = await service.search("vector search", ["openai", "memory"], max_results=5, threshold=0.3)

    assert [(p.id, p.source_name) for p in passages] == [("o1", "openai"), ("m1", "memory"), ("o2", "openai")]
    assert [p.similarity for p in passages] == pytest.approx([0.9, 0.8, 0.5])
    assert passages[0].metadata == {"page": 1}
    assert passages[2].metadata == {}
    assert embedding.queries == ["vector search"]
    assert collections[0].queries[0]["query_embeddings"] == [[0.1, 0.2, 0.3]]
    assert collections[0].queries[0]["n_results"] == 5


@pytest.mark.asyncio
async def test_search_truncates_to_max_results(service):
    passages = await service.search("vector search", ["openai", "memory"], max_results=2, threshold=0.0)

    assert [p.id for p in passages] == ["o1", "m1"]


@pytest.mark.asyncio
async def test_missing_source_is_skipped(service):
    passages = await service.search("vector search", ["wiki", "memory"], max_results=5, threshold=0.3)

    assert [p.id for p in passages] == ["m1"]


@pytest.mark.asyncio
async def test_distance_above_one_clamps_to_zero(embedding):
    client = FakeClient([FakeCollection("far", [("f1", "Far away", {}, 1.4)])])
    service = ChromaRetrievalService(client=client, embedding_fn=embedding)

    passages = await service.search("vector search", ["far"], max_results=5, threshold=0.0)

    assert passages[0].similarity == 0.0


@pytest.mark.asyncio
async def test_no_sources_skips_embedding(service, embedding):
    assert await service.search("vector search", [], max_results=5, threshold=0.3) == []
    assert embedding.queries == []


@pytest.mark.asyncio
async def test_invalid_query_raises(service):
    with pytest.raises(RetrievalError):
        await service.search("   ", ["openai"], max_results=5, threshold=0.3)


@pytest.mark.asyncio
async def test_embedding_failure_raises(collections):
    service = ChromaRetrievalService(client=FakeClient(collections), embedding_fn=FakeEmbedding(fail=True))

    with pytest.raises(RetrievalError, match="embed"):
        await service.search("vector search", ["openai"], max_results=5, threshold=0.3)


@pytest.mark.asyncio
async def test_list_sources_accepts_names_and_objects(embedding):
    client = FakeClient([], listed=["openai", SimpleNamespace(name="memory")])
    service = ChromaRetrievalService(client=client, embedding_fn=embedding)

    assert await service.list_available_sources() == ["openai", "memory"]


@pytest.mark.asyncio
async def test_list_sources_failure_raises(collections, embedding):
    client = FakeClient(collections)
    client.fail_list = True
    service = ChromaRetrievalService(client=client, embedding_fn=embedding)

    with pytest.raises(RetrievalError):
        await service.list_available_sources()


def test_default_embedding_does_not_reuse_its_http_client(monkeypatch, collections, provider_key):
    built = []
    monkeypatch.setattr(chroma_retriever, "OpenAIEmbedding", lambda **kwargs: built.append(kwargs) or FakeEmbedding())

    ChromaRetrievalService(client=FakeClient(collections), embedding_model="text-embedding-3-small")

    assert built == [
        {"model_name": "text-embedding-3-small", "api_key": "sk-test", "reuse_client": False},
    ]
