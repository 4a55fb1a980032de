"""
ChromaDB-backed retrieval service.

Each named source is a ChromaDB collection in one persistent client.
Queries are embedded once with llama-index's OpenAIEmbedding and run
against every requested collection; results are merged, thresholded and
ranked by similarity.

Chroma returns cosine distances; similarity is reported as 1 - distance,
clamped to [0, 1].
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import chromadb
from chromadb.config import Settings
from llama_index.embeddings.openai import OpenAIEmbedding

from agent_router.config.settings import config
from agent_router.retrieval.base_retriever import RetrievalService, RetrievedPassage
from agent_router.utils.exceptions import RetrievalError
from agent_router.utils.logger import get_logger


class ChromaRetrievalService(RetrievalService):
    """
    Retrieval over ChromaDB collections, one collection per source.

    Responsibilities:
    - List collections as available sources
    - Embed queries and search each requested collection
    - Merge and rank results across sources
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        persist_directory: Optional[str] = None,
        embedding_model: Optional[str] = None,
        embedding_fn: Optional[Any] = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            client: Existing ChromaDB client (defaults to a PersistentClient)
            persist_directory: Directory for the PersistentClient
            embedding_model: Embedding model name (defaults to config)
            embedding_fn: Object exposing aget_query_embedding(); defaults to OpenAIEmbedding

        Raises:
            RetrievalError: If the client or embedding model cannot be created
        """
        self.logger = get_logger("retrieval")
        self.embedding_model = embedding_model or config.EMBEDDING_MODEL

        try:
            self._client = client or chromadb.PersistentClient(
                path=str(persist_directory or config.CHROMA_PERSIST_DIR),
                settings=Settings(anonymized_telemetry=False),
            )
        except Exception as e:
            raise RetrievalError(f"Failed to initialize ChromaDB client: {e}") from e

        try:
            self.embedding_fn = embedding_fn or OpenAIEmbedding(
                model_name=self.embedding_model,
                api_key=config.OPENAI_API_KEY,
                # Async HTTP clients are bound to one event loop; the service may outlive it
                reuse_client=False,
            )
        except Exception as e:
            error_msg = f"Failed to initialize embedding model: {str(e)}"
            self.logger.error(error_msg)
            raise RetrievalError(error_msg) from e

        self.logger.info(f"ChromaRetrievalService initialized with model: {self.embedding_model}")

    async def list_available_sources(self) -> List[str]:
        try:
            collections = await asyncio.to_thread(self._client.list_collections)
        except Exception as e:
            raise RetrievalError(f"Failed to list ChromaDB collections: {e}") from e
        # Newer chromadb releases return names, older ones Collection objects
        return [c if isinstance(c, str) else c.name for c in collections]

    async def search(
        self,
        query: str,
        sources: Sequence[str],
        max_results: int,
        threshold: float,
    ) -> List[RetrievedPassage]:
        if not self.validate_query(query):
            raise RetrievalError("Invalid query: query must be a non-empty string")
        if not sources:
            return []

        try:
            query_embedding = await self.embedding_fn.aget_query_embedding(query)
        except Exception as e:
            raise RetrievalError(f"Failed to embed query: {e}") from e

        passages: List[RetrievedPassage] = []
        for source in sources:
            try:
                passages.extend(
                    await asyncio.to_thread(self._query_source, source, query_embedding, max_results)
                )
            except Exception as e:
                # One missing or broken source does not fail the whole search
                self.logger.warning(f"[ChromaRetrievalService] Search failed for source '{source}': {e}")

        ranked = self.rank(passages, max_results=max_results, threshold=threshold)
        self.logger.debug(
            f"[ChromaRetrievalService] {len(ranked)} passages for query '{query[:50]}' "
            f"across sources {list(sources)}"
        )
        return ranked

    def _query_source(
        self,
        source: str,
        query_embedding: List[float],
        max_results: int,
    ) -> List[RetrievedPassage]:
        collection = self._client.get_collection(name=source)
        results: Dict[str, Any] = collection.query(
            query_embeddings=[query_embedding],
            n_results=max_results,
            include=["documents", "metadatas", "distances"],
        )

        ids = (results.get("ids") or [[]])[0]
        documents = (results.get("documents") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        passages = []
        for i, passage_id in enumerate(ids):
            distance = distances[i] if i < len(distances) else 1.0
            passages.append(
                RetrievedPassage(
                    id=str(passage_id),
                    content=documents[i] if i < len(documents) and documents[i] else "",
                    source_name=source,
                    similarity=max(0.0, min(1.0, 1.0 - float(distance))),
                    metadata=dict(metadatas[i] or {}) if i < len(metadatas) else {},
                )
            )
        return passages
