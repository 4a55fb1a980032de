"""LangChain text generator: tool loop, streaming and health check."""

import pytest
from langchain_core.messages import AIMessage, AIMessageChunk, HumanMessage, SystemMessage, ToolMessage

from agent_router.config.constants import MessageRole
from agent_router.llm.text_generator import (
    MAX_TOOL_ITERATIONS,
    LangChainTextGenerator,
    TokenUsage,
    _content_text,
)
from agent_router.schema import ChatMessage
from agent_router.utils.exceptions import AgentError

MESSAGES = [
    ChatMessage(role=MessageRole.SYSTEM, content="You are helpful."),
    ChatMessage(role=MessageRole.USER, content="Look something up"),
]


class FakeChatModel:
    """Stands in for ChatOpenAI: scripted ainvoke replies and astream chunks."""

    def __init__(self, responses=(), chunks=()):
        self.responses = list(responses)
        self.chunks = list(chunks)
        self.invocations = []
        self.bound_tools = None

    def bind_tools(self, tools):
        self.bound_tools = tools
        return self

    async def ainvoke(self, messages):
        self.invocations.append(list(messages))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def astream(self, messages):
        self.invocations.append(list(messages))
        for chunk in self.chunks:
            yield chunk


def _tool_call(name, args, call_id="call_1"):
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": call_id}])


@pytest.fixture
def generator():
    return LangChainTextGenerator(api_key="sk-test", health_model="health-model")


def _use(monkeypatch, generator, model):
    monkeypatch.setattr(generator, "_client", lambda model_id, max_tokens, temperature: model)


@pytest.mark.asyncio
async def test_generate_without_tools(monkeypatch, generator):
    model = FakeChatModel([AIMessage(content="Hi there", usage_metadata={"input_tokens": 3, "output_tokens": 2, "total_tokens": 5})])
    _use(monkeypatch, generator, model)

    result = await generator.generate(MESSAGES, model_id="m", max_tokens=10, temperature=0.1)

    assert result.text == "Hi there"
    assert result.usage == TokenUsage(prompt_tokens=3, completion_tokens=2, total_tokens=5)
    assert model.bound_tools is None
    sent = model.invocations[0]
    assert isinstance(sent[0], SystemMessage)
    assert isinstance(sent[1], HumanMessage)


@pytest.mark.asyncio
async def test_tool_loop_feeds_results_back(monkeypatch, generator):
    def lookup(term: str) -> str:
        """Look up a term."""
        return f"found {term}"

    model = FakeChatModel(
        [
            _tool_call("lookup", {"term": "vectors"}),
            AIMessage(content="Vectors are arrays.", usage_metadata={"input_tokens": 4, "output_tokens": 5, "total_tokens": 9}),
        ]
    )
    _use(monkeypatch, generator, model)

    result = await generator.generate(MESSAGES, model_id="m", max_tokens=10, temperature=0.1, tools=[lookup])

    assert result.text == "Vectors are arrays."
    assert result.usage.total_tokens == 9
    assert model.bound_tools == [lookup]
    tool_message = model.invocations[1][-1]
    assert isinstance(tool_message, ToolMessage)
    assert tool_message.content == "found vectors"
    assert tool_message.tool_call_id == "call_1"


@pytest.mark.asyncio
async def test_async_tools_are_awaited(monkeypatch, generator):
    async def search_documents(query: str, max_results: int = 5) -> dict:
        """Search documents."""
        return {"total_found": max_results}

    model = FakeChatModel([_tool_call("search_documents", {"query": "x", "max_results": 2}), AIMessage(content="ok")])
    _use(monkeypatch, generator, model)

    await generator.generate(MESSAGES, model_id="m", max_tokens=10, temperature=0.1, tools=[search_documents])

    assert model.invocations[1][-1].content == "{'total_found': 2}"


@pytest.mark.asyncio
async def test_unknown_and_failing_tools_are_reported_to_model(monkeypatch, generator):
    def explode() -> str:
        """Always fails."""
        raise ValueError("kaboom")

    model = FakeChatModel(
        [
            _tool_call("missing_tool", {}),
            _tool_call("explode", {}, call_id="call_2"),
            AIMessage(content="recovered"),
        ]
    )
    _use(monkeypatch, generator, model)

    result = await generator.generate(MESSAGES, model_id="m", max_tokens=10, temperature=0.1, tools=[explode])

    assert result.text == "recovered"
    assert model.invocations[1][-1].content == "no tool found"
    assert model.invocations[2][-1].content == "tool execution failed: kaboom"


@pytest.mark.asyncio
async def test_tool_loop_is_bounded(monkeypatch, generator):
    def lookup(term: str) -> str:
        """Look up a term."""
        return term

    model = FakeChatModel([_tool_call("lookup", {"term": "again"}) for _ in range(MAX_TOOL_ITERATIONS)])
    _use(monkeypatch, generator, model)

    with pytest.raises(AgentError, match="max tool iterations"):
        await generator.generate(MESSAGES, model_id="m", max_tokens=10, temperature=0.1, tools=[lookup])

    assert len(model.invocations) == MAX_TOOL_ITERATIONS


@pytest.mark.asyncio
async def test_stream_yields_text_then_usage(monkeypatch, generator):
    model = FakeChatModel(
        chunks=[
            AIMessageChunk(content="Hel"),
            AIMessageChunk(content=""),
            AIMessageChunk(content="lo", usage_metadata={"input_tokens": 1, "output_tokens": 2, "total_tokens": 3}),
        ]
    )
    _use(monkeypatch, generator, model)

    items = [item async for item in generator.stream(MESSAGES, model_id="m", max_tokens=10, temperature=0.1)]

    assert items == ["Hel", "lo", TokenUsage(prompt_tokens=1, completion_tokens=2, total_tokens=3)]


@pytest.mark.asyncio
async def test_check_health(monkeypatch, generator):
    _use(monkeypatch, generator, FakeChatModel([AIMessage(content="p")]))
    assert await generator.check_health() == {"status": "healthy", "model": "health-model"}

    _use(monkeypatch, generator, FakeChatModel([RuntimeError("401 unauthorized")]))
    assert await generator.check_health() == {"status": "error", "error": "401 unauthorized"}


def test_content_text_handles_blocks():
    assert _content_text("plain") == "plain"
    assert _content_text([{"type": "text", "text": "a"}, "b", {"type": "image_url"}]) == "ab"
    assert _content_text(None) == ""


def test_token_usage_addition():
    total = TokenUsage() + TokenUsage(prompt_tokens=2, total_tokens=2) + TokenUsage(prompt_tokens=1, total_tokens=4)

    assert total == TokenUsage(prompt_tokens=3, completion_tokens=None, total_tokens=6)
