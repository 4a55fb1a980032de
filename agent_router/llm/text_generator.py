"""
Text-generation capability used by the router and the agents.

This module defines:
- TextGenerator: abstract contract (blocking generate + incremental stream)
- GenerationResult / TokenUsage: generation outputs
- LangChainTextGenerator: ChatOpenAI-backed implementation, including the
  tool-invocation loop for agents that expose tools

Agents and the intent classifier depend on the abstraction only, so tests
swap in scripted generators.
"""

from __future__ import annotations

import asyncio
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence, Union

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_openai import ChatOpenAI

from agent_router.config.constants import MessageRole
from agent_router.config.settings import config
from agent_router.schema import ChatMessage
from agent_router.utils.exceptions import AgentError
from agent_router.utils.logger import get_logger

# Safety: prevent infinite tool loops
MAX_TOOL_ITERATIONS = 5


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @classmethod
    def from_usage_metadata(cls, usage: Optional[Dict[str, Any]]) -> "TokenUsage":
        if not usage:
            return cls()
        return cls(
            prompt_tokens=usage.get("input_tokens"),
            completion_tokens=usage.get("output_tokens"),
            total_tokens=usage.get("total_tokens"),
        )

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        def _sum(a: Optional[int], b: Optional[int]) -> Optional[int]:
            if a is None and b is None:
                return None
            return (a or 0) + (b or 0)

        return TokenUsage(
            prompt_tokens=_sum(self.prompt_tokens, other.prompt_tokens),
            completion_tokens=_sum(self.completion_tokens, other.completion_tokens),
            total_tokens=_sum(self.total_tokens, other.total_tokens),
        )


@dataclass(frozen=True)
class GenerationResult:
    text: str
    usage: TokenUsage = TokenUsage()


class TextGenerator(ABC):
    """
    Opaque text-completion capability.

    Implementations:
    - generate(): return the full completion (running tools if provided)
    - stream(): yield text deltas, then exactly one TokenUsage as the last item
    """

    @abstractmethod
    async def generate(
        self,
        messages: Sequence[ChatMessage],
        *,
        model_id: str,
        max_tokens: int,
        temperature: float,
        tools: Sequence[Callable[..., Any]] = (),
    ) -> GenerationResult:
        """Generate a complete response for the given messages."""

    @abstractmethod
    def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model_id: str,
        max_tokens: int,
        temperature: float,
        tools: Sequence[Callable[..., Any]] = (),
    ) -> AsyncIterator[Union[str, TokenUsage]]:
        """Stream a response as text deltas followed by a final TokenUsage."""

    async def check_health(self) -> Dict[str, Any]:
        """Report provider health; subclasses override with a real call."""
        return {"status": "healthy"}


def _to_langchain_messages(messages: Sequence[ChatMessage]) -> List[BaseMessage]:
    converted: List[BaseMessage] = []
    for message in messages:
        if message.role == MessageRole.SYSTEM:
            converted.append(SystemMessage(content=message.content))
        elif message.role == MessageRole.ASSISTANT:
            converted.append(AIMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


def _content_text(content: Any) -> str:
    # Chat models may return either a string or a list of content blocks
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content) if content else ""


class LangChainTextGenerator(TextGenerator):
    """
    TextGenerator backed by langchain-openai's ChatOpenAI.

    A ChatOpenAI client is created per call because model id, token budget
    and temperature vary per request.
    """

    def __init__(self, api_key: Optional[str] = None, health_model: Optional[str] = None) -> None:
        self.logger = get_logger("llm")
        self._api_key = api_key or config.OPENAI_API_KEY
        self._health_model = health_model or config.FALLBACK_LLM_MODEL

    def _client(self, model_id: str, max_tokens: int, temperature: float) -> ChatOpenAI:
        try:
            return ChatOpenAI(
                model=model_id,
                api_key=self._api_key,
                max_tokens=max_tokens,
                temperature=temperature,
                stream_usage=True,
            )
        except Exception as e:  # pragma: no cover - network/credentials dependent
            raise AgentError(f"Failed to initialize LLM client for model '{model_id}': {e}") from e

    async def generate(
        self,
        messages: Sequence[ChatMessage],
        *,
        model_id: str,
        max_tokens: int,
        temperature: float,
        tools: Sequence[Callable[..., Any]] = (),
    ) -> GenerationResult:
        llm = self._client(model_id, max_tokens, temperature)
        if tools:
            llm = llm.bind_tools(list(tools))

        lc_messages = _to_langchain_messages(messages)
        usage = TokenUsage()

        iteration = 0
        while iteration < MAX_TOOL_ITERATIONS:
            iteration += 1

            response = await llm.ainvoke(lc_messages)
            usage = usage + TokenUsage.from_usage_metadata(getattr(response, "usage_metadata", None))

            # If the model wants to call tools
            if getattr(response, "tool_calls", None):
                lc_messages.append(response)
                for tool_call in response.tool_calls:
                    result = await self._run_tool(tools, tool_call["name"], tool_call["args"])
                    lc_messages.append(
                        ToolMessage(content=str(result), tool_call_id=tool_call["id"])
                    )
                # Continue loop to let LLM react to tool output
                continue

            return GenerationResult(text=_content_text(response.content), usage=usage)

        raise AgentError(f"Exceeded max tool iterations ({MAX_TOOL_ITERATIONS}) for model '{model_id}'")

    async def _run_tool(
        self,
        tools: Sequence[Callable[..., Any]],
        tool_name: str,
        tool_args: Dict[str, Any],
    ) -> Any:
        tool_fn = next((t for t in tools if t.__name__ == tool_name), None)
        if tool_fn is None:
            self.logger.warning(f"[LangChainTextGenerator] Model requested unknown tool '{tool_name}'")
            return "no tool found"

        try:
            result = tool_fn(**tool_args)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            # Tool failures are reported back to the model, not raised
            self.logger.warning(f"[LangChainTextGenerator] Tool '{tool_name}' failed: {e}")
            return f"tool execution failed: {e}"

    async def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model_id: str,
        max_tokens: int,
        temperature: float,
        tools: Sequence[Callable[..., Any]] = (),
    ) -> AsyncIterator[Union[str, TokenUsage]]:
        if tools:
            # Streaming relays text only; tool calls are resolved on the blocking path
            self.logger.debug("[LangChainTextGenerator] Tools are not bound on the streaming path")

        llm = self._client(model_id, max_tokens, temperature)
        usage = TokenUsage()
        async for chunk in llm.astream(_to_langchain_messages(messages)):
            chunk_usage = getattr(chunk, "usage_metadata", None)
            if chunk_usage:
                usage = usage + TokenUsage.from_usage_metadata(chunk_usage)
            text = _content_text(chunk.content)
            if text:
                yield text
        yield usage

    async def check_health(self) -> Dict[str, Any]:
        """Send a one-token request to the health model."""
        try:
            await asyncio.wait_for(
                self.generate(
                    [ChatMessage(role=MessageRole.USER, content="ping")],
                    model_id=self._health_model,
                    max_tokens=1,
                    temperature=0.0,
                ),
                timeout=config.HEALTH_CHECK_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            return {"status": "degraded", "error": "provider health check timed out"}
        except Exception as e:
            return {"status": "error", "error": str(e)}
        return {"status": "healthy", "model": self._health_model}
