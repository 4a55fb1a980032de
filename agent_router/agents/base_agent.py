"""
Base agent definitions.

This module defines:
- AgentInterface: minimal common interface for all agents.
- BaseAgent: shared request handling (retrieval, message assembly, text
  generation, confidence scoring) for the blocking and streaming paths.

Concrete agents (QAAgent, RewriteAgent, PlannerAgent, ResearchAgent)
inherit from BaseAgent and:
- Provide their own system prompt
- Optionally adjust the request before execution (_prepare_request)
- Optionally post-process the response (_postprocess), e.g. extracting
  sub-questions or citations into the metadata.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, AsyncIterator, Callable, List, Optional, Sequence, Tuple, Union

from agent_router.agents.tools import build_tools
from agent_router.config.constants import AGENT_APOLOGY, UNKNOWN_MODEL, AgentType, ErrorCode, MessageRole
from agent_router.config.settings import config
from agent_router.llm.text_generator import TextGenerator, TokenUsage
from agent_router.retrieval.base_retriever import RetrievalService, RetrievedPassage
from agent_router.schema import (
    AgentCapability,
    AgentRequest,
    AgentResponse,
    ChatMessage,
    ErrorDetails,
    ResponseMetadata,
    SourceSummary,
    StreamChunk,
    StreamComplete,
)
from agent_router.utils.logger import get_logger

DEFAULT_MAX_TOKENS = 1000
SOURCE_PREVIEW_CHARS = 200
EXPECTED_RESPONSE_LENGTH = 500
DEFAULT_SOURCE_SCORE = 0.5

StreamEvent = Union[StreamChunk, StreamComplete]


def calculate_confidence(passages: Sequence[RetrievedPassage], content: str) -> float:
    """Blend mean passage similarity (0.6) with a response-length score (0.4)."""
    if passages:
        source_score = min(sum(p.similarity for p in passages) / len(passages), 1.0)
    else:
        source_score = DEFAULT_SOURCE_SCORE
    content_score = min(len(content) / EXPECTED_RESPONSE_LENGTH, 1.0)
    return max(0.0, min(source_score * 0.6 + content_score * 0.4, 1.0))


class AgentInterface(ABC):
    """
    Minimal interface for all agents in the system.

    Agents expose their type, their capability descriptor and a blocking
    execute() method.
    """

    @abstractmethod
    def get_agent_type(self) -> AgentType:
        """Return the AgentType enum value for this agent."""

    @abstractmethod
    async def execute(self, request: Any) -> AgentResponse:
        """Handle a request and return a structured response."""


class BaseAgent(AgentInterface, ABC):
    """
    Abstract base class for agents.

    Responsibilities:
    - Store the AgentType and capability descriptor
    - Retrieve context passages when the request names sources
    - Assemble messages: system prompt (+ context), history, query
    - Call the text generator with capability defaults, overridable per request
    - Build JSON-friendly AgentResponse objects

    Generation failures on the blocking path become error-bearing responses;
    on the streaming path they propagate so the orchestrator can fall back.
    """

    def __init__(
        self,
        agent_type: AgentType,
        capability: AgentCapability,
        generator: TextGenerator,
        retrieval: Optional[RetrievalService] = None,
        default_model: Optional[str] = None,
        search_threshold: Optional[float] = None,
    ) -> None:
        self._agent_type = agent_type
        self.capability = capability
        self.logger = get_logger(f"agents.{agent_type.value}")
        self._generator = generator
        self._retrieval = retrieval
        self._default_model = default_model or config.LLM_MODEL
        self._search_threshold = (
            config.SEARCH_THRESHOLD if search_threshold is None else search_threshold
        )

    # ------------------------------------------------------------------
    # AgentInterface implementation
    # ------------------------------------------------------------------
    def get_agent_type(self) -> AgentType:
        return self._agent_type

    @property
    def agent_type(self) -> AgentType:
        return self._agent_type

    @property
    def name(self) -> str:
        return type(self).__name__

    def validate_request(self, request: Any) -> AgentRequest:
        return AgentRequest.parse(request)

    @abstractmethod
    def get_system_prompt(self, request: AgentRequest) -> str:
        """Return the system instructions for this request."""

    def get_tools(self, request: AgentRequest) -> Tuple[Callable[..., Any], ...]:
        return build_tools(self.capability, request, self._retrieval, self._search_threshold)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def _prepare_request(self, request: AgentRequest) -> AgentRequest:
        return request

    def _postprocess(self, response: AgentResponse) -> AgentResponse:
        return response

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    async def execute(self, request: Any) -> AgentResponse:
        start = time.perf_counter()
        validated = self._prepare_request(self.validate_request(request))
        model_id = self._model_id(validated)

        self.logger.info(f"[{self.name}] Handling query with model {model_id}...")

        passages = await self._retrieve_context(validated)
        try:
            result = await self._generator.generate(
                self._build_messages(validated, passages),
                model_id=model_id,
                max_tokens=self._max_tokens(validated),
                temperature=self._temperature(validated),
                tools=self.get_tools(validated),
            )
        except Exception as e:
            self.logger.error(f"[{self.name}] Generation failed: {e}", exc_info=True)
            return self._error_response(validated, start, e)

        response = self._build_response(validated, result.text, result.usage, passages, model_id, start)
        return self._postprocess(response)

    async def execute_streaming(self, request: Any) -> AsyncIterator[StreamEvent]:
        """
        Yield StreamChunk events as text arrives, then one StreamComplete.

        Raises:
            Exception: Any generation failure, after which no further chunk
                is emitted
        """
        if not self.capability.supports_streaming:
            response = await self.execute(request)
            yield StreamChunk(response.content)
            yield StreamComplete(response)
            return

        start = time.perf_counter()
        validated = self._prepare_request(self.validate_request(request))
        model_id = self._model_id(validated)
        passages = await self._retrieve_context(validated)

        self.logger.info(f"[{self.name}] Streaming query with model {model_id}...")

        parts: List[str] = []
        usage = TokenUsage()
        async for item in self._generator.stream(
            self._build_messages(validated, passages),
            model_id=model_id,
            max_tokens=self._max_tokens(validated),
            temperature=self._temperature(validated),
            tools=self.get_tools(validated),
        ):
            if isinstance(item, TokenUsage):
                usage = item
                continue
            if item:
                parts.append(item)
                yield StreamChunk(item)

        response = self._build_response(validated, "".join(parts), usage, passages, model_id, start)
        yield StreamComplete(self._postprocess(response))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _model_id(self, request: AgentRequest) -> str:
        return request.effective_options.model_id or self._default_model

    def _max_tokens(self, request: AgentRequest) -> int:
        options = request.effective_options
        if options.max_tokens is not None:
            return options.max_tokens
        return self.capability.max_tokens or DEFAULT_MAX_TOKENS

    def _temperature(self, request: AgentRequest) -> float:
        options = request.effective_options
        if options.temperature is not None:
            return float(options.temperature)
        return self.capability.temperature

    async def _retrieve_context(self, request: AgentRequest) -> List[RetrievedPassage]:
        context = request.effective_context
        if not context.sources or self._retrieval is None:
            return []

        try:
            return await self._retrieval.search(
                request.query,
                list(context.sources),
                context.max_results,
                self._search_threshold,
            )
        except Exception as e:
            self.logger.warning(f"[{self.name}] Context retrieval failed, continuing without passages: {e}")
            return []

    def _build_messages(self, request: AgentRequest, passages: Sequence[RetrievedPassage]) -> List[ChatMessage]:
        system_prompt = self.get_system_prompt(request)
        if passages:
            context_lines = []
            for i, passage in enumerate(passages, start=1):
                prefix = f"[{i}] (source={passage.source_name}, score={passage.similarity:.2f}) "
                context_lines.append(prefix + passage.content.strip())
            system_prompt += "\n\nContext:\n" + "\n\n".join(context_lines)

        messages = [ChatMessage(role=MessageRole.SYSTEM, content=system_prompt)]
        messages.extend(request.history)
        messages.append(ChatMessage(role=MessageRole.USER, content=request.query))
        return messages

    def _build_response(
        self,
        request: AgentRequest,
        content: str,
        usage: TokenUsage,
        passages: Sequence[RetrievedPassage],
        model_id: str,
        start: float,
    ) -> AgentResponse:
        sources = tuple(
            SourceSummary(
                id=p.id,
                content=(p.content[:SOURCE_PREVIEW_CHARS] + "...") if len(p.content) > SOURCE_PREVIEW_CHARS else p.content,
                score=p.similarity,
                metadata=dict(p.metadata),
            )
            for p in passages
        )
        return AgentResponse(
            content=content,
            agent=self._agent_type,
            metadata=ResponseMetadata(
                model_used=model_id,
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
                response_time_ms=_elapsed_ms(start),
                sources=sources,
                confidence=calculate_confidence(passages, content),
            ),
            streaming_supported=self.capability.supports_streaming,
        )

    def _error_response(self, request: AgentRequest, start: float, error: Exception) -> AgentResponse:
        return AgentResponse(
            content=AGENT_APOLOGY,
            agent=self._agent_type,
            metadata=ResponseMetadata(
                model_used=request.effective_options.model_id or UNKNOWN_MODEL,
                response_time_ms=_elapsed_ms(start),
            ),
            streaming_supported=self.capability.supports_streaming,
            error_details=ErrorDetails(
                code=ErrorCode.PROCESSING_ERROR,
                message=str(error) or type(error).__name__,
                retryable=True,
            ),
        )

    @staticmethod
    def _with_metadata(response: AgentResponse, **changes: Any) -> AgentResponse:
        return replace(response, metadata=replace(response.metadata, **changes))


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
