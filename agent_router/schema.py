"""
Data model for the Agent Router.

Defines the request-scoped value objects that flow through one routing call:

    AgentRequest -> ClassificationResult -> RoutingDecision -> AgentResponse

All types are frozen dataclasses. Requests are validated on construction and
never mutated afterwards; orchestration builds enhanced copies with
dataclasses.replace(). Every result type exposes to_dict() so it can be
logged or serialized as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from agent_router.config.constants import (
    APOLOGY_MESSAGES,
    AgentType,
    ComplexityLevel,
    ErrorCode,
    MessageRole,
    UserIntent,
)
from agent_router.utils.exceptions import RequestValidationError


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Mapping):
        return {(k.value if isinstance(k, Enum) else str(k)): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return _to_jsonable(self)


# ============================================================================
# REQUEST
# ============================================================================

@dataclass(frozen=True)
class ChatMessage(_Serializable):
    """One prior conversation turn."""
    role: MessageRole
    content: str

    def __post_init__(self) -> None:
        if not isinstance(self.role, MessageRole):
            try:
                object.__setattr__(self, "role", MessageRole(self.role))
            except ValueError as e:
                raise RequestValidationError(f"Unknown message role: {self.role!r}") from e
        if not isinstance(self.content, str):
            raise RequestValidationError("Message content must be a string")

    @classmethod
    def parse(cls, data: Any) -> "ChatMessage":
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise RequestValidationError("History entries must be mappings with 'role' and 'content'")
        return cls(role=data.get("role"), content=data.get("content"))


@dataclass(frozen=True)
class RequestContext(_Serializable):
    """
    Optional retrieval and routing hints attached to a request.

    Attributes:
        sources: Retrieval sources to search, in priority order
        max_results: Maximum passages to retrieve (1-20)
        requires_citations: Whether the answer must cite its sources
        complexity: Complexity hint; routing overwrites it with its estimate
        user_intent: Precomputed intent; when set, routing skips the LLM call
        domain_keywords: Free-form domain focus terms
    """
    sources: Tuple[str, ...] = ()
    max_results: int = 5
    requires_citations: bool = False
    complexity: ComplexityLevel = ComplexityLevel.MODERATE
    user_intent: Optional[UserIntent] = None
    domain_keywords: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("sources", "domain_keywords"):
            if isinstance(getattr(self, name), str):
                raise RequestValidationError(f"{name} must be a list of strings, not a single string")
        object.__setattr__(self, "sources", tuple(self.sources or ()))
        object.__setattr__(self, "domain_keywords", tuple(self.domain_keywords or ()))
        for source in self.sources:
            if not isinstance(source, str) or not source.strip():
                raise RequestValidationError(f"Invalid retrieval source: {source!r}")
        if isinstance(self.max_results, bool) or not isinstance(self.max_results, int):
            raise RequestValidationError("max_results must be an integer")
        if not 1 <= self.max_results <= 20:
            raise RequestValidationError("max_results must be between 1 and 20")
        try:
            object.__setattr__(self, "complexity", ComplexityLevel(self.complexity))
            if self.user_intent is not None:
                object.__setattr__(self, "user_intent", UserIntent(self.user_intent))
        except ValueError as e:
            raise RequestValidationError(str(e)) from e

    @classmethod
    def parse(cls, data: Any) -> "RequestContext":
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise RequestValidationError("context must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise RequestValidationError(f"Unknown context fields: {sorted(unknown)}")
        return cls(**dict(data))


@dataclass(frozen=True)
class RequestOptions(_Serializable):
    """Generation options; unset values fall back to agent/config defaults."""
    model_id: Optional[str] = None
    streaming: bool = True
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    use_tools: bool = True

    def __post_init__(self) -> None:
        if self.max_tokens is not None and (
            isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens <= 0
        ):
            raise RequestValidationError("max_tokens must be a positive integer")
        if self.temperature is not None and not 0.0 <= float(self.temperature) <= 2.0:
            raise RequestValidationError("temperature must be between 0 and 2")

    @classmethod
    def parse(cls, data: Any) -> "RequestOptions":
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise RequestValidationError("options must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise RequestValidationError(f"Unknown option fields: {sorted(unknown)}")
        return cls(**dict(data))


@dataclass(frozen=True)
class AgentRequest(_Serializable):
    """
    Immutable input to one routing call.

    Raises:
        RequestValidationError: If the query is empty or any nested field is invalid
    """
    query: str
    history: Tuple[ChatMessage, ...] = ()
    context: Optional[RequestContext] = None
    options: Optional[RequestOptions] = None

    def __post_init__(self) -> None:
        if not isinstance(self.query, str) or not self.query.strip():
            raise RequestValidationError("Query must be a non-empty string")
        object.__setattr__(self, "history", tuple(ChatMessage.parse(m) for m in (self.history or ())))
        if self.context is not None and not isinstance(self.context, RequestContext):
            object.__setattr__(self, "context", RequestContext.parse(self.context))
        if self.options is not None and not isinstance(self.options, RequestOptions):
            object.__setattr__(self, "options", RequestOptions.parse(self.options))

    @classmethod
    def parse(cls, data: Any) -> "AgentRequest":
        """
        Validate an AgentRequest or a plain mapping and return an AgentRequest.

        Raises:
            RequestValidationError: On any malformed input
        """
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise RequestValidationError("Request must be an AgentRequest or a mapping")
        try:
            return cls(
                query=data.get("query"),
                history=data.get("history") or (),
                context=data.get("context"),
                options=data.get("options"),
            )
        except RequestValidationError:
            raise
        except (TypeError, ValueError) as e:
            raise RequestValidationError(str(e)) from e

    @property
    def effective_context(self) -> RequestContext:
        return self.context or RequestContext()

    @property
    def effective_options(self) -> RequestOptions:
        return self.options or RequestOptions()


# ============================================================================
# CAPABILITIES
# ============================================================================

@dataclass(frozen=True)
class AgentCapability(_Serializable):
    """Static descriptor advertised by each agent variant."""
    name: str
    description: str
    supports_streaming: bool = True
    requires_tools: bool = False
    max_tokens: Optional[int] = None
    temperature: float = 0.1

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("capability temperature must be between 0 and 2")


# ============================================================================
# CLASSIFICATION & ROUTING
# ============================================================================

@dataclass(frozen=True)
class ComplexityFactors(_Serializable):
    word_count: int
    question_count: int
    technical_terms: int
    requires_multiple_steps: bool
    requires_external_data: bool
    requires_synthesis: bool


@dataclass(frozen=True)
class QueryComplexity(_Serializable):
    level: ComplexityLevel
    score: float
    factors: ComplexityFactors

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"complexity score out of range: {self.score}")


@dataclass(frozen=True)
class ClassificationResult(_Serializable):
    intent: UserIntent
    complexity: QueryComplexity


@dataclass(frozen=True)
class RoutingSummary(_Serializable):
    """Routing decision fields stamped onto a response's metadata."""
    selected_agent: AgentType
    confidence: float
    reasoning: str


@dataclass(frozen=True)
class RoutingDecision(_Serializable):
    """
    Output of agent selection.

    Invariants:
        - confidence is within [0, 1]
        - fallback_agent, when set, differs from selected_agent
        - suggested_sources is non-empty, ordered by priority
    """
    selected_agent: AgentType
    confidence: float
    reasoning: str
    suggested_sources: Tuple[str, ...]
    estimated_complexity: ComplexityLevel
    fallback_agent: Optional[AgentType] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "suggested_sources", tuple(self.suggested_sources))
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"routing confidence out of range: {self.confidence}")
        if self.fallback_agent is not None and self.fallback_agent == self.selected_agent:
            raise ValueError("fallback agent must differ from the selected agent")
        if not self.suggested_sources:
            raise ValueError("suggested_sources cannot be empty")

    def summary(self) -> RoutingSummary:
        return RoutingSummary(
            selected_agent=self.selected_agent,
            confidence=self.confidence,
            reasoning=self.reasoning,
        )


# ============================================================================
# RESPONSE
# ============================================================================

@dataclass(frozen=True)
class SourceSummary(_Serializable):
    """Short summary of one retrieved passage."""
    id: str
    content: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ErrorDetails(_Serializable):
    code: ErrorCode
    message: str
    retryable: bool = True


@dataclass(frozen=True)
class ResponseMetadata(_Serializable):
    model_used: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    response_time_ms: Optional[int] = None
    sources: Tuple[SourceSummary, ...] = ()
    confidence: Optional[float] = None
    citations: Tuple[str, ...] = ()
    sub_questions: Tuple[str, ...] = ()
    orchestration_time_ms: Optional[int] = None
    routing_decision: Optional[RoutingSummary] = None


@dataclass(frozen=True)
class AgentResponse(_Serializable):
    """
    Result of one routing call.

    `agent` is the agent that actually produced the content, which differs
    from the routing decision when a fallback ran. When error_details is
    present, content is a fixed user-safe apology.
    """
    content: str
    agent: AgentType
    metadata: ResponseMetadata
    streaming_supported: bool
    error_details: Optional[ErrorDetails] = None

    def __post_init__(self) -> None:
        if self.error_details is not None and self.content not in APOLOGY_MESSAGES:
            raise ValueError("error responses must carry a user-safe apology as content")

    @property
    def succeeded(self) -> bool:
        return self.error_details is None


# ============================================================================
# STREAMING EVENTS
# ============================================================================

@dataclass(frozen=True)
class StreamChunk:
    """One incremental piece of generated text."""
    text: str


@dataclass(frozen=True)
class StreamComplete:
    """Terminal stream event carrying the accumulated response."""
    response: AgentResponse
