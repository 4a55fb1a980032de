"""
Construction-time configuration for the Orchestrator.

OrchestratorConfig is an immutable snapshot of the runtime knobs the
orchestrator needs (timeouts, retry count, model defaults, retrieval
defaults). It is built from the environment-backed `config` singleton by
default, or constructed explicitly in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from agent_router.config.settings import Config, config
from agent_router.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Runtime configuration for one Orchestrator instance.

    Attributes:
        default_model: Model used when a request does not name one
        fallback_model: Model used for health checks
        routing_model: Model used for intent classification
        timeout_seconds: Per-attempt agent timeout
        max_retries: Attempts per agent invocation (not across agents)
        health_check_timeout_seconds: Per-agent health-check timeout
        search_threshold: Minimum similarity for retrieved passages
        default_max_results: max_results used when the request omits it
        primary_source: Source preferred for simple QA traffic
        fallback_sources: Sources assumed when the backend cannot list them
        stream_buffer_size: Max chunks buffered between producer and consumer
    """
    default_model: str = "gpt-4o-mini"
    fallback_model: str = "gpt-4.1-mini"
    routing_model: str = "gpt-4.1-mini"
    timeout_seconds: float = 30.0
    max_retries: int = 2
    health_check_timeout_seconds: float = 5.0
    search_threshold: float = 0.3
    default_max_results: int = 10
    primary_source: str = "openai"
    fallback_sources: Tuple[str, ...] = field(default=("openai", "memory"))
    stream_buffer_size: int = 32

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1")
        if self.timeout_seconds <= 0 or self.health_check_timeout_seconds <= 0:
            raise ConfigurationError("timeouts must be positive")
        if not 0.0 <= self.search_threshold <= 1.0:
            raise ConfigurationError("search_threshold must be within [0, 1]")
        if not 1 <= self.default_max_results <= 20:
            raise ConfigurationError("default_max_results must be within [1, 20]")
        if not self.primary_source:
            raise ConfigurationError("primary_source cannot be empty")
        if not self.fallback_sources:
            raise ConfigurationError("fallback_sources cannot be empty")
        if self.stream_buffer_size < 0:
            raise ConfigurationError("stream_buffer_size cannot be negative")

    @classmethod
    def from_settings(cls, settings: Optional[Config] = None) -> "OrchestratorConfig":
        """Build a config snapshot from the environment-backed settings."""
        settings = settings or config
        return cls(
            default_model=settings.LLM_MODEL,
            fallback_model=settings.FALLBACK_LLM_MODEL,
            routing_model=settings.ROUTING_LLM_MODEL,
            timeout_seconds=settings.AGENT_TIMEOUT_SECONDS,
            max_retries=settings.AGENT_MAX_RETRIES,
            health_check_timeout_seconds=settings.HEALTH_CHECK_TIMEOUT_SECONDS,
            search_threshold=settings.SEARCH_THRESHOLD,
            default_max_results=settings.DEFAULT_MAX_RESULTS,
            primary_source=settings.PRIMARY_SOURCE,
            fallback_sources=tuple(settings.FALLBACK_SOURCES),
            stream_buffer_size=settings.STREAM_BUFFER_SIZE,
        )
