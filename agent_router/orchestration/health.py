"""
System health check.

Every registered agent gets one trivial request under a fixed timeout and
the results are folded into a worker status. Provider configuration and the
provider health call are folded into a provider status. The overall status
is the worse of the two.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from agent_router.agents.base_agent import BaseAgent
from agent_router.config.constants import HEALTH_SEVERITY, AgentType, HealthStatus
from agent_router.config.settings import config
from agent_router.llm.text_generator import TextGenerator
from agent_router.schema import AgentRequest, RequestOptions, _Serializable
from agent_router.utils.logger import get_logger

HEALTH_CHECK_QUERIES = ("Hello", "What is 2+2?", 'Rewrite: "hi there"')
MIN_HEALTH_CONTENT_LENGTH = 3

AGENT_AVAILABLE = "available"
AGENT_ERROR = "error"


@dataclass(frozen=True)
class AgentCheckResult(_Serializable):
    status: str
    last_checked: str
    response_time_ms: Optional[int] = None
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.status == AGENT_AVAILABLE


@dataclass(frozen=True)
class ProviderHealth(_Serializable):
    status: HealthStatus
    missing_keys: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceSummary(_Serializable):
    average_response_time_ms: int
    total_tests: int
    success_rate: float


@dataclass(frozen=True)
class HealthReport(_Serializable):
    status: HealthStatus
    agents: Dict[AgentType, AgentCheckResult]
    performance: PerformanceSummary
    providers: Optional[ProviderHealth] = None


def worker_status(available: int, total: int) -> HealthStatus:
    if total > 0 and available == total:
        return HealthStatus.HEALTHY
    if available > 0:
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


def provider_status(missing_keys: Sequence[str], provider_health: Mapping[str, Any]) -> HealthStatus:
    """Missing keys or a failed provider check are unhealthy; a slow one is degraded."""
    provider_check_status = provider_health.get("status")
    if missing_keys or provider_check_status == "error":
        return HealthStatus.UNHEALTHY
    if provider_check_status == "degraded":
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


def worse(a: HealthStatus, b: HealthStatus) -> HealthStatus:
    return a if HEALTH_SEVERITY[a] >= HEALTH_SEVERITY[b] else b


def summarize_performance(results: Sequence[AgentCheckResult]) -> PerformanceSummary:
    successes = [r for r in results if r.available]
    times = [r.response_time_ms for r in successes if r.response_time_ms is not None]
    average = sum(times) / len(times) if times else 0
    success_rate = len(successes) / len(results) if results else 0.0
    return PerformanceSummary(
        average_response_time_ms=int(round(average)),
        total_tests=len(successes),
        success_rate=round(success_rate, 2),
    )


class HealthChecker:
    """Checks agents and the text-generation provider."""

    def __init__(
        self,
        agents: Mapping[AgentType, BaseAgent],
        generator: TextGenerator,
        check_model: str,
        check_timeout_seconds: float = 5.0,
        missing_provider_keys: Callable[[], List[str]] = config.missing_provider_keys,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.logger = get_logger("orchestration.health")
        self._agents = agents
        self._generator = generator
        self._check_model = check_model
        self._check_timeout_seconds = check_timeout_seconds
        self._missing_provider_keys = missing_provider_keys
        self._clock = clock

    async def check(self, include_providers: bool = True) -> HealthReport:
        agent_types = list(self._agents)
        # Check queries are assigned round-robin
        results = await asyncio.gather(*(
            self._check_agent(agent_type, HEALTH_CHECK_QUERIES[i % len(HEALTH_CHECK_QUERIES)])
            for i, agent_type in enumerate(agent_types)
        ))
        check_results = dict(zip(agent_types, results))

        available = sum(1 for r in results if r.available)
        status = worker_status(available, len(results))

        providers = None
        if include_providers:
            providers = await self._check_providers()
            status = worse(status, providers.status)

        self.logger.info(
            f"[HealthChecker] {available}/{len(results)} agents available; overall status {status.value}"
        )
        return HealthReport(
            status=status,
            agents=check_results,
            performance=summarize_performance(results),
            providers=providers,
        )

    async def _check_agent(self, agent_type: AgentType, query: str) -> AgentCheckResult:
        agent = self._agents[agent_type]
        request = AgentRequest(
            query=query,
            options=RequestOptions(model_id=self._check_model, streaming=False, use_tools=False),
        )
        start = self._clock()
        try:
            response = await asyncio.wait_for(agent.execute(request), timeout=self._check_timeout_seconds)
        except asyncio.TimeoutError:
            return self._failed(f"Timeout after {self._check_timeout_seconds}s")
        except Exception as e:
            return self._failed(str(e))

        elapsed_ms = int((self._clock() - start) * 1000)
        if response.error_details is not None:
            return self._failed(response.error_details.message, elapsed_ms)
        if not response.content or len(response.content) < MIN_HEALTH_CONTENT_LENGTH:
            return self._failed("Invalid response content", elapsed_ms)

        return AgentCheckResult(
            status=AGENT_AVAILABLE,
            last_checked=_now_iso(),
            response_time_ms=elapsed_ms,
        )

    def _failed(self, error: str, elapsed_ms: Optional[int] = None) -> AgentCheckResult:
        return AgentCheckResult(
            status=AGENT_ERROR,
            last_checked=_now_iso(),
            response_time_ms=elapsed_ms,
            error=error,
        )

    async def _check_providers(self) -> ProviderHealth:
        missing = list(self._missing_provider_keys())
        try:
            provider_health = await self._generator.check_health()
        except Exception as e:
            provider_health = {"status": "error", "error": str(e)}

        return ProviderHealth(
            status=provider_status(missing, provider_health),
            missing_keys=missing,
            details=dict(provider_health),
        )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
