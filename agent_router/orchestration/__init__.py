"""
Orchestration module.

- Orchestrator: validate -> route -> execute (retry, fallback) -> stamp
- RetryPolicy: per-attempt timeout and exponential backoff
- ResponseStream: queue-backed streaming channel
- HealthChecker / HealthReport: agent and provider health
"""

from agent_router.orchestration.health import HealthChecker, HealthReport
from agent_router.orchestration.orchestrator import Orchestrator
from agent_router.orchestration.retry import RetryPolicy
from agent_router.orchestration.streaming import ResponseStream

__all__ = [
    "HealthChecker",
    "HealthReport",
    "Orchestrator",
    "ResponseStream",
    "RetryPolicy",
]
