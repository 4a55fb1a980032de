"""
Timeout and retry policy for one agent invocation.

Attempts are strictly sequential: each one is raced against the per-attempt
timeout with asyncio.wait_for (which cancels the attempt on expiry), and
failed attempts are followed by exponential backoff of 2 ** attempt
seconds. No backoff follows the last attempt.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from agent_router.schema import AgentResponse
from agent_router.utils.exceptions import AgentExecutionError, AgentTimeoutError
from agent_router.utils.logger import get_logger

SleepFn = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """Run an agent call with a per-attempt timeout and bounded retries."""

    def __init__(
        self,
        max_retries: int,
        timeout_seconds: float,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.logger = get_logger("orchestration.retry")
        self.max_retries = max_retries
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep

    @staticmethod
    def backoff_seconds(attempt: int) -> float:
        return float(2 ** attempt)

    async def run(
        self,
        label: str,
        call: Callable[[], Awaitable[AgentResponse]],
    ) -> AgentResponse:
        """
        Invoke `call` until it produces a usable response.

        A timeout, a raised exception, or a retryable error-bearing response
        counts as a failed attempt. A non-retryable error-bearing response is
        returned as-is.

        Raises:
            AgentTimeoutError: If the last failed attempt timed out
            AgentExecutionError: If every attempt failed otherwise
        """
        last_error: Optional[AgentExecutionError] = None

        for attempt in range(self.max_retries):
            try:
                response = await asyncio.wait_for(call(), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                last_error = AgentTimeoutError(
                    f"Agent {label} timed out after {self.timeout_seconds}s"
                )
            except AgentExecutionError as e:
                last_error = e
            except Exception as e:
                last_error = AgentExecutionError(f"Agent {label} failed: {e}")
            else:
                details = response.error_details
                if details is None or not details.retryable:
                    return response
                last_error = AgentExecutionError(
                    f"Agent {label} returned an error: {details.message}",
                    code=details.code,
                    retryable=details.retryable,
                )

            self.logger.warning(
                f"[RetryPolicy] Attempt {attempt + 1}/{self.max_retries} for agent {label} failed: {last_error}"
            )

            # Don't back off after the last attempt
            if attempt < self.max_retries - 1:
                await self._sleep(self.backoff_seconds(attempt))

        raise last_error or AgentExecutionError(
            f"Agent {label} failed after {self.max_retries} attempts"
        )
