"""
SmartRouter: turns a query into a RoutingDecision.

Responsibilities:
- Classify intent (LLM-backed, fail-open) and resolve available sources
  concurrently; both must finish before selection starts.
- Score complexity locally.
- Delegate the decision itself to the pure functions in selector.py.

The router does not execute agents and keeps no cache: every call
classifies afresh.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from agent_router.config.constants import UserIntent
from agent_router.routing.classifier import IntentClassifier, analyze_complexity
from agent_router.routing.selector import build_routing_decision
from agent_router.routing.source_resolver import SourceResolver
from agent_router.schema import ClassificationResult, RequestContext, RoutingDecision
from agent_router.utils.exceptions import RequestValidationError
from agent_router.utils.logger import get_logger


class SmartRouter:
    """Router combining the intent classifier, source resolver and selector."""

    def __init__(
        self,
        classifier: IntentClassifier,
        source_resolver: SourceResolver,
        primary_source: str = "openai",
    ) -> None:
        self.logger = get_logger("routing")
        self._classifier = classifier
        self._source_resolver = source_resolver
        self._primary_source = primary_source

    async def classify(self, query: str, context: Optional[RequestContext] = None) -> ClassificationResult:
        """Return intent and complexity without selecting an agent."""
        intent = await self._intent(query, context)
        return ClassificationResult(intent=intent, complexity=analyze_complexity(query))

    async def route(self, query: str, context: Optional[RequestContext] = None) -> RoutingDecision:
        """
        Compute a routing decision for the query.

        Raises:
            RequestValidationError: If the query is empty
        """
        if not isinstance(query, str) or not query.strip():
            raise RequestValidationError("SmartRouter received an invalid/empty query")

        self.logger.info(f"[SmartRouter] Routing query: {query[:100]}...")

        intent, available_sources = await asyncio.gather(
            self._intent(query, context),
            self._source_resolver.resolve(),
        )
        classification = ClassificationResult(intent=intent, complexity=analyze_complexity(query))

        decision = build_routing_decision(
            query,
            classification,
            available_sources,
            primary_source=self._primary_source,
        )
        self.logger.info(
            f"[SmartRouter] Routed query to {decision.selected_agent.value} "
            f"(intent={intent.value}, complexity={classification.complexity.level.value}, "
            f"confidence={decision.confidence:.2f})"
        )
        return decision

    async def _intent(self, query: str, context: Optional[RequestContext]) -> UserIntent:
        # A caller-supplied intent hint replaces the LLM call
        if context is not None and context.user_intent is not None:
            return context.user_intent
        return await self._classifier.classify_intent(query)
