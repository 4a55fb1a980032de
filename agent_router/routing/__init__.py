"""
Routing module.

This package decides which agent should handle a query:

- patterns: keyword/regex tables (intent labels, technical terms, signals)
- classifier: IntentClassifier (LLM label) and analyze_complexity (heuristic)
- source_resolver: SourceResolver (available retrieval sources, fail-open)
- selector: pure selection functions and the fallback table
- router: SmartRouter combining the above into a RoutingDecision
"""

from agent_router.routing.classifier import IntentClassifier, analyze_complexity, normalize_intent
from agent_router.routing.router import SmartRouter
from agent_router.routing.selector import (
    FALLBACK_AGENTS,
    build_routing_decision,
    select_agent,
    suggest_sources,
)
from agent_router.routing.source_resolver import SourceResolver

__all__ = [
    "FALLBACK_AGENTS",
    "IntentClassifier",
    "SmartRouter",
    "SourceResolver",
    "analyze_complexity",
    "build_routing_decision",
    "normalize_intent",
    "select_agent",
    "suggest_sources",
]
