"""
Agent selection.

Pure functions mapping (intent, complexity, available sources) to a routing
decision. No I/O and no state: identical inputs always give identical
decisions.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from agent_router.config.constants import AgentType, ComplexityLevel, UserIntent
from agent_router.routing.patterns import AGENT_DOMAIN_KEYWORDS
from agent_router.schema import ClassificationResult, QueryComplexity, RoutingDecision

BASE_CONFIDENCE = 0.7
KEYWORD_CONFIDENCE_BOOST = 0.2
SIMPLE_QA_CONFIDENCE_BOOST = 0.1

RESEARCH_SOURCE_LIMIT = 3
DEFAULT_SOURCE_LIMIT = 2

# One-hop fallback chain
FALLBACK_AGENTS: Dict[AgentType, AgentType] = {
    AgentType.QA: AgentType.RESEARCH,
    AgentType.REWRITE: AgentType.QA,
    AgentType.PLANNER: AgentType.QA,
    AgentType.RESEARCH: AgentType.QA,
}


def select_agent(
    intent: UserIntent,
    complexity: QueryComplexity,
    available_sources: Sequence[str],
) -> AgentType:
    """
    Choose the agent for a classified query.

    Priority order:
    1. summarization / rewriting -> rewrite
    2. planning -> planner
    3. research / analysis -> research
    4. comparison -> research when complex, else qa
    5. everything else -> planner (complex and multi-step), research
       (complex or synthesis), else qa

    `available_sources` does not influence the agent; it is accepted so the
    selector's signature matches the full routing input.
    """
    if intent in (UserIntent.SUMMARIZATION, UserIntent.REWRITING):
        return AgentType.REWRITE

    if intent == UserIntent.PLANNING:
        return AgentType.PLANNER

    if intent in (UserIntent.RESEARCH, UserIntent.ANALYSIS):
        return AgentType.RESEARCH

    if intent == UserIntent.COMPARISON:
        return AgentType.RESEARCH if complexity.level == ComplexityLevel.COMPLEX else AgentType.QA

    # question_answering, general_chat
    if complexity.level == ComplexityLevel.COMPLEX and complexity.factors.requires_multiple_steps:
        return AgentType.PLANNER
    if complexity.level == ComplexityLevel.COMPLEX or complexity.factors.requires_synthesis:
        return AgentType.RESEARCH
    return AgentType.QA


def fallback_for(agent: AgentType) -> AgentType:
    return FALLBACK_AGENTS[agent]


def calculate_confidence(query: str, agent: AgentType, complexity: QueryComplexity) -> float:
    confidence = BASE_CONFIDENCE

    lower_query = (query or "").lower()
    if any(keyword in lower_query for keyword in AGENT_DOMAIN_KEYWORDS.get(agent, ())):
        confidence += KEYWORD_CONFIDENCE_BOOST

    if agent == AgentType.QA and complexity.level == ComplexityLevel.SIMPLE:
        confidence += SIMPLE_QA_CONFIDENCE_BOOST

    return round(min(confidence, 1.0), 6)


def generate_reasoning(agent: AgentType, intent: UserIntent, complexity: QueryComplexity) -> str:
    reasons = [
        f"Selected {agent.value} agent for {intent.value} task",
        f"Query complexity: {complexity.level.value}",
    ]
    if complexity.factors.requires_multiple_steps:
        reasons.append("Multi-step approach needed")
    if complexity.factors.requires_synthesis:
        reasons.append("Information synthesis required")
    return "; ".join(reasons)


def suggest_sources(
    intent: UserIntent,
    agent: AgentType,
    available_sources: Sequence[str],
    primary_source: str = "openai",
) -> List[str]:
    """
    Pick retrieval sources for the chosen agent, in priority order.

    Never returns an empty list: when nothing is available the primary
    source is assumed.
    """
    available = list(available_sources)

    if agent == AgentType.RESEARCH or intent == UserIntent.RESEARCH:
        suggested = available[:RESEARCH_SOURCE_LIMIT]
    elif agent == AgentType.QA and primary_source in available:
        suggested = [primary_source]
    else:
        suggested = available[:DEFAULT_SOURCE_LIMIT]

    return suggested or [primary_source]


def build_routing_decision(
    query: str,
    classification: ClassificationResult,
    available_sources: Sequence[str],
    primary_source: str = "openai",
) -> RoutingDecision:
    intent = classification.intent
    complexity = classification.complexity

    selected = select_agent(intent, complexity, available_sources)
    return RoutingDecision(
        selected_agent=selected,
        fallback_agent=fallback_for(selected),
        confidence=calculate_confidence(query, selected, complexity),
        reasoning=generate_reasoning(selected, intent, complexity),
        suggested_sources=tuple(suggest_sources(intent, selected, available_sources, primary_source)),
        estimated_complexity=complexity.level,
    )
