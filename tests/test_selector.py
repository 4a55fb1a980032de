"""Agent selection table, confidence, reasoning and source suggestion."""

import itertools

import pytest

from agent_router.config.constants import AgentType, ComplexityLevel, UserIntent
from agent_router.routing.selector import (
    FALLBACK_AGENTS,
    build_routing_decision,
    calculate_confidence,
    generate_reasoning,
    select_agent,
    suggest_sources,
)
from agent_router.schema import ClassificationResult, ComplexityFactors, QueryComplexity

SOURCE_SETS = [
    (),
    ("openai",),
    ("memory", "openai"),
    ("docs", "memory", "openai", "wiki"),
]


def _complexity(level, multi_step=False, synthesis=False) -> QueryComplexity:
    score = {ComplexityLevel.SIMPLE: 0.2, ComplexityLevel.MODERATE: 0.5, ComplexityLevel.COMPLEX: 0.8}[level]
    factors = ComplexityFactors(
        word_count=10,
        question_count=1,
        technical_terms=0,
        requires_multiple_steps=multi_step,
        requires_external_data=False,
        requires_synthesis=synthesis,
    )
    return QueryComplexity(level=level, score=score, factors=factors)


def _expected_agent(intent, level, multi_step, synthesis) -> AgentType:
    complex_ = level == ComplexityLevel.COMPLEX
    if intent in (UserIntent.SUMMARIZATION, UserIntent.REWRITING):
        return AgentType.REWRITE
    if intent == UserIntent.PLANNING:
        return AgentType.PLANNER
    if intent in (UserIntent.RESEARCH, UserIntent.ANALYSIS):
        return AgentType.RESEARCH
    if intent == UserIntent.COMPARISON:
        return AgentType.RESEARCH if complex_ else AgentType.QA
    if complex_ and multi_step:
        return AgentType.PLANNER
    if complex_ or synthesis:
        return AgentType.RESEARCH
    return AgentType.QA


@pytest.mark.parametrize(
    "intent, level, multi_step, synthesis, sources",
    list(itertools.product(UserIntent, ComplexityLevel, [False, True], [False, True], SOURCE_SETS)),
)
def test_selection_table(intent, level, multi_step, synthesis, sources):
    complexity = _complexity(level, multi_step, synthesis)

    agent = select_agent(intent, complexity, sources)
    decision = build_routing_decision(
        "neutral query", ClassificationResult(intent=intent, complexity=complexity), sources, "openai"
    )

    assert agent == _expected_agent(intent, level, multi_step, synthesis)
    assert decision.selected_agent == agent
    assert decision.fallback_agent == FALLBACK_AGENTS[agent]
    assert decision.fallback_agent != decision.selected_agent
    assert 0.0 <= decision.confidence <= 1.0
    assert len(decision.suggested_sources) >= 1
    assert decision.estimated_complexity == level


def test_fallback_table():
    assert FALLBACK_AGENTS == {
        AgentType.QA: AgentType.RESEARCH,
        AgentType.REWRITE: AgentType.QA,
        AgentType.PLANNER: AgentType.QA,
        AgentType.RESEARCH: AgentType.QA,
    }


@pytest.mark.parametrize(
    "query, agent, level, expected",
    [
        ("neutral", AgentType.QA, ComplexityLevel.MODERATE, 0.7),
        ("neutral", AgentType.QA, ComplexityLevel.SIMPLE, 0.8),
        ("Please REPHRASE this", AgentType.REWRITE, ComplexityLevel.SIMPLE, 0.9),
        ("Give me a step by step guide", AgentType.PLANNER, ComplexityLevel.COMPLEX, 0.9),
        ("research and analyze", AgentType.RESEARCH, ComplexityLevel.COMPLEX, 0.9),
        # Keywords of another agent's domain do not count
        ("rewrite it", AgentType.QA, ComplexityLevel.MODERATE, 0.7),
        ("rewrite it", AgentType.QA, ComplexityLevel.SIMPLE, 0.8),
    ],
)
def test_confidence(query, agent, level, expected):
    assert calculate_confidence(query, agent, _complexity(level)) == pytest.approx(expected)


def test_reasoning_lists_decision_path():
    reasoning = generate_reasoning(
        AgentType.PLANNER,
        UserIntent.QUESTION_ANSWERING,
        _complexity(ComplexityLevel.COMPLEX, multi_step=True, synthesis=True),
    )

    assert reasoning == (
        "Selected planner agent for question_answering task; "
        "Query complexity: complex; "
        "Multi-step approach needed; "
        "Information synthesis required"
    )


def test_reasoning_without_flags():
    reasoning = generate_reasoning(AgentType.QA, UserIntent.GENERAL_CHAT, _complexity(ComplexityLevel.SIMPLE))

    assert reasoning == "Selected qa agent for general_chat task; Query complexity: simple"


@pytest.mark.parametrize(
    "intent, agent, available, expected",
    [
        (UserIntent.RESEARCH, AgentType.RESEARCH, ["a", "b", "c", "d"], ["a", "b", "c"]),
        (UserIntent.ANALYSIS, AgentType.RESEARCH, ["a"], ["a"]),
        (UserIntent.QUESTION_ANSWERING, AgentType.QA, ["memory", "openai"], ["openai"]),
        (UserIntent.QUESTION_ANSWERING, AgentType.QA, ["memory", "docs", "wiki"], ["memory", "docs"]),
        (UserIntent.REWRITING, AgentType.REWRITE, ["a", "b", "c"], ["a", "b"]),
        (UserIntent.PLANNING, AgentType.PLANNER, [], ["openai"]),
        (UserIntent.RESEARCH, AgentType.RESEARCH, [], ["openai"]),
    ],
)
def test_suggest_sources(intent, agent, available, expected):
    assert suggest_sources(intent, agent, available, "openai") == expected


def test_selection_is_deterministic():
    complexity = _complexity(ComplexityLevel.MODERATE, synthesis=True)
    classification = ClassificationResult(intent=UserIntent.GENERAL_CHAT, complexity=complexity)

    first = build_routing_decision("Give me a detailed overview", classification, ["openai"])
    second = build_routing_decision("Give me a detailed overview", classification, ["openai"])

    assert first == second
    assert first.to_dict()["selected_agent"] == "research"
