"""Pattern families used by the complexity heuristic."""

import pytest

from agent_router.routing.classifier import (
    count_technical_terms,
    detect_external_data_need,
    detect_multi_step,
    detect_synthesis_need,
)
from agent_router.routing.patterns import (
    EXTERNAL_DATA_PATTERNS,
    MULTI_STEP_PATTERNS,
    SYNTHESIS_PATTERNS,
    TECHNICAL_TERM_PATTERNS,
    any_match,
    count_matches,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("How do I call the RestAPI from MySQL?", 2),
        ("Explain the database encryption protocol", 3),
        ("Use the GPU and the CPU", 2),
        ("nothing technical here", 0),
    ],
)
def test_count_technical_terms(text, expected):
    assert count_technical_terms(text) == expected


def test_acronyms_are_case_sensitive():
    assert count_technical_terms("the llm is fast") == 0
    assert count_technical_terms("the LLM is fast") == 1


@pytest.mark.parametrize(
    "text",
    [
        "First install it, then run it",
        "What are the steps to deploy?",
        "1. Open the file",
        "Do this and then that",
        "A tutorial on parsing",
    ],
)
def test_multi_step_detected(text):
    assert detect_multi_step(text) is True


@pytest.mark.parametrize(
    "text",
    [
        "What is the latest release?",
        "Show me the price of gold",
        "Postgres vs. MySQL",
        "What is the difference between TCP and UDP?",
    ],
)
def test_external_data_detected(text):
    assert detect_external_data_need(text) is True


@pytest.mark.parametrize(
    "text",
    [
        "Assess the proposal",
        "List the pros and cons",
        "What is the impact on revenue?",
        "Give a comprehensive overview",
    ],
)
def test_synthesis_detected(text):
    assert detect_synthesis_need(text) is True


def test_plain_question_triggers_no_signal():
    text = "Who wrote this poem"
    assert not detect_multi_step(text)
    assert not detect_external_data_need(text)
    assert not detect_synthesis_need(text)


def test_pattern_helpers():
    assert count_matches(MULTI_STEP_PATTERNS, "first this, then that, finally done") == 3
    assert any_match(SYNTHESIS_PATTERNS, "evaluate") is True
    assert any_match(EXTERNAL_DATA_PATTERNS, "timeless") is False
    assert count_matches(TECHNICAL_TERM_PATTERNS, "") == 0
