"""Intent label normalization and fail-open classification."""

import pytest

from agent_router.config.constants import UserIntent
from agent_router.routing.classifier import IntentClassifier, normalize_intent
from tests.fakes import FakeTextGenerator


@pytest.mark.parametrize(
    "label, expected",
    [
        ("question_answering", UserIntent.QUESTION_ANSWERING),
        ("Factual lookup", UserIntent.QUESTION_ANSWERING),
        ("summarization", UserIntent.SUMMARIZATION),
        ("SUMMARIZE", UserIntent.SUMMARIZATION),
        ("rewriting", UserIntent.REWRITING),
        ("rephrasing", UserIntent.REWRITING),
        ("planning", UserIntent.PLANNING),
        ("research", UserIntent.RESEARCH),
        ("investigation", UserIntent.RESEARCH),
        ("comparison", UserIntent.COMPARISON),
        ("analysis", UserIntent.ANALYSIS),
        ("general_chat", UserIntent.GENERAL_CHAT),
        ("  Intent: research\n", UserIntent.RESEARCH),
    ],
)
def test_normalize_intent(label, expected):
    assert normalize_intent(label) == expected


@pytest.mark.parametrize("label", ["", "banana", None])
def test_normalize_intent_unknown(label):
    assert normalize_intent(label) is None


@pytest.mark.asyncio
async def test_classifier_returns_normalized_label():
    classifier = IntentClassifier(FakeTextGenerator(intent_label="Planning"), "routing-model")

    assert await classifier.classify_intent("Plan my week") == UserIntent.PLANNING


@pytest.mark.asyncio
@pytest.mark.parametrize("label", [RuntimeError("boom"), "   ", "no idea"])
async def test_classifier_fails_open_to_question_answering(label):
    classifier = IntentClassifier(FakeTextGenerator(intent_label=label), "routing-model")

    assert await classifier.classify_intent("anything") == UserIntent.QUESTION_ANSWERING
