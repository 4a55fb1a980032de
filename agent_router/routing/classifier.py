"""
Query classification: intent and complexity.

Responsibilities:
- Use a "model as a function" to label the query with one of the eight
  intents, normalizing the raw reply through INTENT_KEYWORDS.
- Score query complexity with a local, explainable heuristic built from the
  pattern families in patterns.py.

Intent classification fails open: any error or unrecognized reply yields
question answering so routing always proceeds. Complexity analysis is a
pure function of the query text.
"""

from __future__ import annotations

from typing import Optional

from agent_router.config.constants import (
    MODERATE_SCORE_THRESHOLD,
    SIMPLE_SCORE_THRESHOLD,
    ComplexityLevel,
    MessageRole,
    UserIntent,
)
from agent_router.llm.text_generator import TextGenerator
from agent_router.routing.patterns import (
    DEFAULT_INTENT,
    EXTERNAL_DATA_PATTERNS,
    INTENT_KEYWORDS,
    MULTI_STEP_PATTERNS,
    SYNTHESIS_PATTERNS,
    TECHNICAL_TERM_PATTERNS,
    any_match,
    count_matches,
)
from agent_router.schema import ChatMessage, ComplexityFactors, QueryComplexity
from agent_router.utils.exceptions import ClassificationError
from agent_router.utils.logger import get_logger

INTENT_MAX_TOKENS = 50
INTENT_TEMPERATURE = 0.1

INTENT_PROMPT_TEMPLATE = (
    "Classify the user intent for this query. Respond with only one of these categories:\n"
    "- question_answering: Direct questions seeking factual information\n"
    "- summarization: Requests to summarize or condense information\n"
    "- rewriting: Requests to rephrase, rewrite, or reformulate text\n"
    "- planning: Requests to break down complex tasks or create plans\n"
    "- research: Requests for comprehensive investigation or analysis\n"
    "- comparison: Requests to compare multiple items or concepts\n"
    "- analysis: Requests for deep analysis or evaluation\n"
    "- general_chat: Casual conversation or unclear intent\n\n"
    'Query: "{query}"\n\n'
    "Intent:"
)

# Weights of the complexity score; each term is capped before summation
WORD_COUNT_DIVISOR = 50
WORD_COUNT_CAP = 0.3
QUESTION_WEIGHT = 0.1
QUESTION_CAP = 0.2
TECHNICAL_TERM_WEIGHT = 0.05
TECHNICAL_TERM_CAP = 0.2
MULTI_STEP_WEIGHT = 0.15
EXTERNAL_DATA_WEIGHT = 0.10
SYNTHESIS_WEIGHT = 0.15


def normalize_intent(raw_label: str) -> Optional[UserIntent]:
    """Map a free-form LLM label onto an intent, or None when nothing matches."""
    label = (raw_label or "").strip().lower()
    for keywords, intent in INTENT_KEYWORDS:
        if any(keyword in label for keyword in keywords):
            return intent
    return None


def count_technical_terms(query: str) -> int:
    return count_matches(TECHNICAL_TERM_PATTERNS, query)


def detect_multi_step(query: str) -> bool:
    return any_match(MULTI_STEP_PATTERNS, query)


def detect_external_data_need(query: str) -> bool:
    return any_match(EXTERNAL_DATA_PATTERNS, query)


def detect_synthesis_need(query: str) -> bool:
    return any_match(SYNTHESIS_PATTERNS, query)


def complexity_level(score: float) -> ComplexityLevel:
    if score <= SIMPLE_SCORE_THRESHOLD:
        return ComplexityLevel.SIMPLE
    if score <= MODERATE_SCORE_THRESHOLD:
        return ComplexityLevel.MODERATE
    return ComplexityLevel.COMPLEX


def score_complexity(factors: ComplexityFactors) -> float:
    score = 0.0
    score += min(factors.word_count / WORD_COUNT_DIVISOR, WORD_COUNT_CAP)
    score += min(factors.question_count * QUESTION_WEIGHT, QUESTION_CAP)
    score += min(factors.technical_terms * TECHNICAL_TERM_WEIGHT, TECHNICAL_TERM_CAP)
    score += MULTI_STEP_WEIGHT if factors.requires_multiple_steps else 0.0
    score += EXTERNAL_DATA_WEIGHT if factors.requires_external_data else 0.0
    score += SYNTHESIS_WEIGHT if factors.requires_synthesis else 0.0
    # Rounded so that boundary scores compare exactly against the thresholds
    return round(min(score, 1.0), 6)


def analyze_complexity(query: str) -> QueryComplexity:
    """
    Compute the heuristic complexity of a query.

    Args:
        query: Raw query text

    Returns:
        QueryComplexity: level, score in [0, 1], and the contributing factors
    """
    query = query or ""
    factors = ComplexityFactors(
        word_count=len(query.split()),
        question_count=query.count("?"),
        technical_terms=count_technical_terms(query),
        requires_multiple_steps=detect_multi_step(query),
        requires_external_data=detect_external_data_need(query),
        requires_synthesis=detect_synthesis_need(query),
    )
    score = score_complexity(factors)
    return QueryComplexity(level=complexity_level(score), score=score, factors=factors)


class IntentClassifier:
    """
    LLM-backed intent classifier.

    The model is asked for exactly one label; the reply is normalized by
    keyword matching, and any failure falls back to question answering.
    """

    def __init__(self, generator: TextGenerator, model_id: str) -> None:
        self.logger = get_logger("routing.intent")
        self._generator = generator
        self._model_id = model_id

    async def classify_intent(self, query: str) -> UserIntent:
        try:
            raw_output = await self._request_label(query)
        except Exception as e:
            self.logger.warning(
                f"[IntentClassifier] Intent classification failed: {e}; "
                f"defaulting to {DEFAULT_INTENT.value}."
            )
            return DEFAULT_INTENT

        intent = normalize_intent(raw_output)
        if intent is None:
            self.logger.warning(
                f"[IntentClassifier] Unrecognized intent label {raw_output!r}; "
                f"defaulting to {DEFAULT_INTENT.value}."
            )
            return DEFAULT_INTENT
        return intent

    async def _request_label(self, query: str) -> str:
        prompt = INTENT_PROMPT_TEMPLATE.format(query=query)
        result = await self._generator.generate(
            [ChatMessage(role=MessageRole.USER, content=prompt)],
            model_id=self._model_id,
            max_tokens=INTENT_MAX_TOKENS,
            temperature=INTENT_TEMPERATURE,
        )
        if not result.text or not result.text.strip():
            raise ClassificationError("empty intent label")
        return result.text
