"""
Keyword and regex tables used by query classification.

Each family is a module-level constant so it can be inspected and tested on
its own. The complexity heuristics in classifier.py only combine these
tables; they never embed patterns of their own.
"""

import re
from typing import Pattern, Tuple

from agent_router.config.constants import AgentType, UserIntent


# ============================================================================
# INTENT LABEL NORMALIZATION
# ============================================================================

# Ordered: the first entry whose keyword appears in the (lower-cased) LLM
# reply wins. Anything unmatched maps to question answering.
INTENT_KEYWORDS: Tuple[Tuple[Tuple[str, ...], UserIntent], ...] = (
    (("question", "factual"), UserIntent.QUESTION_ANSWERING),
    (("summar",), UserIntent.SUMMARIZATION),
    (("rewrit", "rephras"), UserIntent.REWRITING),
    (("plan",), UserIntent.PLANNING),
    (("research", "investigat"), UserIntent.RESEARCH),
    (("compar",), UserIntent.COMPARISON),
    (("analy",), UserIntent.ANALYSIS),
    (("general", "chat"), UserIntent.GENERAL_CHAT),
)

DEFAULT_INTENT = UserIntent.QUESTION_ANSWERING


# ============================================================================
# TECHNICAL TERMS
# ============================================================================

TECHNICAL_TERM_PATTERNS: Tuple[Pattern[str], ...] = (
    # Words carrying a protocol / format / hardware suffix (e.g. "RestAPI", "MySQL")
    re.compile(r"\b\w+(?:API|SDK|HTTP|JSON|XML|SQL|ML|AI|GPU|CPU|RAM|SSD|HDD)\b", re.IGNORECASE),
    # Domain nouns
    re.compile(
        r"\b(?:algorithm|database|framework|architecture|protocol|encryption|authentication)\b",
        re.IGNORECASE,
    ),
    # Bare acronyms (case-sensitive)
    re.compile(r"\b[A-Z]{2,}\b"),
)


# ============================================================================
# COMPLEXITY SIGNALS
# ============================================================================

MULTI_STEP_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b(?:first|then|next|after|finally|step|stage|phase)\b", re.IGNORECASE),
    re.compile(r"\b(?:how to|what are the steps|guide|tutorial|process)\b", re.IGNORECASE),
    re.compile(r"\d+\.\s|\d+\)\s"),  # numbered lists
    re.compile(r"\band\s+(?:also|then|additionally)", re.IGNORECASE),
)

EXTERNAL_DATA_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b(?:current|latest|recent|today|this year|2024|2025)\b", re.IGNORECASE),
    re.compile(r"\b(?:price|cost|rate|statistics|data|news|update)\b", re.IGNORECASE),
    re.compile(r"\b(?:compare|versus|vs\.?|difference between)\b", re.IGNORECASE),
)

SYNTHESIS_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b(?:analyze|evaluate|assess|review|examine)\b", re.IGNORECASE),
    re.compile(r"\b(?:pros and cons|advantages|disadvantages|benefits|drawbacks)\b", re.IGNORECASE),
    re.compile(r"\b(?:relationship|connection|correlation|impact|effect)\b", re.IGNORECASE),
    re.compile(r"\b(?:comprehensive|thorough|detailed|in-depth)\b", re.IGNORECASE),
)


# ============================================================================
# ROUTING CONFIDENCE
# ============================================================================

# Explicit query keywords that confirm the chosen agent's domain
AGENT_DOMAIN_KEYWORDS = {
    AgentType.REWRITE: ("rewrite", "rephrase"),
    AgentType.PLANNER: ("plan", "step"),
    AgentType.RESEARCH: ("research", "analyze"),
}


def count_matches(patterns: Tuple[Pattern[str], ...], text: str) -> int:
    """Total number of non-overlapping matches across all patterns."""
    return sum(len(pattern.findall(text)) for pattern in patterns)


def any_match(patterns: Tuple[Pattern[str], ...], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)
