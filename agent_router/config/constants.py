"""
Constants and enumerations for the Agent Router.

This module defines all application-wide constants including:
- Agent types
- User intents and complexity levels
- Message roles
- Error codes
- User-facing apology messages
"""

from enum import Enum


# ============================================================================
# AGENT TYPES
# ============================================================================

class AgentType(Enum):
    """Enumeration for the specialized worker agents in the system."""
    QA = "qa"                # Question answering over retrieved context
    REWRITE = "rewrite"      # Summarize / rephrase / optimize text
    PLANNER = "planner"      # Break a task into sub-questions
    RESEARCH = "research"    # Multi-source research with citations


# ============================================================================
# INTENTS & COMPLEXITY
# ============================================================================

class UserIntent(Enum):
    """Closed set of task categories a query can be classified into."""
    QUESTION_ANSWERING = "question_answering"
    SUMMARIZATION = "summarization"
    REWRITING = "rewriting"
    PLANNING = "planning"
    RESEARCH = "research"
    COMPARISON = "comparison"
    ANALYSIS = "analysis"
    GENERAL_CHAT = "general_chat"


class ComplexityLevel(Enum):
    """Heuristic difficulty bucket of a query."""
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


# Score boundaries (inclusive upper bounds)
SIMPLE_SCORE_THRESHOLD = 0.3
MODERATE_SCORE_THRESHOLD = 0.6


# ============================================================================
# MESSAGES
# ============================================================================

class MessageRole(Enum):
    """Role tag of a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


# ============================================================================
# HEALTH
# ============================================================================

class HealthStatus(Enum):
    """Aggregate health of the system, ordered from best to worst."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


HEALTH_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}


# ============================================================================
# ERROR CODES
# ============================================================================

class ErrorCode(Enum):
    """Enumeration for error codes carried in ErrorDetails."""
    PROCESSING_ERROR = "processing_error"
    STREAMING_ERROR = "streaming_error"
    TIMEOUT = "timeout"
    ORCHESTRATION_ERROR = "orchestration_error"


# ============================================================================
# USER-FACING MESSAGES
# ============================================================================

# Content of any error-bearing response; internal error text never goes here.
ORCHESTRATION_APOLOGY = (
    "I encountered an error processing your request. Please try again."
)
AGENT_APOLOGY = (
    "I ran into a problem while working on your request. "
    "Please try again or rephrase your question."
)

APOLOGY_MESSAGES = frozenset({ORCHESTRATION_APOLOGY, AGENT_APOLOGY})


# ============================================================================
# RETRIEVAL
# ============================================================================

# Aggregate pseudo-source exposed by some retrieval backends; agents only
# understand individual sources.
UNIFIED_SOURCE_NAME = "unified"

UNKNOWN_MODEL = "unknown"
