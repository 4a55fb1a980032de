"""
Custom exception classes for the Agent Router.

This module defines a hierarchy of custom exceptions:
- Base exception class for the application
- Specific exception types for different error scenarios
- Allows for fine-grained error handling throughout the system
"""

from typing import Optional

from agent_router.config.constants import ErrorCode


class AgentRouterError(Exception):
    """
    Base exception class for all application-specific errors.

    All custom exceptions in this application inherit from this base class,
    allowing for catching all application errors with a single exception type
    while still maintaining specificity when needed.
    """
    pass


class RequestValidationError(AgentRouterError, ValueError):
    """
    Raised when an incoming request is malformed.

    This exception is raised before any agent runs when:
    - The query is empty or not a string
    - History entries carry an unknown role
    - Numeric options are out of range (max_results, temperature, max_tokens)
    """
    pass


class ClassificationError(AgentRouterError):
    """
    Raised when intent classification cannot produce a label.

    Never escapes the classifier: callers fall back to question answering.
    """
    pass


class RetrievalError(AgentRouterError):
    """
    Raised when there's an error during the retrieval process.

    This exception is raised by retrieval services when:
    - Query embedding generation fails
    - Vector similarity search fails
    - The list of sources cannot be read
    """
    pass


class AgentError(AgentRouterError):
    """
    Raised when there's an error in agent processing.

    This exception is raised by agents when:
    - LLM calls fail
    - Tool loops do not converge
    - Agent initialization fails
    """
    pass


class AgentExecutionError(AgentError):
    """
    Raised when an agent invocation fails after exhausting its retry budget.

    Carries the error code and retryable flag that end up in ErrorDetails.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.PROCESSING_ERROR,
        retryable: bool = True,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.retryable = retryable


class AgentTimeoutError(AgentExecutionError):
    """Raised when an agent attempt does not finish within its time budget."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=ErrorCode.TIMEOUT, retryable=True)


class OrchestrationError(AgentRouterError):
    """
    Raised for fatal orchestration problems.

    This exception is raised when:
    - A routing decision names an agent that is not registered
    - The registry cannot be built
    """

    def __init__(self, message: str, agent: Optional[str] = None) -> None:
        super().__init__(message)
        self.agent = agent


class ToolError(AgentRouterError):
    """
    Raised when there's an error with agent tools.

    This exception is raised when:
    - Tool invocation fails
    - Tool parameters are invalid
    """
    pass


class ConfigurationError(AgentRouterError):
    """
    Raised when there's a configuration error.

    This exception is raised when:
    - Required environment variables are missing
    - Configuration values are invalid
    """
    pass
