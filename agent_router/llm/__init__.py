"""
LLM access layer.

- TextGenerator: abstract text-completion capability
- LangChainTextGenerator: ChatOpenAI implementation with tool loop
"""

from agent_router.llm.text_generator import (
    GenerationResult,
    LangChainTextGenerator,
    TextGenerator,
    TokenUsage,
)

__all__ = [
    "GenerationResult",
    "LangChainTextGenerator",
    "TextGenerator",
    "TokenUsage",
]
