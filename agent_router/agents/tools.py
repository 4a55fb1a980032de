"""
Per-request tool assembly for tool-using agents.

Tools are plain Python callables: the text generator binds them by
signature/docstring and locates them again by __name__ when the model
asks for a call.
"""

from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from agent_router.retrieval.base_retriever import RetrievalService
from agent_router.routing import classifier
from agent_router.schema import AgentCapability, AgentRequest
from agent_router.utils.logger import get_logger

logger = get_logger("agents.tools")

TOOL_CONTENT_PREVIEW_CHARS = 500


def build_tools(
    capability: AgentCapability,
    request: AgentRequest,
    retrieval: Optional[RetrievalService],
    threshold: float = 0.3,
    default_sources: Sequence[str] = ("openai",),
) -> Tuple[Callable[..., Any], ...]:
    """
    Build the tool set for one request.

    Returns an empty tuple unless the capability requires tools and the
    caller opted in via options.use_tools.
    """
    if not (capability.requires_tools and request.effective_options.use_tools):
        return ()

    sources = list(request.effective_context.sources or default_sources)

    async def search_documents(query: str, max_results: int = 5) -> Dict[str, Any]:
        """Search through uploaded documents and knowledge base.

        Args:
            query: Search query
            max_results: Maximum number of results
        """
        if retrieval is None:
            return {"error": "Search failed: no retrieval service configured"}
        try:
            passages = await retrieval.search(query, sources, max_results, threshold)
        except Exception as e:
            logger.warning(f"[search_documents] Search failed: {e}")
            return {"error": f"Search failed: {e}"}

        return {
            "results": [
                {
                    "content": p.content[:TOOL_CONTENT_PREVIEW_CHARS],
                    "score": p.similarity,
                    "source": p.source_name,
                    "metadata": p.metadata,
                }
                for p in passages
            ],
            "total_found": len(passages),
        }

    def analyze_complexity(task: str) -> Dict[str, Any]:
        """Analyze the complexity of a query or task.

        Args:
            task: Task or query to analyze
        """
        return classifier.analyze_complexity(task).to_dict()

    return (search_documents, analyze_complexity)
