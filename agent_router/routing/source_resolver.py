"""
Resolution of the retrieval sources that currently exist.

Asks the retrieval backend for its sources and fails open to a fixed
default list, so routing never blocks on the vector store.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from agent_router.config.constants import UNIFIED_SOURCE_NAME
from agent_router.retrieval.base_retriever import RetrievalService
from agent_router.utils.logger import get_logger


class SourceResolver:
    """Lists available retrieval sources with a fail-open default."""

    def __init__(
        self,
        retrieval: Optional[RetrievalService],
        fallback_sources: Sequence[str] = ("openai", "memory"),
    ) -> None:
        self.logger = get_logger("routing.sources")
        self._retrieval = retrieval
        self._fallback_sources = list(fallback_sources)

    @property
    def fallback_sources(self) -> List[str]:
        return list(self._fallback_sources)

    async def resolve(self) -> List[str]:
        """
        Return available sources in backend order, without the aggregate
        pseudo-source.
        """
        if self._retrieval is None:
            return self.fallback_sources

        try:
            sources = await self._retrieval.list_available_sources()
        except Exception as e:
            self.logger.warning(
                f"[SourceResolver] Failed to get available sources, using defaults: {e}"
            )
            return self.fallback_sources

        return [source for source in sources if source != UNIFIED_SOURCE_NAME]
