"""
Base retrieval interface.

This module defines the RetrievalService abstraction using the Dependency
Inversion Principle: agents and the source resolver depend on this
interface, never on a concrete vector store.

A retrieval service exposes a set of named sources (one per backing
collection or store) and searches across any subset of them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class RetrievedPassage:
    """
    One ranked passage returned by a search.

    Attributes:
        id: Unique identifier of the passage within its source
        content: Passage text
        source_name: Name of the source the passage came from
        similarity: Relevance score in [0, 1]
        metadata: Associated metadata stored alongside the passage
    """
    id: str
    content: str
    source_name: str
    similarity: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class RetrievalService(ABC):
    """
    Abstract interface for all retrieval backends.

    All retrieval services must implement:
    - search(): query the given sources and return ranked passages
    - list_available_sources(): names of the sources that can be searched
    """

    @abstractmethod
    async def search(
        self,
        query: str,
        sources: Sequence[str],
        max_results: int,
        threshold: float,
    ) -> List[RetrievedPassage]:
        """
        Search the given sources.

        Args:
            query: Search query string
            sources: Source names to search, in priority order
            max_results: Maximum number of passages to return overall
            threshold: Minimum similarity for a passage to be returned

        Returns:
            List[RetrievedPassage]: Passages sorted by similarity, highest first

        Raises:
            RetrievalError: If the search fails
        """

    @abstractmethod
    async def list_available_sources(self) -> List[str]:
        """
        Return the names of the sources that currently exist.

        Raises:
            RetrievalError: If the backend cannot be reached
        """

    def validate_query(self, query: str) -> bool:
        """
        Validate that a query is acceptable for retrieval.

        Args:
            query: Query string to validate

        Returns:
            bool: True if query is valid, False otherwise
        """
        if not query or not isinstance(query, str):
            return False
        if len(query.strip()) == 0:
            return False
        return True

    @staticmethod
    def rank(
        passages: Sequence[RetrievedPassage],
        max_results: int,
        threshold: Optional[float] = None,
    ) -> List[RetrievedPassage]:
        """Filter by threshold, sort by similarity (descending) and truncate."""
        kept = [
            p for p in passages
            if threshold is None or p.similarity >= threshold
        ]
        kept.sort(key=lambda p: p.similarity, reverse=True)
        return kept[:max_results]
