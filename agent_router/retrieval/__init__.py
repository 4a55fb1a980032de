"""
Retrieval system module.

This module provides retrieval services for fetching context passages:
- RetrievalService: abstract contract consumed by agents and the router
- RetrievedPassage: one ranked passage
- ChromaRetrievalService: ChromaDB collections as named sources
"""

from agent_router.retrieval.base_retriever import RetrievalService, RetrievedPassage
from agent_router.retrieval.chroma_retriever import ChromaRetrievalService

__all__ = [
    "RetrievalService",
    "RetrievedPassage",
    "ChromaRetrievalService",
]
