"""
ResearchAgent implementation.

This agent:
- Forces citation mode and a larger minimum result count on every request
- Defaults to the "memory" source and complex planning when the caller
  gave no context
- Is the only agent that exposes tools (search_documents, analyze_complexity)
- Extracts citation-like substrings and URLs from its answer into
  metadata.citations
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Optional

from agent_router.agents.base_agent import BaseAgent
from agent_router.config.constants import AgentType, ComplexityLevel
from agent_router.llm.text_generator import TextGenerator
from agent_router.retrieval.base_retriever import RetrievalService
from agent_router.schema import AgentCapability, AgentRequest, AgentResponse, RequestContext

RESEARCH_CAPABILITY = AgentCapability(
    name="Research Agent",
    description="Conducts comprehensive research with enhanced search and detailed citations",
    supports_streaming=True,
    requires_tools=True,
    max_tokens=3000,
    temperature=0.1,
)

RESEARCH_DEFAULT_SOURCES = ("memory",)
RESEARCH_MIN_RESULTS = 8
MAX_CITATIONS = 20

CITATION_PATTERNS = (
    # [Source: Title] or [Source Name]
    re.compile(r"\[([^\]]+)\]"),
    # (Source, Year) or (Author Year)
    re.compile(r"\(([^)]+(?:\d{4})[^)]*)\)"),
    # Direct source mentions
    re.compile(r"(?:according to|source:|from|via)\s+([^.!?]+)", re.IGNORECASE),
)
URL_PATTERN = re.compile(r"https?://[^\s]+")


def extract_citations(content: str) -> List[str]:
    """Return up to 20 unique citation strings, in order of first appearance per pattern."""
    citations: List[str] = []

    for pattern in CITATION_PATTERNS:
        for match in pattern.finditer(content or ""):
            citation = match.group(1).strip()
            if 3 < len(citation) < 200:
                citations.append(citation)

    citations.extend(URL_PATTERN.findall(content or ""))

    return list(dict.fromkeys(citations))[:MAX_CITATIONS]


class ResearchAgent(BaseAgent):
    """Agent specialized in multi-source research with citations."""

    def __init__(
        self,
        generator: TextGenerator,
        retrieval: Optional[RetrievalService] = None,
        default_model: Optional[str] = None,
        search_threshold: Optional[float] = None,
    ) -> None:
        super().__init__(
            agent_type=AgentType.RESEARCH,
            capability=RESEARCH_CAPABILITY,
            generator=generator,
            retrieval=retrieval,
            default_model=default_model,
            search_threshold=search_threshold,
        )

    def _prepare_request(self, request: AgentRequest) -> AgentRequest:
        if request.context is None:
            context = RequestContext(
                sources=RESEARCH_DEFAULT_SOURCES,
                max_results=RESEARCH_MIN_RESULTS,
                requires_citations=True,
                complexity=ComplexityLevel.COMPLEX,
            )
        else:
            context = replace(
                request.context,
                sources=request.context.sources or RESEARCH_DEFAULT_SOURCES,
                max_results=max(request.context.max_results, RESEARCH_MIN_RESULTS),
                requires_citations=True,
            )
        return replace(request, context=context)

    def get_system_prompt(self, request: AgentRequest) -> str:
        context = request.effective_context
        sections = [
            "You are an expert research analyst specialized in comprehensive information gathering "
            "and synthesis.\n\n"
            "Your research methodology includes:\n"
            "- Systematic information gathering from multiple sources\n"
            "- Critical evaluation of source credibility and relevance\n"
            "- Synthesis of information across different perspectives\n"
            "- Comprehensive citation and source attribution\n"
            "- Identification of knowledge gaps and areas for further investigation"
        ]

        if context.domain_keywords:
            sections.append(
                f"DOMAIN FOCUS: {', '.join(context.domain_keywords)}\n"
                "- Pay special attention to domain-specific terminology and concepts\n"
                "- Consider field-specific perspectives and methodologies\n"
                "- Look for authoritative sources within this domain"
            )

        sections.append(
            "Research Standards:\n"
            "- Gather information from multiple sources when possible\n"
            "- Evaluate source quality, recency, and relevance\n"
            "- Present balanced perspectives on complex topics\n"
            "- Distinguish between facts, opinions, and speculation\n"
            "- Acknowledge limitations and uncertainties in available information"
        )

        if context.requires_citations:
            sections.append(
                "CITATION REQUIREMENTS:\n"
                "- Provide detailed source attribution for all claims\n"
                "- Include source titles, authors, and publication information when available\n"
                "- Use consistent citation format throughout\n"
                "- Distinguish between primary and secondary sources\n"
                "- Note the confidence level for different pieces of information"
            )

        sections.append(
            "Research Structure:\n"
            "1. EXECUTIVE SUMMARY: Key findings and main conclusions\n"
            "2. DETAILED FINDINGS: Comprehensive information organized by topic\n"
            "3. SOURCE ANALYSIS: Evaluation of source quality and reliability\n"
            "4. LIMITATIONS: Areas where information is incomplete or uncertain\n"
            "5. RECOMMENDATIONS: Suggestions for further research if applicable\n\n"
            "Focus on providing thorough, well-researched responses that advance understanding of the topic."
        )
        return "\n\n".join(sections)

    def _postprocess(self, response: AgentResponse) -> AgentResponse:
        return self._with_metadata(response, citations=tuple(extract_citations(response.content)))
