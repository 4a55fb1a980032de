"""
RewriteAgent implementation.

This agent rephrases, summarizes and reformulates text. It inspects the
query for rewrite task indicators (summarize / rephrase / optimize) purely
to tailor its instructions; it uses no tools.
"""

from __future__ import annotations

from typing import List, Optional

from agent_router.agents.base_agent import BaseAgent
from agent_router.config.constants import AgentType
from agent_router.llm.text_generator import TextGenerator
from agent_router.retrieval.base_retriever import RetrievalService
from agent_router.schema import AgentCapability, AgentRequest

REWRITE_CAPABILITY = AgentCapability(
    name="Rewrite Agent",
    description="Specializes in rephrasing, summarizing, and reformulating text content",
    supports_streaming=True,
    requires_tools=False,
    max_tokens=1500,
    temperature=0.3,
)

# Task label -> query indicators, in detection order
REWRITE_TASK_INDICATORS = (
    ("summarize", ("summarize", "summary", "brief", "condense")),
    ("rephrase", ("rephrase", "rewrite", "reword", "reformulate")),
    ("optimize", ("optimize", "improve", "enhance", "better")),
)

TASK_INSTRUCTIONS = {
    "summarize": (
        "SUMMARIZATION TASK DETECTED:\n"
        "- Extract key points and main ideas\n"
        "- Maintain essential information while reducing length\n"
        "- Use clear, concise language\n"
        "- Structure information hierarchically when appropriate"
    ),
    "rephrase": (
        "REPHRASING TASK DETECTED:\n"
        "- Maintain original meaning while improving clarity\n"
        "- Use more accessible or appropriate language\n"
        "- Improve sentence structure and flow\n"
        "- Consider the intended audience"
    ),
    "optimize": (
        "QUERY OPTIMIZATION TASK DETECTED:\n"
        "- Enhance specificity and clarity\n"
        "- Add relevant context and keywords\n"
        "- Structure for better information retrieval\n"
        "- Maintain user intent while improving precision"
    ),
}


def detect_rewrite_tasks(query: str) -> List[str]:
    """Return the rewrite tasks implied by the query, in a fixed order."""
    lower_query = (query or "").lower()
    return [
        task
        for task, indicators in REWRITE_TASK_INDICATORS
        if any(indicator in lower_query for indicator in indicators)
    ]


class RewriteAgent(BaseAgent):
    """Agent specialized in text transformation."""

    def __init__(
        self,
        generator: TextGenerator,
        retrieval: Optional[RetrievalService] = None,
        default_model: Optional[str] = None,
        search_threshold: Optional[float] = None,
    ) -> None:
        super().__init__(
            agent_type=AgentType.REWRITE,
            capability=REWRITE_CAPABILITY,
            generator=generator,
            retrieval=retrieval,
            default_model=default_model,
            search_threshold=search_threshold,
        )

    def get_system_prompt(self, request: AgentRequest) -> str:
        sections = [
            "You are an expert writing assistant specialized in text transformation and optimization.\n\n"
            "Your core capabilities include:\n"
            "- Rephrasing and reformulating content for clarity and impact\n"
            "- Summarizing complex information into concise, digestible formats\n"
            "- Optimizing queries for better search and understanding\n"
            "- Adjusting tone, style, and reading level as needed\n"
            "- Improving structure and flow of text"
        ]
        sections.extend(TASK_INSTRUCTIONS[task] for task in detect_rewrite_tasks(request.query))
        sections.append(
            "Guidelines:\n"
            "- Preserve the core meaning and intent\n"
            "- Improve clarity and readability\n"
            "- Use appropriate tone and style\n"
            "- Be concise without losing important details\n"
            "- Explain significant changes when helpful\n\n"
            "Focus on making the content more effective for its intended purpose."
        )
        return "\n\n".join(sections)
