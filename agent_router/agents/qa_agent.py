"""
QAAgent implementation.

Standard retrieval-augmented question answering: direct, factual answers
grounded in the retrieved context when sources are attached. Adds no
behavior beyond the BaseAgent contract.
"""

from __future__ import annotations

from typing import Optional

from agent_router.agents.base_agent import BaseAgent
from agent_router.config.constants import AgentType
from agent_router.llm.text_generator import TextGenerator
from agent_router.retrieval.base_retriever import RetrievalService
from agent_router.schema import AgentCapability, AgentRequest

QA_CAPABILITY = AgentCapability(
    name="Question Answering Agent",
    description="Provides accurate answers to questions using retrieved context and knowledge",
    supports_streaming=True,
    requires_tools=False,
    max_tokens=1000,
    temperature=0.1,
)


class QAAgent(BaseAgent):
    """Agent specialized in direct question answering."""

    def __init__(
        self,
        generator: TextGenerator,
        retrieval: Optional[RetrievalService] = None,
        default_model: Optional[str] = None,
        search_threshold: Optional[float] = None,
    ) -> None:
        super().__init__(
            agent_type=AgentType.QA,
            capability=QA_CAPABILITY,
            generator=generator,
            retrieval=retrieval,
            default_model=default_model,
            search_threshold=search_threshold,
        )

    def get_system_prompt(self, request: AgentRequest) -> str:
        has_context = bool(request.effective_context.sources)

        if has_context:
            guidelines = (
                "You have access to relevant context from the knowledge base. "
                "Use this context to provide accurate, well-sourced answers.\n\n"
                "Guidelines for using context:\n"
                "- Prioritize information from the provided context\n"
                "- If context doesn't fully address the question, clearly state what's known and what's uncertain\n"
                "- Cite sources when referencing specific information\n"
                "- Maintain accuracy over completeness"
            )
        else:
            guidelines = (
                "You should provide helpful answers based on your training knowledge.\n\n"
                "Guidelines:\n"
                "- Be accurate and honest about limitations\n"
                "- Provide clear, well-structured responses\n"
                "- If you're uncertain, say so clearly\n"
                "- Focus on being helpful while maintaining truthfulness"
            )

        response_format = (
            "Response format:\n"
            "- Provide a direct answer to the question\n"
            "- Include relevant details and explanations\n"
            "- Use clear, accessible language\n"
            "- Structure information logically"
        )
        if has_context:
            response_format += "\n- Cite sources when available"

        return (
            "You are a knowledgeable assistant specialized in providing accurate, helpful answers to questions.\n\n"
            f"{guidelines}\n\n"
            f"{response_format}\n\n"
            "Remember to be concise but comprehensive, and always prioritize accuracy over speculation."
        )
