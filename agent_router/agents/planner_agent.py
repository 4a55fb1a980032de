"""
PlannerAgent implementation.

This agent breaks complex queries into sub-questions and step-by-step
plans. After generation it extracts the sub-questions from the answer
(numbered items, bullet points, or standalone questions) into
metadata.sub_questions.
"""

from __future__ import annotations

import re
from typing import List, Optional

from agent_router.agents.base_agent import BaseAgent
from agent_router.config.constants import AgentType, ComplexityLevel
from agent_router.llm.text_generator import TextGenerator
from agent_router.retrieval.base_retriever import RetrievalService
from agent_router.schema import AgentCapability, AgentRequest, AgentResponse

PLANNER_CAPABILITY = AgentCapability(
    name="Planner Agent",
    description="Breaks down complex queries into structured plans and sub-questions",
    supports_streaming=True,
    requires_tools=False,
    max_tokens=2000,
    temperature=0.2,
)

MAX_SUB_QUESTIONS = 10
MIN_QUESTION_LINE_LENGTH = 10

NUMBERED_ITEM = re.compile(r"^\d+[.)]\s*(.+)")
BULLET_ITEM = re.compile(r"^[-•*]\s*(.+)")

PLANNING_MODES = {
    ComplexityLevel.COMPLEX: (
        "COMPLEX PLANNING MODE:\n"
        "- Break down into 5-10 distinct sub-questions or tasks\n"
        "- Identify critical dependencies between steps\n"
        "- Prioritize high-impact, foundational questions first\n"
        "- Consider multiple approaches and potential challenges\n"
        "- Plan for iterative refinement"
    ),
    ComplexityLevel.MODERATE: (
        "MODERATE PLANNING MODE:\n"
        "- Break down into 3-5 manageable sub-questions or tasks\n"
        "- Establish clear logical sequence\n"
        "- Identify any prerequisites or dependencies\n"
        "- Balance thoroughness with efficiency"
    ),
    ComplexityLevel.SIMPLE: (
        "SIMPLE PLANNING MODE:\n"
        "- Break down into 2-3 focused sub-questions\n"
        "- Maintain clear, direct approach\n"
        "- Prioritize immediate actionable steps"
    ),
}


def extract_sub_questions(content: str) -> List[str]:
    """
    Extract up to 10 sub-questions/tasks from a plan.

    A line counts when it is a numbered item ("1. x", "1) x"), a bullet
    ("- x", "• x", "* x"), or ends with "?" and is longer than 10 characters.
    """
    sub_questions: List[str] = []

    for line in (content or "").split("\n"):
        trimmed = line.strip()

        numbered = NUMBERED_ITEM.match(trimmed)
        if numbered:
            sub_questions.append(numbered.group(1))
            continue

        bullet = BULLET_ITEM.match(trimmed)
        if bullet:
            sub_questions.append(bullet.group(1))
            continue

        if trimmed.endswith("?") and len(trimmed) > MIN_QUESTION_LINE_LENGTH:
            sub_questions.append(trimmed)

    return sub_questions[:MAX_SUB_QUESTIONS]


class PlannerAgent(BaseAgent):
    """Agent specialized in decomposition and planning."""

    def __init__(
        self,
        generator: TextGenerator,
        retrieval: Optional[RetrievalService] = None,
        default_model: Optional[str] = None,
        search_threshold: Optional[float] = None,
    ) -> None:
        super().__init__(
            agent_type=AgentType.PLANNER,
            capability=PLANNER_CAPABILITY,
            generator=generator,
            retrieval=retrieval,
            default_model=default_model,
            search_threshold=search_threshold,
        )

    def get_system_prompt(self, request: AgentRequest) -> str:
        complexity = request.effective_context.complexity

        return (
            "You are an expert planning and analysis assistant specialized in breaking down complex "
            "problems and queries.\n\n"
            "Your core capabilities include:\n"
            "- Decomposing complex questions into manageable sub-questions\n"
            "- Creating structured, step-by-step plans\n"
            "- Identifying information dependencies and prerequisites\n"
            "- Prioritizing tasks and questions by importance and logical sequence\n"
            "- Recognizing when tasks can be parallelized vs. must be sequential\n\n"
            f"Current task complexity: {complexity.value.upper()}\n\n"
            f"{PLANNING_MODES[complexity]}\n\n"
            "Planning Framework:\n"
            "1. ANALYSIS: Understand the core objective and scope\n"
            "2. DECOMPOSITION: Break into logical components\n"
            "3. SEQUENCING: Arrange in optimal order\n"
            "4. DEPENDENCIES: Identify what depends on what\n"
            "5. PRIORITIZATION: Rank by importance and urgency\n\n"
            "Output Format:\n"
            "- Main Objective: [Clear statement of the overall goal]\n"
            "- Sub-Questions/Tasks: [Numbered list with brief rationale]\n"
            "- Execution Sequence: [Recommended order with dependencies noted]\n"
            "- Success Criteria: [How to measure completion]\n\n"
            "Focus on creating actionable, well-structured plans that make complex problems manageable."
        )

    def _postprocess(self, response: AgentResponse) -> AgentResponse:
        sub_questions = extract_sub_questions(response.content)
        return self._with_metadata(response, sub_questions=tuple(sub_questions))
