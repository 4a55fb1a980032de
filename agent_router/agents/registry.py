"""
Capability registry: the fixed set of worker agents.

The registry is built once per orchestrator and exposed read-only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from agent_router.agents.base_agent import BaseAgent
from agent_router.agents.planner_agent import PLANNER_CAPABILITY, PlannerAgent
from agent_router.agents.qa_agent import QA_CAPABILITY, QAAgent
from agent_router.agents.research_agent import RESEARCH_CAPABILITY, ResearchAgent
from agent_router.agents.rewrite_agent import REWRITE_CAPABILITY, RewriteAgent
from agent_router.config.constants import AgentType
from agent_router.llm.text_generator import TextGenerator
from agent_router.retrieval.base_retriever import RetrievalService

AGENT_CLASSES = {
    AgentType.QA: QAAgent,
    AgentType.REWRITE: RewriteAgent,
    AgentType.PLANNER: PlannerAgent,
    AgentType.RESEARCH: ResearchAgent,
}

DEFAULT_CAPABILITIES = MappingProxyType({
    AgentType.QA: QA_CAPABILITY,
    AgentType.REWRITE: REWRITE_CAPABILITY,
    AgentType.PLANNER: PLANNER_CAPABILITY,
    AgentType.RESEARCH: RESEARCH_CAPABILITY,
})


def build_default_agents(
    generator: TextGenerator,
    retrieval: Optional[RetrievalService] = None,
    default_model: Optional[str] = None,
    search_threshold: Optional[float] = None,
) -> Mapping[AgentType, BaseAgent]:
    """Instantiate one agent per AgentType, sharing the same collaborators."""
    agents = {
        agent_type: agent_cls(
            generator=generator,
            retrieval=retrieval,
            default_model=default_model,
            search_threshold=search_threshold,
        )
        for agent_type, agent_cls in AGENT_CLASSES.items()
    }
    return MappingProxyType(agents)
