"""
Agent architecture module.

This package defines the worker layer that the orchestrator dispatches to.
It provides:

- AgentInterface / BaseAgent: shared request handling for all workers.
- QAAgent: direct question answering over retrieved context.
- RewriteAgent: summarize / rephrase / optimize text.
- PlannerAgent: break tasks into sub-questions (metadata.sub_questions).
- ResearchAgent: multi-source research with citations (metadata.citations).
- build_default_agents: the read-only capability registry.
"""

from agent_router.agents.base_agent import AgentInterface, BaseAgent
from agent_router.agents.planner_agent import PlannerAgent
from agent_router.agents.qa_agent import QAAgent
from agent_router.agents.registry import DEFAULT_CAPABILITIES, build_default_agents
from agent_router.agents.research_agent import ResearchAgent
from agent_router.agents.rewrite_agent import RewriteAgent

__all__ = [
    "AgentInterface",
    "BaseAgent",
    "DEFAULT_CAPABILITIES",
    "PlannerAgent",
    "QAAgent",
    "ResearchAgent",
    "RewriteAgent",
    "build_default_agents",
]
