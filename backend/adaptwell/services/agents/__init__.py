"""Closed registry of the cognitive agents."""
from __future__ import annotations

from typing import Dict, Type

from adaptwell.services.agents.adaptation import AdaptationAgent
from adaptwell.services.agents.base import Agent, AgentContext, AgentOutput, AgentType
from adaptwell.services.agents.explainability import ExplainabilityAgent
from adaptwell.services.agents.goal_formulation import GoalFormulationAgent
from adaptwell.services.agents.monitoring import MonitoringAgent
from adaptwell.services.agents.planning import PlanningAgent
from adaptwell.services.agents.reflection import ReflectionAgent

AGENT_CLASSES: Dict[AgentType, Type[Agent]] = {
    AgentType.GOAL_FORMULATION: GoalFormulationAgent,
    AgentType.PLANNING: PlanningAgent,
    AgentType.MONITORING: MonitoringAgent,
    AgentType.ADAPTATION: AdaptationAgent,
    AgentType.REFLECTION: ReflectionAgent,
    AgentType.EXPLAINABILITY: ExplainabilityAgent,
}


class UnknownAgentError(LookupError):
    """Raised when an agent name is not part of the registry."""


def resolve_agent_type(agent_type: AgentType | str) -> AgentType:
    if isinstance(agent_type, AgentType):
        return agent_type
    try:
        return AgentType(str(agent_type).strip().lower().replace("_", "-"))
    except ValueError as exc:
        raise UnknownAgentError(f"Agent type '{agent_type}' not found") from exc


__all__ = [
    "AGENT_CLASSES",
    "Agent",
    "AgentContext",
    "AgentOutput",
    "AgentType",
    "UnknownAgentError",
    "resolve_agent_type",
]
