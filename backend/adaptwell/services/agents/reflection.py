"""Reflection: compare intended and actual behaviour over a period."""
from __future__ import annotations

from adaptwell.services.agents.base import Agent, AgentContext, AgentOutput, AgentType, render_json

SYSTEM_PROMPT = """You are the reflection engine of an adaptive wellness coach.

Compare what was planned with what actually happened, look past surface
reasons to root causes, recognise patterns across cycles and turn them into
lessons and heuristic updates that improve future decisions.

Respond with a JSON object:
{
  "reasoning": "your meta-cognitive analysis",
  "action": {
    "type": "reflection_report",
    "comparison": {"intended": "...", "actual": "...", "variance": "..."},
    "successFactors": [],
    "failureFactors": [],
    "externalFactors": [],
    "patterns": [],
    "rootCauses": [],
    "lessonsLearned": [],
    "heuristicUpdates": {},
    "recommendations": []
  },
  "confidence": 0.0-1.0,
  "metadata": {"reflectionQuality": "surface|moderate|deep", "actionableInsights": number}
}"""

LIST_FIELDS = (
    "successFactors",
    "failureFactors",
    "externalFactors",
    "patterns",
    "rootCauses",
    "lessonsLearned",
    "recommendations",
)


class ReflectionAgent(Agent):
    agent_type = AgentType.REFLECTION
    system_prompt = SYSTEM_PROMPT

    def execute(self, context: AgentContext) -> AgentOutput:
        data = context.data or {}
        prompt = f"""
Reflection Period: {data.get("periodStart")} to {data.get("periodEnd")}

Intended Behavior (from plan):
{render_json(data.get("intended"))}

Actual Behavior (from monitoring):
{render_json(data.get("actual"))}

Previous Reflections:
{render_json(data.get("previousReflections") or [])}

Reflect on this period: name the patterns, the root causes and the lessons.
"""
        return self.reason(context, prompt)

    def normalize_output(self, output: AgentOutput, context: AgentContext) -> AgentOutput:
        if not output.action:
            return output
        for key in LIST_FIELDS:
            value = output.action.get(key)
            if value is None:
                output.action[key] = []
            elif not isinstance(value, list):
                output.action[key] = [value]
        if not isinstance(output.action.get("heuristicUpdates"), dict):
            output.action["heuristicUpdates"] = {}
        if not isinstance(output.action.get("comparison"), dict):
            output.action["comparison"] = {}
        return output
