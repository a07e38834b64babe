"""Planning: expand a goal into a multi-week plan with fallback and recovery variants."""
from __future__ import annotations

from uuid import UUID

from adaptwell.core.config import settings
from adaptwell.services.agents.base import Agent, AgentContext, AgentOutput, AgentType
from adaptwell.services.drafts import normalize_plan_draft

SYSTEM_PROMPT = """You are the planning agent of an adaptive wellness coach.

Build multi-week plans tuned for consistency rather than intensity. Balance
ambition against sustainability, estimate physical and cognitive load, design
progressive difficulty with rest, and always pre-generate a lighter fallback
plan and a minimal recovery plan.

Respond with a JSON object:
{
  "reasoning": "your analysis of the goal and constraints",
  "action": {
    "type": "create_plan",
    "plan": {
      "title": "plan name",
      "description": "overview",
      "startDate": "YYYY-MM-DD",
      "endDate": "YYYY-MM-DD",
      "strategyType": "gradual|intensive|maintenance",
      "activities": [{"week": 1, "days": ["Monday"], "activity": "...", "duration": 20, "intensity": "low"}],
      "physicalLoad": 0-10,
      "cognitiveLoad": 0-10,
      "sustainabilityScore": 0-10,
      "fallbackPlan": [...same block shape...],
      "recoveryPlan": [...same block shape, with a "note"...],
      "progressionRules": ["..."],
      "regressionRules": ["..."]
    }
  },
  "confidence": 0.0-1.0,
  "metadata": {"estimatedCompletionRate": "percentage", "keyRisks": [], "mitigationStrategies": []}
}

A missed day must never derail the whole plan."""


def _duration_weeks(raw) -> int:
    try:
        weeks = int(raw)
    except (TypeError, ValueError, OverflowError):
        return settings.default_plan_weeks
    return weeks if weeks > 0 else settings.default_plan_weeks


class PlanningAgent(Agent):
    agent_type = AgentType.PLANNING
    system_prompt = SYSTEM_PROMPT

    def execute(self, context: AgentContext) -> AgentOutput:
        data = context.data or {}
        goal = None
        goal_id = data.get("goalId")
        if goal_id:
            try:
                goal = self.persistence.get_goal(UUID(str(goal_id)), context.user_id)
            except ValueError:
                goal = None
        profile = self.persistence.get_profile(context.user_id)
        if goal is None or profile is None:
            return AgentOutput.failed("Goal or profile not found")

        prompt = f"""
Goal: {goal.title}
Description: {goal.description}
Target: {goal.target_value} {goal.unit}
Timeline: {goal.time_bound}
Allowed Misses: {goal.allowed_misses} per week

User Constraints:
- Available Time: {profile.available_time} minutes/day
- Energy Level: {profile.energy_level}
- Planning Preference: {profile.planning_preference}
- Adherence Risk: {profile.adherence_risk}

Create a {_duration_weeks(data.get("duration"))}-week adaptive plan that maximises long-term adherence.
"""
        return self.reason(context, prompt)

    def normalize_output(self, output: AgentOutput, context: AgentContext) -> AgentOutput:
        if "plan" not in output.action:
            return output
        weeks = _duration_weeks((context.data or {}).get("duration"))
        plan, defaulted = normalize_plan_draft(output.action["plan"], duration_weeks=weeks)
        output.action["plan"] = plan
        output.metadata = {**(output.metadata or {}), "defaultedFields": defaulted}
        return output
