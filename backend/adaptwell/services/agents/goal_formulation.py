"""Goal formulation: turn a profile and a loose intention into a tolerant goal."""
from __future__ import annotations

from adaptwell.services.agents.base import Agent, AgentContext, AgentOutput, AgentType, render_json
from adaptwell.services.drafts import normalize_goal_draft

SYSTEM_PROMPT = """You are the goal formulation agent of an adaptive wellness coach.

Turn a vague intention into a structured goal that survives failure instead of
collapsing after it. Favour consistency over intensity, respect the user's
time and energy, and build in recovery from missed days.

Respond with a JSON object:
{
  "reasoning": "your reading of the intent and constraints",
  "action": {
    "type": "create_goal",
    "goal": {
      "title": "short motivating title",
      "description": "what the goal is",
      "category": "fitness|nutrition|sleep|stress",
      "specific": "what exactly will be done",
      "measurable": "how progress is measured",
      "achievable": "why it fits the constraints",
      "relevant": "why it matters to the user",
      "timeBound": "timeline with milestones",
      "targetValue": number,
      "unit": "sessions|minutes|steps|...",
      "allowedMisses": number,
      "recoveryStrategy": "how to come back after a missed day",
      "fallbackGoal": "an easier version for hard weeks"
    }
  },
  "confidence": 0.0-1.0,
  "metadata": {"adherenceRisk": "low|medium|high", "estimatedDifficulty": "easy|moderate|hard"}
}

Never propose a goal the user's history says they will abandon."""


def _join(values, sep: str = ", ") -> str:
    return sep.join(str(value) for value in values or []) or "none"


class GoalFormulationAgent(Agent):
    agent_type = AgentType.GOAL_FORMULATION
    system_prompt = SYSTEM_PROMPT

    def execute(self, context: AgentContext) -> AgentOutput:
        profile = self.persistence.get_profile(context.user_id)
        if profile is None:
            return AgentOutput.failed("No wellness profile found")

        data = context.data or {}
        prompt = "\n".join(
            [
                f"User Intent: {data.get('intent') or profile.primary_intent}",
                f"Available Time: {profile.available_time} minutes/day",
                f"Energy Level: {profile.energy_level}",
                f"Current Routine: {profile.current_routine or 'none'}",
                f"Barriers: {_join(profile.barriers)}",
                f"Motivation Style: {profile.motivation_style}",
                f"Preferred Activities: {_join(profile.preferred_activities)}",
                f"Adherence Risk: {profile.adherence_risk}",
                f"Historical Failures: {_join(profile.historical_failures, '; ')}",
                "",
                f"Additional Context: {render_json(data.get('context') or {})}",
                "",
                "Formulate one sustainable, failure-tolerant goal for this user.",
            ]
        )
        return self.reason(context, prompt)

    def normalize_output(self, output: AgentOutput, context: AgentContext) -> AgentOutput:
        if "goal" not in output.action:
            return output
        goal, defaulted = normalize_goal_draft(output.action["goal"])
        output.action["goal"] = goal
        output.metadata = {**(output.metadata or {}), "defaultedFields": defaulted}
        return output
