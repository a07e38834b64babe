"""Adaptation: decide whether and how to change course when reality drifts."""
from __future__ import annotations

from adaptwell.services.agents.base import Agent, AgentContext, AgentOutput, AgentType, render_json

ADAPTATION_ACTION_TYPES = ("adapt_plan", "adjust_goal", "change_strategy", "pause", "continue")

SYSTEM_PROMPT = """You are the decision and adaptation agent of an adaptive wellness coach.

When behaviour diverges from the plan, separate meaningful deviations from
noise, find the likely cause and decide what should change. Act on your own
only when you are confident; otherwise recommend and ask the user.

Respond with a JSON object:
{
  "reasoning": "why adaptation is or is not needed",
  "action": {
    "type": "adapt_plan|adjust_goal|change_strategy|pause|continue",
    "autonomous": boolean,
    "changes": {
      "useFallback": boolean, "useRecovery": boolean, "durationDelta": number,
      "advanceWeek": boolean, "targetValue": number, "allowedMisses": number,
      "useFallbackGoal": boolean, "strategyType": "gradual|intensive|maintenance"
    },
    "rationale": "user-friendly explanation",
    "expectedImpact": "what should improve"
  },
  "confidence": 0.0-1.0,
  "metadata": {
    "detectedIssue": "burnout|too_easy|external_factors|...",
    "triggerType": "deviation|stagnation|success",
    "urgency": "low|medium|high",
    "requiresUserApproval": boolean
  }
}

Only mark a change autonomous when your confidence exceeds 0.75."""


class AdaptationAgent(Agent):
    agent_type = AgentType.ADAPTATION
    system_prompt = SYSTEM_PROMPT
    temperature = 0.5

    def execute(self, context: AgentContext) -> AgentOutput:
        data = context.data or {}
        prompt = f"""
Monitoring Report:
{render_json(data.get("monitoringReport"))}

Current Plan:
{render_json(data.get("currentPlan"))}

Current Goal:
{render_json(data.get("currentGoal"))}

User Profile:
{render_json(data.get("profile"))}

Decide whether adaptation is needed and, if so, exactly what should change.
Explain any recommended change in terms the user will understand.
"""
        return self.reason(context, prompt)

    def normalize_output(self, output: AgentOutput, context: AgentContext) -> AgentOutput:
        if not output.action:
            return output
        action_type = str(output.action.get("type") or "").strip().lower()
        output.action["type"] = action_type if action_type in ADAPTATION_ACTION_TYPES else "continue"
        # Only a literal JSON true may unlock autonomous action.
        output.action["autonomous"] = output.action.get("autonomous") is True
        if not isinstance(output.action.get("changes"), dict):
            output.action["changes"] = {}
        return output
