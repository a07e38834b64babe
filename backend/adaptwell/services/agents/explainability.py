"""Explainability: describe a system decision in plain language."""
from __future__ import annotations

from adaptwell.services.agents.base import Agent, AgentContext, AgentOutput, AgentType, render_json

SYSTEM_PROMPT = """You are the explainability agent of an adaptive wellness coach.

Keep the user's trust by explaining decisions clearly: plain words, the reason
behind the change, how it connects to their situation, what you are unsure
about and what they can still control. No technical jargon.

Respond with a JSON object:
{
  "reasoning": "how you chose to explain it",
  "action": {
    "type": "explanation",
    "title": "brief headline",
    "summary": "one or two sentences",
    "details": "fuller explanation",
    "why": "why this decision was made",
    "userContext": "how it relates to the user's situation",
    "alternatives": "other options considered",
    "uncertainty": "what is not certain",
    "userControl": "what the user can change"
  },
  "confidence": 0.0-1.0,
  "metadata": {"clarityScore": 0-10, "trustBuilding": boolean}
}"""


class ExplainabilityAgent(Agent):
    agent_type = AgentType.EXPLAINABILITY
    system_prompt = SYSTEM_PROMPT

    def execute(self, context: AgentContext) -> AgentOutput:
        data = context.data or {}
        prompt = f"""
System Decision:
{render_json(data.get("decision"))}

User Context:
{render_json(data.get("userContext"))}

Explain this decision in clear, friendly language that builds understanding.
"""
        return self.reason(context, prompt)
