"""Monitoring: read the recent activity log as a trajectory."""
from __future__ import annotations

from datetime import timedelta

from adaptwell.core.config import settings
from adaptwell.db.models.monitoring_data import MonitoringData
from adaptwell.services.agents.base import Agent, AgentContext, AgentOutput, AgentType

SYSTEM_PROMPT = """You are the monitoring agent of an adaptive wellness coach.

Track behavioural trajectories rather than isolated data points: trends over
time, early signs of burnout, streaks worth protecting and deviations that
call for adapting the plan. Judge the quality of adherence, not only the count.

Respond with a JSON object:
{
  "reasoning": "your analysis of the trajectory",
  "action": {
    "type": "monitoring_report",
    "trajectory": "improving|stable|declining",
    "adherenceScore": 0-100,
    "streakCount": number,
    "consecutiveMisses": number,
    "signals": {
      "burnoutRisk": 0-100,
      "motivationLevel": "low|medium|high",
      "energyTrend": "increasing|stable|decreasing",
      "consistencyScore": 0-100
    },
    "deviations": [{"type": "missed|partial|exceeded", "date": "...", "impact": "low|medium|high"}],
    "recommendations": []
  },
  "confidence": 0.0-1.0,
  "metadata": {"requiresAdaptation": boolean, "urgency": "low|medium|high"}
}"""

NO_ACTIVITY_LINE = "No activity logged in this window."


def _digest(entry: MonitoringData) -> str:
    return "\n".join(
        [
            f"Date: {entry.date.isoformat()}",
            f"Activity: {entry.activity_type}",
            f"Completed: {str(bool(entry.completed)).lower()}",
            f"Energy: {entry.energy_level}",
            f"Motivation: {entry.motivation}",
            f"Difficulty: {entry.difficulty}",
            f"Notes: {entry.notes or 'none'}",
        ]
    )


class MonitoringAgent(Agent):
    agent_type = AgentType.MONITORING
    system_prompt = SYSTEM_PROMPT

    def execute(self, context: AgentContext) -> AgentOutput:
        window = settings.monitoring_window_days
        since = context.timestamp.date() - timedelta(days=window)
        entries = self.persistence.list_monitoring(context.user_id, since=since)

        body = "\n---\n".join(_digest(entry) for entry in entries) if entries else NO_ACTIVITY_LINE
        prompt = (
            f"Analyze the following behavioral data from the last {window} days:\n\n"
            f"{body}\n\n"
            "Describe the trajectory and flag any concerning patterns or positive trends."
        )
        return self.reason(context, prompt)
