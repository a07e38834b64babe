"""ORM models exposed for metadata discovery."""
from adaptwell.db.models.adaptation import Adaptation
from adaptwell.db.models.agent_log import AgentLog
from adaptwell.db.models.goal import Goal
from adaptwell.db.models.monitoring_data import MonitoringData
from adaptwell.db.models.plan import Plan
from adaptwell.db.models.reflection import Reflection
from adaptwell.db.models.user import User
from adaptwell.db.models.wellness_profile import WellnessProfile

__all__ = [
    "Adaptation",
    "AgentLog",
    "Goal",
    "MonitoringData",
    "Plan",
    "Reflection",
    "User",
    "WellnessProfile",
]
