"""Typed persistence access shared by agents, the orchestrator and routes."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterator, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from adaptwell.db.models.adaptation import Adaptation
from adaptwell.db.models.agent_log import AgentLog
from adaptwell.db.models.goal import Goal
from adaptwell.db.models.monitoring_data import MonitoringData
from adaptwell.db.models.plan import Plan
from adaptwell.db.models.reflection import Reflection
from adaptwell.db.models.user import User
from adaptwell.db.models.wellness_profile import WellnessProfile


class PersistenceGateway:
    """Wraps one SQLAlchemy session; each instance belongs to a single unit of work."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # Users and profiles

    def get_or_create_user(self, user_id: UUID) -> User:
        user = self.db.get(User, user_id)
        if user:
            return user
        user = User(id=user_id)
        self.db.add(user)
        try:
            self.db.flush()
            return user
        except IntegrityError:
            self.db.rollback()
            existing = self.db.get(User, user_id)
            if existing:
                return existing
            raise

    def get_profile(self, user_id: UUID) -> Optional[WellnessProfile]:
        return self.db.query(WellnessProfile).filter(WellnessProfile.user_id == user_id).one_or_none()

    def upsert_profile(self, user_id: UUID, fields: Dict[str, Any]) -> WellnessProfile:
        """Replace the user's profile wholesale, creating it on first call."""
        self.get_or_create_user(user_id)
        profile = self.get_profile(user_id)
        if profile is None:
            profile = WellnessProfile(user_id=user_id)
        for key, value in fields.items():
            setattr(profile, key, value)
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)
        return profile

    # Goals and plans

    def get_goal(self, goal_id: UUID, user_id: UUID | None = None) -> Optional[Goal]:
        goal = self.db.get(Goal, goal_id)
        if goal is None or (user_id is not None and goal.user_id != user_id):
            return None
        return goal

    def get_active_goal(self, user_id: UUID) -> Optional[Goal]:
        return (
            self.db.query(Goal)
            .filter(Goal.user_id == user_id, Goal.status == "active")
            .order_by(Goal.updated_at.desc(), Goal.created_at.desc())
            .first()
        )

    def add_goal(self, goal: Goal) -> Goal:
        self.get_or_create_user(goal.user_id)
        self.db.add(goal)
        self.db.commit()
        self.db.refresh(goal)
        return goal

    def get_plan(self, plan_id: UUID, user_id: UUID | None = None) -> Optional[Plan]:
        plan = self.db.get(Plan, plan_id)
        if plan is None or (user_id is not None and plan.user_id != user_id):
            return None
        return plan

    def get_active_plan(self, goal_id: UUID) -> Optional[Plan]:
        return (
            self.db.query(Plan)
            .filter(Plan.goal_id == goal_id, Plan.status == "active")
            .order_by(Plan.created_at.desc())
            .first()
        )

    def list_active_plans(self, user_id: UUID) -> List[Plan]:
        return (
            self.db.query(Plan)
            .filter(Plan.user_id == user_id, Plan.status == "active")
            .order_by(Plan.created_at.desc())
            .all()
        )

    def add_plan(self, plan: Plan) -> Plan:
        """Store a new plan; any previously active plan for the goal is superseded."""
        previous = self.get_active_plan(plan.goal_id)
        if previous is not None:
            previous.status = "superseded"
            self.db.add(previous)
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def users_with_active_goals(self) -> List[UUID]:
        rows = self.db.query(Goal.user_id).filter(Goal.status == "active").distinct().all()
        return [row[0] for row in rows]

    # Monitoring data

    def list_monitoring(
        self,
        user_id: UUID,
        *,
        since: date | None = None,
        until: date | None = None,
        goal_id: UUID | None = None,
    ) -> List[MonitoringData]:
        query = self.db.query(MonitoringData).filter(MonitoringData.user_id == user_id)
        if since is not None:
            query = query.filter(MonitoringData.date >= since)
        if until is not None:
            query = query.filter(MonitoringData.date <= until)
        if goal_id is not None:
            query = query.filter(MonitoringData.goal_id == goal_id)
        return query.order_by(MonitoringData.date.desc(), MonitoringData.created_at.desc()).all()

    def iter_completion_before(self, user_id: UUID, before: date, page_size: int = 50) -> Iterator[bool]:
        """Yield `completed` flags of entries strictly before `before`, newest first."""
        query = (
            self.db.query(MonitoringData.completed)
            .filter(MonitoringData.user_id == user_id, MonitoringData.date < before)
            .order_by(MonitoringData.date.desc(), MonitoringData.created_at.desc())
        )
        offset = 0
        while True:
            rows = query.offset(offset).limit(page_size).all()
            for row in rows:
                yield bool(row[0])
            if len(rows) < page_size:
                return
            offset += page_size

    def add_monitoring(self, entry: MonitoringData) -> MonitoringData:
        self.get_or_create_user(entry.user_id)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def goal_progress(self, goal_id: UUID) -> tuple[float, int]:
        """Return (sum of values, count) across completed entries for a goal."""
        total, count = (
            self.db.query(func.coalesce(func.sum(MonitoringData.value), 0.0), func.count(MonitoringData.id))
            .filter(MonitoringData.goal_id == goal_id, MonitoringData.completed.is_(True))
            .one()
        )
        return float(total or 0.0), int(count or 0)

    # Adaptations

    def add_adaptation(self, adaptation: Adaptation) -> Adaptation:
        self.db.add(adaptation)
        self.db.commit()
        self.db.refresh(adaptation)
        return adaptation

    def get_adaptation(self, adaptation_id: UUID, user_id: UUID) -> Optional[Adaptation]:
        adaptation = self.db.get(Adaptation, adaptation_id)
        if adaptation is None or adaptation.user_id != user_id:
            return None
        return adaptation

    def list_adaptations(
        self,
        user_id: UUID,
        *,
        status: str | None = None,
        limit: int = 50,
    ) -> List[Adaptation]:
        query = self.db.query(Adaptation).filter(Adaptation.user_id == user_id)
        if status:
            query = query.filter(Adaptation.status == status)
        return query.order_by(Adaptation.created_at.desc()).limit(limit).all()

    def save(self, *records: Any) -> None:
        """Commit pending changes to the given records in one transaction."""
        for record in records:
            self.db.add(record)
        self.db.commit()
        for record in records:
            self.db.refresh(record)

    # Reflections

    def add_reflection(self, reflection: Reflection) -> Reflection:
        self.db.add(reflection)
        self.db.commit()
        self.db.refresh(reflection)
        return reflection

    def list_reflections(self, user_id: UUID, limit: int = 10) -> List[Reflection]:
        return (
            self.db.query(Reflection)
            .filter(Reflection.user_id == user_id)
            .order_by(Reflection.period_end.desc(), Reflection.created_at.desc())
            .limit(limit)
            .all()
        )

    # Agent audit log

    def add_agent_log(self, log: AgentLog) -> AgentLog:
        self.get_or_create_user(log.user_id)
        self.db.add(log)
        self.db.commit()
        return log

    def list_agent_logs(
        self,
        user_id: UUID,
        *,
        agent_type: str | None = None,
        limit: int = 50,
    ) -> List[AgentLog]:
        query = self.db.query(AgentLog).filter(AgentLog.user_id == user_id)
        if agent_type:
            query = query.filter(AgentLog.agent_type == agent_type)
        return query.order_by(AgentLog.created_at.desc()).limit(limit).all()

    def rollback(self) -> None:
        self.db.rollback()
