from __future__ import annotations

import copy
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adaptwell.db.base import Base
from adaptwell.db.models.adaptation import Adaptation
from adaptwell.db.models.goal import Goal
from adaptwell.db.models.reflection import Reflection
from adaptwell.db.models.user import User
from adaptwell.services import job_runner
from adaptwell.services.job_runner import (
    run_cognitive_cycle_for_all_users,
    run_reflection_for_all_users,
    run_reflection_for_user,
)
from adaptwell.services.reasoning.base import ReasoningGateway

NOW = datetime(2024, 9, 9, 6, 0, tzinfo=timezone.utc)


class _FixedGateway(ReasoningGateway):
    """Same reply for every agent; the monitoring report never asks for adaptation."""

    def __init__(self, reply=None):
        self.reply = reply or {
            "reasoning": "steady",
            "action": {"type": "monitoring_report", "patterns": ["consistent mornings"]},
            "confidence": 0.8,
            "metadata": {"requiresAdaptation": False},
        }
        self.calls = 0

    def complete(self, system_prompt, user_prompt, temperature):
        self.calls += 1
        return copy.deepcopy(self.reply)


def _session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _seed_user(db_session, goal_status="active"):
    session = db_session()
    try:
        user_id = uuid4()
        session.add(User(id=user_id))
        session.flush()
        session.add(Goal(user_id=user_id, title="Stretch daily", status=goal_status))
        session.commit()
        return user_id
    finally:
        session.close()


def test_cycle_runs_only_for_users_with_active_goals():
    Session = _session()
    active = _seed_user(Session)
    _seed_user(Session, goal_status="paused")
    gateway = _FixedGateway()

    session = Session()
    result = run_cognitive_cycle_for_all_users(session, reasoning=gateway, now=NOW)
    session.close()

    assert result.users_processed == 1
    assert result.adaptations_proposed == 0
    assert result.failures == 0
    assert gateway.calls == 1
    assert active is not None


def test_explicit_user_ids_are_deduplicated():
    Session = _session()
    user_id = _seed_user(Session)
    gateway = _FixedGateway()

    session = Session()
    result = run_cognitive_cycle_for_all_users(session, user_ids=[user_id, user_id], reasoning=gateway, now=NOW)
    session.close()

    assert result.users_processed == 1
    assert gateway.calls == 1


def test_one_failing_user_does_not_stop_the_batch(monkeypatch):
    Session = _session()
    broken = _seed_user(Session)
    healthy = _seed_user(Session)
    real_run = job_runner.run_cognitive_cycle_for_user

    def flaky(db, user_id, **kwargs):
        if user_id == broken:
            raise RuntimeError("database went away")
        return real_run(db, user_id, **kwargs)

    monkeypatch.setattr(job_runner, "run_cognitive_cycle_for_user", flaky)

    session = Session()
    result = run_cognitive_cycle_for_all_users(session, user_ids=[broken, healthy], reasoning=_FixedGateway(), now=NOW)
    session.close()

    assert result.failures == 1
    assert result.users_processed == 1


def test_cycle_counts_proposed_adaptations():
    Session = _session()
    user_id = _seed_user(Session)
    gateway = _FixedGateway(
        {
            "reasoning": "needs change",
            "action": {"type": "continue", "autonomous": False},
            "confidence": 0.6,
            "metadata": {"requiresAdaptation": True},
        }
    )

    session = Session()
    result = run_cognitive_cycle_for_all_users(session, user_ids=[user_id], reasoning=gateway, now=NOW)
    stored = session.query(Adaptation).filter(Adaptation.user_id == user_id).all()
    session.close()

    assert result.adaptations_proposed == 1
    assert result.adaptations_applied == 0
    assert len(stored) == 1
    assert stored[0].status == "proposed"


def test_reflection_job_writes_one_reflection_per_user():
    Session = _session()
    first = _seed_user(Session)
    second = _seed_user(Session)
    reply = {
        "reasoning": "quiet week",
        "action": {"patterns": ["skips Fridays"], "recommendations": ["move Friday to Saturday"]},
        "confidence": 0.65,
    }

    session = Session()
    result = run_reflection_for_all_users(session, reasoning=_FixedGateway(reply), now=NOW)
    rows = session.query(Reflection).all()
    session.close()

    assert result.users_processed == 2
    assert result.reflections_written == 2
    assert {row.user_id for row in rows} == {first, second}
    assert all(row.period_end.isoformat() == "2024-09-09" for row in rows)
    assert all(row.period_start.isoformat() == "2024-09-02" for row in rows)


def test_failed_reflection_is_not_counted():
    Session = _session()
    user_id = _seed_user(Session)

    class _Down(ReasoningGateway):
        def complete(self, system_prompt, user_prompt, temperature):
            raise RuntimeError("provider down")

    session = Session()
    written = run_reflection_for_user(session, user_id, reasoning=_Down(), now=NOW)
    count = session.query(Reflection).count()
    session.close()

    assert written is False
    assert count == 0
