from __future__ import annotations

import copy
from datetime import date
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adaptwell.api.deps import require_reasoning
from adaptwell.db.base import Base
from adaptwell.db.deps import get_db
from adaptwell.db.models.monitoring_data import MonitoringData
from adaptwell.db.models.reflection import Reflection
from adaptwell.db.models.user import User
from adaptwell.main import app
from adaptwell.services.reasoning.base import ReasoningGateway


class _StubGateway(ReasoningGateway):
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    def complete(self, system_prompt, user_prompt, temperature):
        self.prompts.append(user_prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return copy.deepcopy(self.reply)


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _seed_week(session_factory):
    session = session_factory()
    try:
        user_id = uuid4()
        session.add(User(id=user_id))
        session.flush()
        session.add_all(
            [
                MonitoringData(user_id=user_id, date=date(2024, 4, 1), activity_type="Swim", completed=True,
                               streak_count=1, consecutive_misses=0, is_deviation=False),
                MonitoringData(user_id=user_id, date=date(2024, 4, 3), activity_type="Swim", completed=False,
                               streak_count=0, consecutive_misses=1, is_deviation=True, deviation_type="missed"),
            ]
        )
        session.commit()
        return user_id
    finally:
        session.close()


def test_run_reflection_persists_result(client):
    test_client, session_factory = client
    user_id = _seed_week(session_factory)
    gateway = _StubGateway(
        {
            "reasoning": "Midweek slump",
            "action": {"patterns": "Wednesdays slip", "lessonsLearned": ["pack the bag the night before"]},
            "confidence": 0.6,
        }
    )
    app.dependency_overrides[require_reasoning] = lambda: gateway

    resp = test_client.post(
        "/reflections",
        json={"user_id": str(user_id), "period_start": "2024-04-01", "period_end": "2024-04-07"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["reflection"]["patterns"] == ["Wednesdays slip"]
    assert body["reflection"]["periodEnd"] == "2024-04-07"
    assert "Reflection Period: 2024-04-01 to 2024-04-07" in gateway.prompts[0]

    session = session_factory()
    try:
        row = session.query(Reflection).one()
        assert row.actual_behavior["logged"] == 2
        assert row.actual_behavior["completed"] == 1
        assert row.confidence_score == 0.6
    finally:
        session.close()

    listed = test_client.get("/reflections", params={"user_id": str(user_id)})
    assert listed.status_code == 200
    assert len(listed.json()["items"]) == 1


def test_failed_reflection_stores_nothing(client):
    test_client, session_factory = client
    user_id = _seed_week(session_factory)
    app.dependency_overrides[require_reasoning] = lambda: _StubGateway(RuntimeError("provider down"))

    resp = test_client.post(
        "/reflections",
        json={"user_id": str(user_id), "period_start": "2024-04-01", "period_end": "2024-04-07"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "reflection": None, "request_id": resp.json()["request_id"]}

    session = session_factory()
    try:
        assert session.query(Reflection).count() == 0
    finally:
        session.close()


def test_period_must_be_ordered(client):
    test_client, _ = client
    app.dependency_overrides[require_reasoning] = lambda: _StubGateway({})

    resp = test_client.post(
        "/reflections",
        json={"user_id": str(uuid4()), "period_start": "2024-04-07", "period_end": "2024-04-01"},
    )
    assert resp.status_code == 422
