from __future__ import annotations

import copy
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adaptwell.api.deps import require_reasoning
from adaptwell.core.config import settings
from adaptwell.db.base import Base
from adaptwell.db.deps import get_db
from adaptwell.db.models.agent_log import AgentLog
from adaptwell.db.models.user import User
from adaptwell.main import app
from adaptwell.services.reasoning.base import ReasoningGateway


class _StubGateway(ReasoningGateway):
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    def complete(self, system_prompt, user_prompt, temperature):
        self.prompts.append(user_prompt)
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


def _seed_user(session_factory):
    session = session_factory()
    try:
        user_id = uuid4()
        session.add(User(id=user_id))
        session.flush()
        session.commit()
        return user_id
    finally:
        session.close()


def test_execute_explainability_agent(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)
    gateway = _StubGateway(
        {
            "reasoning": "User asked why",
            "action": {"type": "explanation", "summary": "Shorter sessions fit your week"},
            "confidence": 0.9,
        }
    )
    app.dependency_overrides[require_reasoning] = lambda: gateway

    resp = test_client.post(
        "/agents/explainability/execute",
        json={"user_id": str(user_id), "data": {"decision": {"action": {"type": "adapt_plan"}}}},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["agent_type"] == "explainability"
    assert body["success"] is True
    assert body["action"]["summary"] == "Shorter sessions fit your week"
    assert body["confidence"] == 0.9
    assert body["request_id"]
    assert "adapt_plan" in gateway.prompts[0]

    session = session_factory()
    try:
        logs = session.query(AgentLog).filter(AgentLog.user_id == user_id).all()
        assert len(logs) == 1
        assert logs[0].agent_type == "explainability"
        assert logs[0].action == "explanation"
    finally:
        session.close()


def test_execute_accepts_underscore_agent_names(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)
    app.dependency_overrides[require_reasoning] = lambda: _StubGateway({"reasoning": "x", "action": {}})

    resp = test_client.post("/agents/goal_formulation/execute", json={"user_id": str(user_id)})

    assert resp.status_code == 200
    body = resp.json()
    assert body["agent_type"] == "goal-formulation"
    assert body["success"] is False
    assert body["reasoning"] == "No wellness profile found"


def test_unknown_agent_is_404(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)
    app.dependency_overrides[require_reasoning] = lambda: _StubGateway({})

    resp = test_client.post("/agents/horoscope/execute", json={"user_id": str(user_id)})

    assert resp.status_code == 404


def test_missing_credential_is_503(client, monkeypatch):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)
    monkeypatch.setattr(settings, "openai_api_key", None)

    resp = test_client.post("/agents/monitoring/execute", json={"user_id": str(user_id)})

    assert resp.status_code == 503


def test_provider_failure_is_reported_not_raised(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)

    class _Down(ReasoningGateway):
        def complete(self, system_prompt, user_prompt, temperature):
            raise RuntimeError("provider down")

    app.dependency_overrides[require_reasoning] = lambda: _Down()

    resp = test_client.post("/agents/monitoring/execute", json={"user_id": str(user_id)})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["confidence"] == 0.0
    assert "provider down" in body["reasoning"]

    session = session_factory()
    try:
        assert session.query(AgentLog).count() == 0
    finally:
        session.close()
