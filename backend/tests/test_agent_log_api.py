from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adaptwell.db.base import Base
from adaptwell.db.deps import get_db
from adaptwell.db.models.agent_log import AgentLog
from adaptwell.db.models.user import User
from adaptwell.main import app


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


def _seed_logs(session_factory, user_id: UUID) -> None:
    session = session_factory()
    try:
        session.add(User(id=user_id))
        session.flush()
        session.add_all(
            [
                AgentLog(
                    user_id=user_id,
                    agent_type="monitoring",
                    action="monitoring_report",
                    input={"prompt": "Recent Activity"},
                    reasoning={"reasoning": "steady"},
                    output={"success": True, "confidence": 0.82, "action": {"type": "monitoring_report"}},
                    execution_time_ms=120,
                ),
                AgentLog(
                    user_id=user_id,
                    agent_type="adaptation",
                    action="adapt_plan",
                    input={"prompt": "Monitoring Report"},
                    reasoning={"reasoning": "too much"},
                    output={"success": True, "confidence": 0.6, "action": {"type": "adapt_plan"}},
                    execution_time_ms=340,
                ),
                AgentLog(
                    user_id=user_id,
                    agent_type="reflection",
                    action="reasoning",
                    input={"prompt": "Reflection Period"},
                    reasoning={},
                    output="not a dict",
                    execution_time_ms=90,
                ),
            ]
        )
        session.commit()
    finally:
        session.close()


def test_agent_log_lists_user_entries(client):
    test_client, session_factory = client
    user_id = uuid4()
    _seed_logs(session_factory, user_id)

    resp = test_client.get("/agent-log", params={"user_id": str(user_id)})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["user_id"] == str(user_id)
    assert payload["request_id"]
    assert len(payload["items"]) == 3
    by_type = {item["agent_type"]: item for item in payload["items"]}
    assert by_type["monitoring"]["confidence"] == 0.82
    assert by_type["monitoring"]["execution_time_ms"] == 120
    assert by_type["monitoring"]["input"] == {"prompt": "Recent Activity"}
    assert by_type["reflection"]["output"] == {}
    assert by_type["reflection"]["confidence"] is None


def test_agent_log_filters_by_agent_type(client):
    test_client, session_factory = client
    user_id = uuid4()
    _seed_logs(session_factory, user_id)

    resp = test_client.get("/agent-log", params={"user_id": str(user_id), "agent_type": "adaptation"})
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [item["action"] for item in items] == ["adapt_plan"]


def test_agent_log_limit_and_isolation(client):
    test_client, session_factory = client
    user_id = uuid4()
    _seed_logs(session_factory, user_id)

    limited = test_client.get("/agent-log", params={"user_id": str(user_id), "limit": 2})
    assert len(limited.json()["items"]) == 2

    other = test_client.get("/agent-log", params={"user_id": str(uuid4())})
    assert other.status_code == 200
    assert other.json()["items"] == []


def test_agent_log_rejects_unknown_agent_type(client):
    test_client, _ = client

    resp = test_client.get("/agent-log", params={"user_id": str(uuid4()), "agent_type": "oracle"})
    assert resp.status_code == 400


def test_agent_log_validates_limit(client):
    test_client, _ = client

    resp = test_client.get("/agent-log", params={"user_id": str(uuid4()), "limit": 500})
    assert resp.status_code == 422
