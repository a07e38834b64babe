"""Tests for metrics and tracing helpers."""
from __future__ import annotations

from typing import Any, Dict

import pytest

from adaptwell.core.context import cycle_scope, get_cycle_id
from adaptwell.observability import metrics
from adaptwell.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.errors: list[Dict[str, Any]] = []
        self.ended = False

    def update(self, error_info=None, **kwargs) -> None:
        if error_info:
            self.errors.append(error_info)

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


def test_log_metric_closes_trace(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    metrics.log_metric("agent.latency_ms", 42, metadata={"agent": "monitoring"})

    assert dummy_client.traces, "Metric call should record a trace"
    assert dummy_client.traces[0].name == "metric:agent.latency_ms"
    assert dummy_client.traces[0].metadata["value"] == 42
    assert dummy_client.traces[0].metadata["agent"] == "monitoring"
    assert dummy_client.traces[0].ended is True


def test_trace_carries_user_and_cycle_ids(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    with cycle_scope("cycle-1") as cycle_id:
        assert get_cycle_id() == cycle_id
        with tracing.trace("agent.monitoring", metadata={"empty": None, "agent": "monitoring"}, user_id="u-1"):
            pass

    assert get_cycle_id() is None
    recorded = dummy_client.traces[0].metadata
    assert recorded == {"agent": "monitoring", "user_id": "u-1", "cycle_id": "cycle-1"}


def test_trace_records_errors_and_reraises(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    with pytest.raises(ValueError):
        with tracing.trace("cognitive_cycle"):
            raise ValueError("boom")

    assert dummy_client.traces[0].errors == [{"message": "boom"}]
    assert dummy_client.traces[0].ended is True


def test_trace_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    with tracing.trace("agent.reflection") as span:
        assert span is None
