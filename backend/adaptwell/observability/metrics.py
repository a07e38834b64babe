"""Lightweight metrics helpers."""
from __future__ import annotations

from typing import Any, Dict, Optional

from adaptwell.observability.tracing import trace


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a metric as a short-lived Opik trace; no-op when tracing is off."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    with trace(f"metric:{name}", metadata=payload):
        pass
