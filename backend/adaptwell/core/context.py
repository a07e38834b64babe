"""Per-request and per-job context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import uuid4

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
cycle_id_ctx_var: ContextVar[str | None] = ContextVar("cycle_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_cycle_id() -> str | None:
    """Return the id of the cognitive cycle currently running, if any."""
    return cycle_id_ctx_var.get()


@contextmanager
def cycle_scope(cycle_id: str | None = None) -> Iterator[str]:
    """Bind a cycle id for log correlation while a cognitive cycle runs."""
    value = cycle_id or uuid4().hex[:12]
    token = cycle_id_ctx_var.set(value)
    try:
        yield value
    finally:
        cycle_id_ctx_var.reset(token)
