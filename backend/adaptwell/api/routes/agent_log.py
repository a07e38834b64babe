"""Agent audit log transparency endpoint."""
from __future__ import annotations

from time import perf_counter
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from adaptwell.api.schemas.agent_log import AgentLogItem, AgentLogListResponse
from adaptwell.db.deps import get_db
from adaptwell.db.models.agent_log import AgentLog
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services.agents import UnknownAgentError, resolve_agent_type
from adaptwell.services.persistence import PersistenceGateway

router = APIRouter()


@router.get("/agent-log", response_model=AgentLogListResponse, tags=["agent-log"])
def list_agent_log(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    agent_type: Optional[str] = Query(None, description="Filter by agent type"),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
) -> AgentLogListResponse:
    request_id = getattr(request.state, "request_id", None)
    if agent_type is not None:
        try:
            agent_type = resolve_agent_type(agent_type).value
        except UnknownAgentError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    metadata = {"agent_type": agent_type, "limit": limit, "request_id": request_id}
    start = perf_counter()
    with trace("agent_log.list", metadata=metadata, user_id=str(user_id), request_id=request_id):
        logs = PersistenceGateway(db).list_agent_logs(user_id, agent_type=agent_type, limit=limit)

    latency_ms = (perf_counter() - start) * 1000
    items = [_serialize_log_item(log) for log in logs]
    log_metric("agent_log.list.count", len(items), metadata={"user_id": str(user_id)})
    log_metric("agent_log.list.latency_ms", latency_ms, metadata={"user_id": str(user_id)})

    return AgentLogListResponse(user_id=user_id, items=items, request_id=request_id or "")


def _serialize_log_item(log: AgentLog) -> AgentLogItem:
    output = _ensure_dict(log.output)
    confidence = output.get("confidence")
    return AgentLogItem(
        id=log.id,
        created_at=log.created_at.isoformat() if log.created_at else "",
        agent_type=log.agent_type,
        action=log.action,
        execution_time_ms=log.execution_time_ms or 0,
        confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
        input=_ensure_dict(log.input),
        output=output,
    )


def _ensure_dict(payload: Any) -> dict[str, Any]:
    if isinstance(payload, dict):
        return payload
    return {}
