"""Reflection endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from adaptwell.api.deps import require_reasoning
from adaptwell.api.schemas.reflections import ReflectionListResponse, ReflectionRunRequest, ReflectionRunResponse
from adaptwell.db.deps import get_db
from adaptwell.observability.tracing import trace
from adaptwell.services.orchestrator import Orchestrator
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway
from adaptwell.services.snapshots import reflection_snapshot

router = APIRouter()


@router.get("/reflections", response_model=ReflectionListResponse, tags=["reflections"])
def list_reflections(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> ReflectionListResponse:
    request_id = getattr(request.state, "request_id", None)
    reflections = PersistenceGateway(db).list_reflections(user_id, limit=limit)
    return ReflectionListResponse(
        user_id=user_id,
        items=[reflection_snapshot(item) for item in reflections],
        request_id=request_id or "",
    )


@router.post("/reflections", response_model=ReflectionRunResponse, tags=["reflections"])
def run_reflection(
    payload: ReflectionRunRequest,
    request: Request,
    db: Session = Depends(get_db),
    reasoning: ReasoningGateway = Depends(require_reasoning),
) -> ReflectionRunResponse:
    request_id = getattr(request.state, "request_id", None)
    persistence = PersistenceGateway(db)
    with trace("reflections.run", user_id=str(payload.user_id), request_id=request_id):
        output = Orchestrator(persistence, reasoning).reflect(payload.user_id, payload.period_start, payload.period_end)
    latest = persistence.list_reflections(payload.user_id, limit=1) if output.success else []
    return ReflectionRunResponse(
        success=output.success,
        reflection=reflection_snapshot(latest[0]) if latest else None,
        request_id=request_id or "",
    )
