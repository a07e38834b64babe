"""Monitoring log endpoints."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from adaptwell.api.deps import optional_reasoning
from adaptwell.api.schemas.monitoring import MonitoringCreateRequest, MonitoringEntryResponse, MonitoringListResponse
from adaptwell.core.config import settings
from adaptwell.db.deps import get_db
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services.agents import AgentContext, AgentType
from adaptwell.services.monitoring_log import record_monitoring_entry
from adaptwell.services.orchestrator import Orchestrator
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway
from adaptwell.services.snapshots import monitoring_snapshot

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/monitoring", response_model=MonitoringEntryResponse, status_code=201, tags=["monitoring"])
def create_monitoring_entry(
    payload: MonitoringCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    reasoning: Optional[ReasoningGateway] = Depends(optional_reasoning),
) -> MonitoringEntryResponse:
    """Append an activity log entry; a deviation triggers a background trajectory read."""
    request_id = getattr(request.state, "request_id", None)
    persistence = PersistenceGateway(db)
    with trace("monitoring.create", metadata={"completed": payload.completed}, user_id=str(payload.user_id), request_id=request_id):
        entry = record_monitoring_entry(persistence, payload.user_id, payload.model_dump(exclude={"user_id"}))

    triggered = False
    if entry.is_deviation and settings.monitor_on_deviation and reasoning is not None:
        triggered = True
        try:
            Orchestrator(persistence, reasoning).execute_agent(
                AgentType.MONITORING,
                AgentContext(user_id=payload.user_id, timestamp=datetime.now(timezone.utc)),
            )
        except Exception:
            # The entry is already stored; analysis is best effort.
            logger.warning("Deviation analysis failed for user %s", payload.user_id, exc_info=True)
            persistence.rollback()

    log_metric("monitoring.create.success", 1, metadata={"deviation": entry.is_deviation})
    return MonitoringEntryResponse(
        entry=monitoring_snapshot(entry),
        analysis_triggered=triggered,
        request_id=request_id or "",
    )


@router.get("/monitoring", response_model=MonitoringListResponse, tags=["monitoring"])
def list_monitoring_entries(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    days: int = Query(30, ge=1, le=365),
    goal_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
) -> MonitoringListResponse:
    request_id = getattr(request.state, "request_id", None)
    since = date.today() - timedelta(days=days)
    with trace("monitoring.list", metadata={"days": days}, user_id=str(user_id), request_id=request_id):
        entries = PersistenceGateway(db).list_monitoring(user_id, since=since, goal_id=goal_id)
    return MonitoringListResponse(
        user_id=user_id,
        items=[monitoring_snapshot(entry) for entry in entries],
        request_id=request_id or "",
    )
