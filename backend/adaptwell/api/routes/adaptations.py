"""Adaptation proposal and decision endpoints."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from adaptwell.api.deps import require_reasoning
from adaptwell.api.schemas.adaptations import (
    AdaptationDecisionRequest,
    AdaptationDecisionResponse,
    AdaptationListResponse,
    AdaptationStatus,
    AdaptationTriggerRequest,
    AdaptationTriggerResponse,
)
from adaptwell.db.deps import get_db
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services.adaptation_decisions import InvalidAdaptationTransition, decide_adaptation
from adaptwell.services.agents import AgentContext, AgentType
from adaptwell.services.orchestrator import Orchestrator
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway
from adaptwell.services.snapshots import adaptation_snapshot

router = APIRouter()


@router.get("/adaptations", response_model=AdaptationListResponse, tags=["adaptations"])
def list_adaptations(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    status_filter: Optional[AdaptationStatus] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> AdaptationListResponse:
    """List a user's adaptations, newest first; `status=proposed` gives the ones awaiting a decision."""
    request_id = getattr(request.state, "request_id", None)
    metadata = {"status": status_filter, "limit": limit}
    with trace("adaptations.list", metadata=metadata, user_id=str(user_id), request_id=request_id):
        adaptations = PersistenceGateway(db).list_adaptations(user_id, status=status_filter, limit=limit)
    return AdaptationListResponse(
        user_id=user_id,
        items=[adaptation_snapshot(item) for item in adaptations],
        request_id=request_id or "",
    )


@router.post("/adaptations", response_model=AdaptationTriggerResponse, status_code=201, tags=["adaptations"])
def trigger_adaptation(
    payload: AdaptationTriggerRequest,
    request: Request,
    db: Session = Depends(get_db),
    reasoning: ReasoningGateway = Depends(require_reasoning),
) -> AdaptationTriggerResponse:
    """Analyse recent behaviour and store a proposal that waits for the user's decision."""
    request_id = getattr(request.state, "request_id", None)
    now = datetime.now(timezone.utc)
    orchestrator = Orchestrator(PersistenceGateway(db), reasoning)

    with trace("adaptations.trigger", user_id=str(payload.user_id), request_id=request_id):
        monitoring = orchestrator.execute_agent(AgentType.MONITORING, AgentContext(user_id=payload.user_id, timestamp=now))
        proposal = orchestrator.propose_adaptation(
            payload.user_id,
            monitoring,
            now=now,
            goal_id=payload.goal_id,
            plan_id=payload.plan_id,
            allow_autonomous=False,
        )

    if proposal.record is None:
        log_metric("adaptations.trigger.failure", 1)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to analyze adaptation")

    log_metric("adaptations.trigger.success", 1, metadata={"action_type": proposal.record.action_type})
    explanation = proposal.explanation
    return AdaptationTriggerResponse(
        adaptation=adaptation_snapshot(proposal.record),
        recommendation=proposal.output.action,
        explanation=explanation.action if explanation is not None and explanation.success else None,
        confidence=proposal.output.confidence,
        requires_approval=proposal.record.status == "proposed",
        request_id=request_id or "",
    )


@router.patch("/adaptations/{adaptation_id}", response_model=AdaptationDecisionResponse, tags=["adaptations"])
def decide(
    adaptation_id: UUID,
    payload: AdaptationDecisionRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AdaptationDecisionResponse:
    request_id = getattr(request.state, "request_id", None)
    metadata = {"adaptation_id": str(adaptation_id), "approved": payload.approved}
    with trace("adaptations.decide", metadata=metadata, user_id=str(payload.user_id), request_id=request_id):
        try:
            adaptation = decide_adaptation(PersistenceGateway(db), payload.user_id, adaptation_id, payload.approved)
        except InvalidAdaptationTransition as exc:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except LookupError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Adaptation not found") from exc

    log_metric("adaptations.decide.success", 1, metadata={"approved": payload.approved})
    return AdaptationDecisionResponse(adaptation=adaptation_snapshot(adaptation), request_id=request_id or "")
