"""Goal formulation and plan generation endpoints."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from time import perf_counter
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from adaptwell.api.deps import optional_reasoning
from adaptwell.api.schemas.goals import (
    GoalFormulateRequest,
    GoalFormulateResponse,
    PlanGenerateRequest,
    PlanGenerateResponse,
)
from adaptwell.core.config import settings
from adaptwell.db.deps import get_db
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services.agents import AgentContext, AgentType
from adaptwell.services.drafts import build_fallback_goal, build_fallback_plan, goal_from_draft, plan_from_draft
from adaptwell.services.orchestrator import Orchestrator
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway
from adaptwell.services.snapshots import goal_snapshot, plan_snapshot

logger = logging.getLogger(__name__)
router = APIRouter()

GOAL_FAILURE_MESSAGE = "We couldn't shape your goal right now. Please try again in a moment."
PLAN_FAILURE_MESSAGE = "We couldn't build your plan right now. Please try again in a moment."


@router.post("/goals/formulate", response_model=GoalFormulateResponse, status_code=201, tags=["goals"])
def formulate_goal(
    payload: GoalFormulateRequest,
    request: Request,
    db: Session = Depends(get_db),
    reasoning: Optional[ReasoningGateway] = Depends(optional_reasoning),
) -> GoalFormulateResponse:
    request_id = getattr(request.state, "request_id", None)
    persistence = PersistenceGateway(db)
    today = date.today()
    deadline = payload.deadline or today + timedelta(weeks=settings.default_plan_weeks)
    source = "agent" if reasoning is not None else "fallback"
    start = perf_counter()

    with trace("goals.formulate", metadata={"source": source}, user_id=str(payload.user_id), request_id=request_id):
        if reasoning is None:
            goal = persistence.add_goal(
                build_fallback_goal(
                    payload.user_id,
                    category=payload.category,
                    description=payload.description,
                    target_value=payload.target_value,
                    target_unit=payload.target_unit,
                    deadline=deadline,
                )
            )
            response = GoalFormulateResponse(goal=goal_snapshot(goal), source="fallback", request_id=request_id or "")
        else:
            if persistence.get_profile(payload.user_id) is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wellness profile not found")
            output = Orchestrator(persistence, reasoning).execute_agent(
                AgentType.GOAL_FORMULATION,
                AgentContext(
                    user_id=payload.user_id,
                    timestamp=datetime.now(timezone.utc),
                    data={
                        "intent": payload.intent or payload.description,
                        "context": {
                            **payload.context,
                            "category": payload.category,
                            "targetValue": payload.target_value,
                            "targetUnit": payload.target_unit,
                            "deadline": deadline.isoformat(),
                        },
                    },
                ),
            )
            if not output.success or not isinstance(output.action.get("goal"), dict):
                log_metric("goals.formulate.failure", 1)
                logger.warning("Goal formulation failed for user %s: %s", payload.user_id, output.reasoning)
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=GOAL_FAILURE_MESSAGE)
            goal = persistence.add_goal(goal_from_draft(payload.user_id, output.action["goal"]))
            response = GoalFormulateResponse(
                goal=goal_snapshot(goal),
                source="agent",
                reasoning=output.reasoning,
                confidence=output.confidence,
                defaulted_fields=(output.metadata or {}).get("defaultedFields", []),
                request_id=request_id or "",
            )

    log_metric("goals.formulate.success", 1, metadata={"source": source})
    log_metric("goals.formulate.latency_ms", (perf_counter() - start) * 1000, metadata={"source": source})
    return response


@router.post("/plans/generate", response_model=PlanGenerateResponse, status_code=201, tags=["plans"])
def generate_plan(
    payload: PlanGenerateRequest,
    request: Request,
    db: Session = Depends(get_db),
    reasoning: Optional[ReasoningGateway] = Depends(optional_reasoning),
) -> PlanGenerateResponse:
    request_id = getattr(request.state, "request_id", None)
    persistence = PersistenceGateway(db)
    goal = persistence.get_goal(payload.goal_id, payload.user_id)
    if goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")

    today = date.today()
    source = "agent" if reasoning is not None else "fallback"
    start = perf_counter()
    with trace("plans.generate", metadata={"source": source}, user_id=str(payload.user_id), request_id=request_id):
        if reasoning is None:
            plan = persistence.add_plan(build_fallback_plan(goal, today=today, duration_weeks=payload.duration_weeks))
            response = PlanGenerateResponse(plan=plan_snapshot(plan), source="fallback", request_id=request_id or "")
        else:
            output = Orchestrator(persistence, reasoning).execute_agent(
                AgentType.PLANNING,
                AgentContext(
                    user_id=payload.user_id,
                    timestamp=datetime.now(timezone.utc),
                    data={"goalId": str(goal.id), "duration": payload.duration_weeks},
                ),
            )
            if not output.success or not isinstance(output.action.get("plan"), dict):
                log_metric("plans.generate.failure", 1)
                logger.warning("Plan generation failed for user %s: %s", payload.user_id, output.reasoning)
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=PLAN_FAILURE_MESSAGE)
            plan = persistence.add_plan(
                plan_from_draft(goal, output.action["plan"], today=today, duration_weeks=payload.duration_weeks)
            )
            response = PlanGenerateResponse(
                plan=plan_snapshot(plan),
                source="agent",
                reasoning=output.reasoning,
                confidence=output.confidence,
                defaulted_fields=(output.metadata or {}).get("defaultedFields", []),
                request_id=request_id or "",
            )

    log_metric("plans.generate.success", 1, metadata={"source": source})
    log_metric("plans.generate.latency_ms", (perf_counter() - start) * 1000, metadata={"source": source})
    return response
