"""Operational endpoints for scheduler jobs."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from adaptwell.api.deps import require_reasoning
from adaptwell.api.schemas.jobs import JobRunRequest, JobRunResponse
from adaptwell.core.config import settings
from adaptwell.db.deps import get_db
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services.job_runner import (
    JobRunResult,
    run_cognitive_cycle_for_all_users,
    run_reflection_for_all_users,
)
from adaptwell.services.reasoning.base import ReasoningGateway

router = APIRouter()


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"request_id": request_id}, request_id=request_id):
        data = {
            "scheduler_enabled": settings.scheduler_enabled,
            "schedule": {
                "timezone": settings.scheduler_timezone,
                "cycle_time": f"{settings.cycle_job_hour:02d}:{settings.cycle_job_minute:02d}",
                "reflection_day": settings.reflection_job_day,
                "reflection_time": f"{settings.reflection_job_hour:02d}:00",
            },
        }
    return {**data, "request_id": request_id or ""}


@router.post("/jobs/run-now", response_model=JobRunResponse, tags=["jobs"])
def run_job_now(
    request: Request,
    payload: JobRunRequest,
    db: Session = Depends(get_db),
    reasoning: ReasoningGateway = Depends(require_reasoning),
) -> JobRunResponse:
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    metadata = {"job": payload.job, "request_id": request_id}
    user_ids = [payload.user_id] if payload.user_id else None
    start = perf_counter()
    with trace("jobs.run_now", metadata=metadata, request_id=request_id):
        if payload.job == "cognitive_cycle":
            result: JobRunResult = run_cognitive_cycle_for_all_users(db, user_ids=user_ids, reasoning=reasoning)
        else:
            result = run_reflection_for_all_users(db, user_ids=user_ids, reasoning=reasoning)

    latency_ms = (perf_counter() - start) * 1000
    log_metric("jobs.run_now.success", 1, metadata={"job": payload.job})
    log_metric("jobs.run_now.latency_ms", latency_ms, metadata={"job": payload.job})

    return JobRunResponse(
        job=payload.job,
        users_processed=result.users_processed,
        adaptations_proposed=result.adaptations_proposed,
        adaptations_applied=result.adaptations_applied,
        reflections_written=result.reflections_written,
        failures=result.failures,
        request_id=request_id or "",
    )
