"""Direct agent execution endpoint."""
from __future__ import annotations

from datetime import datetime, timezone
from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from adaptwell.api.deps import require_reasoning
from adaptwell.api.schemas.agents import AgentExecuteRequest, AgentOutputResponse
from adaptwell.db.deps import get_db
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services.agents import AgentContext, UnknownAgentError, resolve_agent_type
from adaptwell.services.orchestrator import Orchestrator
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway

router = APIRouter()


@router.post("/agents/{agent_type}/execute", response_model=AgentOutputResponse, tags=["agents"])
def execute_agent(
    agent_type: str,
    payload: AgentExecuteRequest,
    request: Request,
    db: Session = Depends(get_db),
    reasoning: ReasoningGateway = Depends(require_reasoning),
) -> AgentOutputResponse:
    request_id = getattr(request.state, "request_id", None)
    try:
        resolved = resolve_agent_type(agent_type)
    except UnknownAgentError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    metadata = {"agent": resolved.value, "request_id": request_id}
    start = perf_counter()
    with trace("agents.execute", metadata=metadata, user_id=str(payload.user_id), request_id=request_id):
        orchestrator = Orchestrator(PersistenceGateway(db), reasoning)
        output = orchestrator.execute_agent(
            resolved,
            AgentContext(user_id=payload.user_id, timestamp=datetime.now(timezone.utc), data=payload.data),
        )

    latency_ms = (perf_counter() - start) * 1000
    outcome = "success" if output.success else "failure"
    log_metric(f"agents.execute.{outcome}", 1, metadata={"agent": resolved.value})
    log_metric("agents.execute.latency_ms", latency_ms, metadata={"agent": resolved.value})

    return AgentOutputResponse(agent_type=resolved.value, **output.to_dict(), request_id=request_id or "")
