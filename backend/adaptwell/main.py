"""Main FastAPI application for the AdaptWell backend."""
from fastapi import FastAPI, Request

from adaptwell.api.routes.adaptations import router as adaptations_router
from adaptwell.api.routes.agent_log import router as agent_log_router
from adaptwell.api.routes.agents import router as agents_router
from adaptwell.api.routes.goals import router as goals_router
from adaptwell.api.routes.jobs import router as jobs_router
from adaptwell.api.routes.monitoring import router as monitoring_router
from adaptwell.api.routes.profile import router as profile_router
from adaptwell.api.routes.reflections import router as reflections_router
from adaptwell.core.config import settings
from adaptwell.core.logging import configure_logging
from adaptwell.core.middleware import RequestIDMiddleware
from adaptwell.observability.client import init_opik
from adaptwell.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(profile_router)
app.include_router(goals_router)
app.include_router(monitoring_router)
app.include_router(agents_router)
app.include_router(adaptations_router)
app.include_router(reflections_router)
app.include_router(agent_log_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness check")
async def health_check(request: Request) -> dict[str, str]:
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
