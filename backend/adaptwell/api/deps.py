"""Request-scoped dependencies shared by the API routers."""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, status

from adaptwell.services.reasoning.base import ReasoningGateway
from adaptwell.services.reasoning.factory import get_reasoning_gateway, has_reasoning_credentials


def require_reasoning() -> ReasoningGateway:
    if not has_reasoning_credentials():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reasoning service is not configured",
        )
    return get_reasoning_gateway()


def optional_reasoning() -> Optional[ReasoningGateway]:
    """Gateway when a real credential is configured, otherwise None (fallback mode)."""
    if not has_reasoning_credentials():
        return None
    return get_reasoning_gateway()
