"""Schemas for reflection endpoints."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, model_validator


class ReflectionRunRequest(BaseModel):
    user_id: UUID
    period_start: date
    period_end: date

    @model_validator(mode="after")
    def _ordered(self) -> "ReflectionRunRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


class ReflectionRunResponse(BaseModel):
    success: bool
    reflection: Optional[Dict[str, Any]] = None
    request_id: str


class ReflectionListResponse(BaseModel):
    user_id: UUID
    items: List[Dict[str, Any]]
    request_id: str
