"""Schemas for job operations endpoints."""
from __future__ import annotations

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel


class JobRunRequest(BaseModel):
    job: Literal["cognitive_cycle", "reflection"]
    user_id: Optional[UUID] = None


class JobRunResponse(BaseModel):
    job: str
    users_processed: int
    adaptations_proposed: int = 0
    adaptations_applied: int = 0
    reflections_written: int = 0
    failures: int = 0
    request_id: str
