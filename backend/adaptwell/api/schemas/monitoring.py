"""Schemas for the monitoring log endpoints."""
from __future__ import annotations

from datetime import date as date_type
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class MonitoringCreateRequest(BaseModel):
    user_id: UUID
    goal_id: Optional[UUID] = None
    plan_id: Optional[UUID] = None
    date: date_type = Field(default_factory=date_type.today)
    activity_type: str = Field(..., min_length=1)
    completed: bool
    value: Optional[float] = None
    unit: Optional[str] = None
    energy_level: Optional[str] = None
    motivation: Optional[str] = None
    difficulty: Optional[str] = None
    enjoyment: Optional[str] = None
    notes: Optional[str] = None
    time_of_day: Optional[str] = None
    location: Optional[str] = None
    social: Optional[bool] = None


class MonitoringEntryResponse(BaseModel):
    entry: Dict[str, Any]
    analysis_triggered: bool = False
    request_id: str


class MonitoringListResponse(BaseModel):
    user_id: UUID
    items: List[Dict[str, Any]]
    request_id: str
