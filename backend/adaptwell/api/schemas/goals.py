"""Schemas for goal formulation and plan generation."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class GoalFormulateRequest(BaseModel):
    user_id: UUID
    category: str = Field("fitness", min_length=1)
    description: Optional[str] = None
    target_value: float = Field(0.0, ge=0, allow_inf_nan=False)
    target_unit: Optional[str] = None
    deadline: Optional[date] = None
    intent: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class GoalFormulateResponse(BaseModel):
    goal: Dict[str, Any]
    source: Literal["agent", "fallback"]
    reasoning: Optional[str] = None
    confidence: Optional[float] = None
    defaulted_fields: List[str] = Field(default_factory=list)
    request_id: str


class PlanGenerateRequest(BaseModel):
    user_id: UUID
    goal_id: UUID
    duration_weeks: int = Field(4, ge=1, le=52)


class PlanGenerateResponse(BaseModel):
    plan: Dict[str, Any]
    source: Literal["agent", "fallback"]
    reasoning: Optional[str] = None
    confidence: Optional[float] = None
    defaulted_fields: List[str] = Field(default_factory=list)
    request_id: str
