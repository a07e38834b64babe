"""Schemas for adaptation proposals and decisions."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel

AdaptationStatus = Literal["proposed", "approved", "rejected", "implemented"]


class AdaptationTriggerRequest(BaseModel):
    user_id: UUID
    goal_id: Optional[UUID] = None
    plan_id: Optional[UUID] = None


class AdaptationTriggerResponse(BaseModel):
    adaptation: Dict[str, Any]
    recommendation: Dict[str, Any]
    explanation: Optional[Dict[str, Any]] = None
    confidence: float
    requires_approval: bool
    request_id: str


class AdaptationDecisionRequest(BaseModel):
    user_id: UUID
    approved: bool


class AdaptationDecisionResponse(BaseModel):
    adaptation: Dict[str, Any]
    request_id: str


class AdaptationListResponse(BaseModel):
    user_id: UUID
    items: List[Dict[str, Any]]
    request_id: str
