"""Schemas for the wellness profile upsert."""
from __future__ import annotations

from typing import List, Literal
from uuid import UUID

from pydantic import BaseModel, Field

Level = Literal["low", "medium", "high"]


class WellnessProfileRequest(BaseModel):
    user_id: UUID
    primary_intent: str = Field(..., min_length=1)
    secondary_intents: List[str] = Field(default_factory=list)
    available_time: int = Field(..., ge=0, description="Minutes per day")
    energy_level: Level
    current_routine: str = ""
    barriers: List[str] = Field(default_factory=list)
    motivation_style: Literal["achievement", "social", "health", "appearance"]
    preferred_activities: List[str] = Field(default_factory=list)
    adherence_risk: Level = "medium"
    historical_failures: List[str] = Field(default_factory=list)
    planning_preference: Literal["structured", "flexible", "minimal"] = "flexible"
    feedback_frequency: Literal["daily", "weekly", "as-needed"] = "weekly"
    prefer_explanations: bool = True
