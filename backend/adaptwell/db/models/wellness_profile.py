"""Wellness profile ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from adaptwell.db.base import Base
from adaptwell.db.types import JSONBCompat


class WellnessProfile(Base):
    """Onboarding answers. At most one per user, replaced wholesale on upsert."""

    __tablename__ = "wellness_profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    primary_intent = Column(Text, nullable=False)
    secondary_intents = Column(JSONBCompat, nullable=False, default=list)
    available_time = Column(Integer, nullable=False)
    energy_level = Column(String(length=20), nullable=False)
    current_routine = Column(Text, nullable=False, default="")
    barriers = Column(JSONBCompat, nullable=False, default=list)
    motivation_style = Column(String(length=20), nullable=False)
    preferred_activities = Column(JSONBCompat, nullable=False, default=list)
    adherence_risk = Column(String(length=20), nullable=False)
    historical_failures = Column(JSONBCompat, nullable=False, default=list)
    planning_preference = Column(String(length=20), nullable=False)
    feedback_frequency = Column(String(length=20), nullable=False)
    prefer_explanations = Column(Boolean, nullable=False, server_default=sa_text("true"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
