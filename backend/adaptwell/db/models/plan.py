"""Plan ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from adaptwell.db.base import Base
from adaptwell.db.types import JSONBCompat

STRATEGY_TYPES = ("gradual", "intensive", "maintenance")


class Plan(Base):
    __tablename__ = "plans"
    __table_args__ = (
        Index("ix_plans_user_id", "user_id"),
        Index("ix_plans_goal_id", "goal_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(length=20), nullable=False, server_default=sa_text("'active'"))
    version = Column(Integer, nullable=False, default=1)
    strategy_type = Column(String(length=20), nullable=False, default="gradual")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    current_week = Column(Integer, nullable=False, default=1)
    physical_load = Column(Float, nullable=False, default=5.0)
    cognitive_load = Column(Float, nullable=False, default=3.0)
    sustainability_score = Column(Float, nullable=False, default=7.0)
    # Ordered blocks: {"week", "days", "activity", "duration", "intensity"}
    activities = Column(JSONBCompat, nullable=False, default=list)
    progression_rules = Column(JSONBCompat, nullable=False, default=list)
    regression_rules = Column(JSONBCompat, nullable=False, default=list)
    fallback_plan = Column(JSONBCompat, nullable=True)
    recovery_plan = Column(JSONBCompat, nullable=True)
    has_fallback = Column(Boolean, nullable=False, server_default=sa_text("false"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
