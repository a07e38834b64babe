"""Goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from adaptwell.db.base import Base

GOAL_STATUSES = ("active", "paused", "completed", "abandoned")


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (Index("ix_goals_user_id", "user_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(length=50), nullable=False, default="fitness")
    status = Column(String(length=20), nullable=False, server_default=sa_text("'active'"))
    specific = Column(Text, nullable=True)
    measurable = Column(Text, nullable=True)
    achievable = Column(Text, nullable=True)
    relevant = Column(Text, nullable=True)
    time_bound = Column(Text, nullable=True)
    baseline_value = Column(Float, nullable=False, default=0.0)
    current_value = Column(Float, nullable=False, default=0.0)
    target_value = Column(Float, nullable=False, default=0.0)
    unit = Column(String(length=50), nullable=False, default="sessions")
    # Tolerated misses per week before the goal is flagged for review.
    allowed_misses = Column(Integer, nullable=False, default=2)
    recovery_strategy = Column(Text, nullable=True)
    fallback_goal = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
