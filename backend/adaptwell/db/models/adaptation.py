"""Adaptation ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from adaptwell.db.base import Base
from adaptwell.db.types import JSONBCompat


class Adaptation(Base):
    """One adaptation decision: proposed -> approved|rejected, approved -> implemented."""

    __tablename__ = "adaptations"
    __table_args__ = (Index("ix_adaptations_user_id", "user_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="SET NULL"), nullable=True)
    plan_id = Column(UUID(as_uuid=True), ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)
    trigger_type = Column(String(length=50), nullable=False, default="manual")
    trigger_data = Column(JSONBCompat, nullable=False, default=dict)
    detected_issue = Column(Text, nullable=False, default="unknown")
    analysis_reasoning = Column(Text, nullable=False, default="")
    action_type = Column(String(length=50), nullable=False)
    action_details = Column(JSONBCompat, nullable=False, default=dict)
    autonomous = Column(Boolean, nullable=False, server_default=sa_text("false"))
    confidence = Column(Float, nullable=False, default=0.0)
    expected_impact = Column(Text, nullable=False, default="")
    status = Column(String(length=20), nullable=False, server_default=sa_text("'proposed'"))
    decided_by = Column(String(length=20), nullable=True)
    user_approved = Column(Boolean, nullable=True)
    implemented = Column(Boolean, nullable=False, server_default=sa_text("false"))
    implemented_at = Column(DateTime(timezone=True), nullable=True)
    explanation = Column(JSONBCompat, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
