"""Reflection ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import UUID

from adaptwell.db.base import Base
from adaptwell.db.types import JSONBCompat


class Reflection(Base):
    __tablename__ = "reflections"
    __table_args__ = (Index("ix_reflections_user_id_period_end", "user_id", "period_end"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reflection_type = Column(String(length=20), nullable=False, default="weekly")
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    intended_behavior = Column(JSONBCompat, nullable=False, default=dict)
    actual_behavior = Column(JSONBCompat, nullable=False, default=dict)
    comparison = Column(JSONBCompat, nullable=False, default=dict)
    success_factors = Column(JSONBCompat, nullable=False, default=list)
    failure_factors = Column(JSONBCompat, nullable=False, default=list)
    external_factors = Column(JSONBCompat, nullable=False, default=list)
    patterns = Column(JSONBCompat, nullable=False, default=list)
    root_causes = Column(JSONBCompat, nullable=False, default=list)
    lessons_learned = Column(JSONBCompat, nullable=False, default=list)
    heuristic_updates = Column(JSONBCompat, nullable=False, default=dict)
    recommendations = Column(JSONBCompat, nullable=False, default=list)
    confidence_score = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
