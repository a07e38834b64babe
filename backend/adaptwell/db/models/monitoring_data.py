"""Monitoring data ORM model (append-only daily activity log)."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from adaptwell.db.base import Base


class MonitoringData(Base):
    __tablename__ = "monitoring_data"
    __table_args__ = (
        Index("ix_monitoring_data_user_id_date", "user_id", "date"),
        Index("ix_monitoring_data_goal_id", "goal_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="SET NULL"), nullable=True)
    plan_id = Column(UUID(as_uuid=True), ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)
    date = Column(Date, nullable=False)
    activity_type = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False)
    value = Column(Float, nullable=True)
    unit = Column(String(length=50), nullable=True)
    energy_level = Column(String(length=20), nullable=True)
    motivation = Column(String(length=20), nullable=True)
    difficulty = Column(String(length=20), nullable=True)
    enjoyment = Column(String(length=20), nullable=True)
    notes = Column(Text, nullable=True)
    time_of_day = Column(String(length=20), nullable=True)
    location = Column(Text, nullable=True)
    social = Column(Boolean, nullable=True)
    # Derived at write time from strictly earlier entries.
    streak_count = Column(Integer, nullable=False, server_default=sa_text("0"))
    consecutive_misses = Column(Integer, nullable=False, server_default=sa_text("0"))
    is_deviation = Column(Boolean, nullable=False, server_default=sa_text("false"))
    deviation_type = Column(String(length=20), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
