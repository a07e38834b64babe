"""Agent invocation audit log ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID

from adaptwell.db.base import Base
from adaptwell.db.types import JSONBCompat


class AgentLog(Base):
    """One row per successful reasoning call. Never updated or deleted."""

    __tablename__ = "agent_logs"
    __table_args__ = (
        Index("ix_agent_logs_user_id", "user_id"),
        Index("ix_agent_logs_agent_type", "agent_type"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    agent_type = Column(String(length=50), nullable=False)
    action = Column(String(length=100), nullable=False)
    input = Column(JSONBCompat, nullable=False, default=dict)
    reasoning = Column(JSONBCompat, nullable=False, default=dict)
    output = Column(JSONBCompat, nullable=False, default=dict)
    execution_time_ms = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
