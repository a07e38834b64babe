"""Schemas for direct agent execution."""
from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AgentExecuteRequest(BaseModel):
    user_id: UUID
    data: Dict[str, Any] = Field(default_factory=dict)


class AgentOutputResponse(BaseModel):
    agent_type: str
    success: bool
    reasoning: str
    action: Dict[str, Any]
    confidence: float
    metadata: Optional[Dict[str, Any]] = None
    request_id: str
