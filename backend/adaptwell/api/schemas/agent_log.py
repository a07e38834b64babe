"""Schemas for the agent audit log endpoint."""
from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel


class AgentLogItem(BaseModel):
    id: UUID
    created_at: str
    agent_type: str
    action: str
    execution_time_ms: int
    confidence: Optional[float] = None
    input: Dict[str, Any]
    output: Dict[str, Any]


class AgentLogListResponse(BaseModel):
    user_id: UUID
    items: List[AgentLogItem]
    request_id: str
