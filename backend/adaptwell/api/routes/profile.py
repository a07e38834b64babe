"""Wellness profile endpoints."""
from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from adaptwell.api.schemas.profile import WellnessProfileRequest
from adaptwell.db.deps import get_db
from adaptwell.observability.tracing import trace
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.snapshots import profile_snapshot

router = APIRouter()


@router.put("/wellness-profile", tags=["profile"])
def upsert_profile(
    payload: WellnessProfileRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Create or fully replace the user's wellness profile."""
    request_id = getattr(request.state, "request_id", None)
    with trace("profile.upsert", user_id=str(payload.user_id), request_id=request_id):
        fields = payload.model_dump(exclude={"user_id"})
        profile = PersistenceGateway(db).upsert_profile(payload.user_id, fields)
    return {"profile": profile_snapshot(profile), "request_id": request_id or ""}


@router.get("/wellness-profile", tags=["profile"])
def get_profile(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    request_id = getattr(request.state, "request_id", None)
    profile = PersistenceGateway(db).get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wellness profile not found")
    return {"profile": profile_snapshot(profile), "request_id": request_id or ""}
