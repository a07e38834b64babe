"""Batch job runners for the daily cognitive cycle and weekly reflection."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from adaptwell.services.orchestrator import REFLECTION_PERIOD_DAYS, CycleResult, Orchestrator
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway
from adaptwell.services.reasoning.factory import get_reasoning_gateway


logger = logging.getLogger(__name__)


@dataclass
class JobRunResult:
    users_processed: int
    adaptations_proposed: int = 0
    adaptations_applied: int = 0
    reflections_written: int = 0
    failures: int = 0


def run_cognitive_cycle_for_user(
    db: Session,
    user_id: UUID,
    *,
    reasoning: ReasoningGateway | None = None,
    reflect: bool = False,
    now: datetime | None = None,
) -> CycleResult:
    orchestrator = Orchestrator(PersistenceGateway(db), reasoning or get_reasoning_gateway())
    return orchestrator.cognitive_cycle(user_id, now=now, reflect=reflect)


def run_cognitive_cycle_for_all_users(
    db: Session,
    *,
    user_ids: Optional[Iterable[UUID]] = None,
    reasoning: ReasoningGateway | None = None,
    now: datetime | None = None,
) -> JobRunResult:
    reasoning = reasoning or get_reasoning_gateway()
    result = JobRunResult(users_processed=0)
    for uid in _normalize_user_ids(user_ids, db):
        try:
            cycle = run_cognitive_cycle_for_user(db, uid, reasoning=reasoning, now=now)
        except Exception:
            db.rollback()
            result.failures += 1
            logger.exception("Cognitive cycle job failed for user %s", uid)
            continue
        result.users_processed += 1
        if cycle.adaptation and cycle.adaptation.record is not None:
            result.adaptations_proposed += 1
            if cycle.adaptation.applied:
                result.adaptations_applied += 1
    return result


def run_reflection_for_user(
    db: Session,
    user_id: UUID,
    *,
    reasoning: ReasoningGateway | None = None,
    now: datetime | None = None,
) -> bool:
    now = now or datetime.now(timezone.utc)
    orchestrator = Orchestrator(PersistenceGateway(db), reasoning or get_reasoning_gateway())
    output = orchestrator.reflect(
        user_id,
        period_start=(now - timedelta(days=REFLECTION_PERIOD_DAYS)).date(),
        period_end=now.date(),
    )
    return output.success


def run_reflection_for_all_users(
    db: Session,
    *,
    user_ids: Optional[Iterable[UUID]] = None,
    reasoning: ReasoningGateway | None = None,
    now: datetime | None = None,
) -> JobRunResult:
    reasoning = reasoning or get_reasoning_gateway()
    result = JobRunResult(users_processed=0)
    for uid in _normalize_user_ids(user_ids, db):
        try:
            written = run_reflection_for_user(db, uid, reasoning=reasoning, now=now)
        except Exception:
            db.rollback()
            result.failures += 1
            logger.exception("Reflection job failed for user %s", uid)
            continue
        result.users_processed += 1
        if written:
            result.reflections_written += 1
    return result


def _normalize_user_ids(user_ids: Optional[Iterable[UUID]], db: Session) -> List[UUID]:
    if user_ids is None:
        return PersistenceGateway(db).users_with_active_goals()
    return list(dict.fromkeys(user_ids))
