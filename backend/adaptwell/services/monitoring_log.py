"""Monitoring writes: streak, miss and deviation bookkeeping."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

from adaptwell.db.models.goal import Goal
from adaptwell.db.models.monitoring_data import MonitoringData
from adaptwell.services.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

# Misses beyond this many in a row flag an entry even if it was completed.
DEVIATION_MISS_THRESHOLD = 2


@dataclass(frozen=True)
class RunCounters:
    streak_count: int
    consecutive_misses: int
    is_deviation: bool
    deviation_type: Optional[str]


def compute_run_counters(completed: bool, previous_completed: Iterable[bool]) -> RunCounters:
    """
    Derive counters for a new entry from earlier entries, newest first.

    Only the leading run that matches the new entry's outcome is counted; the
    scan stops at the first entry that breaks it.
    """
    run = 0
    for earlier in previous_completed:
        if earlier != completed:
            break
        run += 1

    streak = run + 1 if completed else 0
    misses = 0 if completed else run + 1
    return RunCounters(
        streak_count=streak,
        consecutive_misses=misses,
        is_deviation=(not completed) or misses > DEVIATION_MISS_THRESHOLD,
        deviation_type=None if completed else "missed",
    )


def record_monitoring_entry(
    persistence: PersistenceGateway,
    user_id: UUID,
    fields: Dict[str, Any],
) -> MonitoringData:
    """
    Append one activity log entry with its derived counters.

    Assumes a single writer per user: a concurrent insert with an earlier date
    between the scan and the insert would make the counters stale.
    """
    entry_date: date = fields["date"]
    completed = bool(fields["completed"])
    counters = compute_run_counters(completed, persistence.iter_completion_before(user_id, entry_date))

    entry = MonitoringData(
        user_id=user_id,
        **fields,
        streak_count=counters.streak_count,
        consecutive_misses=counters.consecutive_misses,
        is_deviation=counters.is_deviation,
        deviation_type=counters.deviation_type,
    )
    entry = persistence.add_monitoring(entry)
    logger.info(
        "Monitoring entry stored user=%s date=%s completed=%s streak=%s misses=%s deviation=%s",
        user_id,
        entry_date.isoformat(),
        completed,
        counters.streak_count,
        counters.consecutive_misses,
        counters.is_deviation,
    )

    if entry.goal_id is not None:
        refresh_goal_progress(persistence, entry.goal_id)
    return entry


def refresh_goal_progress(persistence: PersistenceGateway, goal_id: UUID) -> Optional[Goal]:
    """Recompute a goal's current value from its completed entries."""
    goal = persistence.get_goal(goal_id)
    if goal is None:
        return None
    total, count = persistence.goal_progress(goal_id)
    progress = total if total > 0 else float(count)
    # Entries are append-only, so the aggregate can only grow.
    if progress > (goal.current_value or 0.0):
        goal.current_value = progress
        persistence.save(goal)
    return goal
