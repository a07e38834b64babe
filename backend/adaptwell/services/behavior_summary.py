"""Intended-vs-actual summaries used by reflection and analytics."""
from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Sequence

from adaptwell.db.models.monitoring_data import MonitoringData
from adaptwell.db.models.plan import Plan


def plan_weeks_in_period(plan: Plan, period_start: date, period_end: date) -> List[int]:
    """Week numbers of `plan` whose seven-day span overlaps the period."""
    weeks = sorted({int(block.get("week") or 1) for block in plan.activities or []})
    if plan.start_date is None:
        return [plan.current_week or 1] if weeks else []
    overlapping = []
    for week in weeks:
        week_start = plan.start_date + timedelta(weeks=week - 1)
        week_end = week_start + timedelta(days=6)
        if week_start <= period_end and week_end >= period_start:
            overlapping.append(week)
    return overlapping


def intended_behavior(plans: Iterable[Plan], period_start: date, period_end: date) -> Dict[str, Any]:
    summaries = []
    planned_sessions = 0
    for plan in plans:
        weeks = set(plan_weeks_in_period(plan, period_start, period_end))
        blocks = [block for block in plan.activities or [] if int(block.get("week") or 1) in weeks]
        planned_sessions += sum(len(block.get("days") or []) for block in blocks)
        summaries.append(
            {
                "planId": str(plan.id),
                "title": plan.title,
                "strategyType": plan.strategy_type,
                "weeks": sorted(weeks),
                "blocks": blocks,
            }
        )
    return {"plans": summaries, "plannedSessions": planned_sessions}


def actual_behavior(entries: Sequence[MonitoringData]) -> Dict[str, Any]:
    """Summarise logged entries; order of `entries` does not matter."""
    ordered = sorted(entries, key=lambda entry: entry.date)
    completed = [entry for entry in ordered if entry.completed]
    by_activity: Dict[str, Dict[str, int]] = defaultdict(lambda: {"logged": 0, "completed": 0})
    for entry in ordered:
        by_activity[entry.activity_type]["logged"] += 1
        if entry.completed:
            by_activity[entry.activity_type]["completed"] += 1

    return {
        "logged": len(ordered),
        "completed": len(completed),
        "missed": len(ordered) - len(completed),
        "completionRate": completion_rate(ordered),
        "longestStreak": longest_streak(ordered),
        "currentStreak": current_streak(ordered),
        "deviations": sum(1 for entry in ordered if entry.is_deviation),
        "byActivity": dict(by_activity),
        "energyLevels": dict(Counter(entry.energy_level for entry in ordered if entry.energy_level)),
        "motivation": dict(Counter(entry.motivation for entry in ordered if entry.motivation)),
    }


def completion_rate(entries: Sequence[MonitoringData]) -> float:
    if not entries:
        return 0.0
    return round(sum(1 for entry in entries if entry.completed) / len(entries), 2)


def longest_streak(entries: Sequence[MonitoringData]) -> int:
    best = run = 0
    for entry in sorted(entries, key=lambda item: item.date):
        run = run + 1 if entry.completed else 0
        best = max(best, run)
    return best


def current_streak(entries: Sequence[MonitoringData]) -> int:
    run = 0
    for entry in sorted(entries, key=lambda item: item.date, reverse=True):
        if not entry.completed:
            break
        run += 1
    return run
