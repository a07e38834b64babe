"""Goal and plan drafts: schema normalisation, row mapping and offline fallbacks."""
from __future__ import annotations

import math
import re
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from adaptwell.db.models.goal import Goal
from adaptwell.db.models.plan import STRATEGY_TYPES, Plan

DEFAULT_ALLOWED_MISSES = 2
DEFAULT_RECOVERY_STRATEGY = "Resume with reduced intensity after missed sessions"
DEFAULT_PROGRESSION_RULES = [
    "Increase duration by 5min if completing 80%+ of activities",
    "Add 1 day if consistent for 2 weeks",
]
DEFAULT_REGRESSION_RULES = [
    "Reduce duration by 5min if missing 40%+ of activities",
    "Remove 1 day if struggling for 2 weeks",
]
WEEK_KEY = re.compile(r"^week\s*_?(\d+)$", re.IGNORECASE)


def _finite_float(value: Any) -> Optional[float]:
    """Parse a number, rejecting booleans and non-finite values (json allows NaN/Infinity)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _float_or(value: Any, default: float) -> float:
    number = _finite_float(value)
    return default if number is None else number


def _int_or_none(value: Any) -> Optional[int]:
    number = _finite_float(value)
    return None if number is None else int(number)


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class GoalDraft(BaseModel):
    """Goal shape the goal-formulation agent is asked to return."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = "Wellness goal"
    description: str = ""
    category: str = "fitness"
    specific: Optional[str] = None
    measurable: Optional[str] = None
    achievable: Optional[str] = None
    relevant: Optional[str] = None
    time_bound: Optional[str] = Field(default=None, alias="timeBound")
    target_value: float = Field(default=0.0, alias="targetValue")
    unit: str = "sessions"
    allowed_misses: Optional[int] = Field(default=None, alias="allowedMisses")
    recovery_strategy: Optional[str] = Field(default=None, alias="recoveryStrategy")
    fallback_goal: Optional[str] = Field(default=None, alias="fallbackGoal")

    @field_validator("title", "description", "category", "unit", mode="before")
    @classmethod
    def _required_text(cls, value: Any, info) -> Any:
        text = _text_or_none(value)
        return text if text is not None else cls.model_fields[info.field_name].default

    @field_validator("specific", "measurable", "achievable", "relevant", "time_bound",
                     "recovery_strategy", "fallback_goal", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @field_validator("target_value", mode="before")
    @classmethod
    def _number(cls, value: Any) -> float:
        return max(_float_or(value, 0.0), 0.0)

    @field_validator("allowed_misses", mode="before")
    @classmethod
    def _misses(cls, value: Any) -> Optional[int]:
        parsed = _int_or_none(value)
        return parsed if parsed is None or parsed >= 0 else None


class ActivityBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    week: int = 1
    days: List[str] = Field(default_factory=list)
    activity: str = "Planned session"
    duration: int = 20
    intensity: str = "low"

    @field_validator("week", mode="before")
    @classmethod
    def _week(cls, value: Any) -> int:
        parsed = _int_or_none(value)
        return parsed if parsed and parsed > 0 else 1

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value: Any) -> int:
        parsed = _int_or_none(value)
        return parsed if parsed and parsed > 0 else 20

    @field_validator("days", mode="before")
    @classmethod
    def _days(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, (str, int)):
            return [str(value)]
        return [str(day) for day in value]

    @field_validator("activity", "intensity", mode="before")
    @classmethod
    def _text(cls, value: Any, info) -> Any:
        text = _text_or_none(value)
        return text if text is not None else cls.model_fields[info.field_name].default


def normalize_goal_draft(raw: Any) -> Tuple[Dict[str, Any], List[str]]:
    """
    Coerce a model-produced goal into the GoalDraft contract.

    Missing tolerance fields are filled conservatively; the returned list names
    every field that had to be defaulted.
    """
    payload = dict(raw) if isinstance(raw, dict) else {}
    if "category" not in payload and "type" in payload:
        payload["category"] = payload["type"]
    draft = GoalDraft.model_validate(payload)

    defaulted: List[str] = []
    if draft.allowed_misses is None:
        draft.allowed_misses = DEFAULT_ALLOWED_MISSES
        defaulted.append("allowedMisses")
    if draft.recovery_strategy is None:
        draft.recovery_strategy = DEFAULT_RECOVERY_STRATEGY
        defaulted.append("recoveryStrategy")
    if draft.fallback_goal is None:
        draft.fallback_goal = _fallback_goal_text(draft.target_value, draft.unit)
        defaulted.append("fallbackGoal")
    return draft.model_dump(by_alias=True), defaulted


def normalize_plan_draft(raw: Any, *, duration_weeks: int) -> Tuple[Dict[str, Any], List[str]]:
    """Coerce a model-produced plan; fallback and recovery variants are always present."""
    payload = dict(raw) if isinstance(raw, dict) else {}
    defaulted: List[str] = []

    activities = coerce_blocks(payload.get("activities"))
    if not activities:
        activities = _progressive_blocks(payload.get("title") or "Planned session", duration_weeks)
        defaulted.append("activities")

    fallback = coerce_blocks(payload.get("fallbackPlan"))
    if not fallback:
        fallback = _reduced_blocks(activities)
        defaulted.append("fallbackPlan")

    recovery = coerce_blocks(payload.get("recoveryPlan"))
    if not recovery:
        recovery = _restart_blocks(activities)
        defaulted.append("recoveryPlan")

    strategy = str(payload.get("strategyType") or "").lower()
    if strategy not in STRATEGY_TYPES:
        strategy = "gradual"
        defaulted.append("strategyType")

    normalized = {
        "title": _text_or_none(payload.get("title")) or "Adaptive plan",
        "description": _text_or_none(payload.get("description")) or "",
        "startDate": _text_or_none(payload.get("startDate")),
        "endDate": _text_or_none(payload.get("endDate")),
        "strategyType": strategy,
        "activities": activities,
        "physicalLoad": _load(payload.get("physicalLoad"), 5.0),
        "cognitiveLoad": _load(payload.get("cognitiveLoad"), 3.0),
        "sustainabilityScore": _load(payload.get("sustainabilityScore"), 7.0),
        "fallbackPlan": fallback,
        "recoveryPlan": recovery,
        "hasFallback": True,
        "progressionRules": _coerce_rules(payload.get("progressionRules")) or list(DEFAULT_PROGRESSION_RULES),
        "regressionRules": _coerce_rules(payload.get("regressionRules")) or list(DEFAULT_REGRESSION_RULES),
    }
    return normalized, defaulted


def goal_from_draft(user_id: UUID, draft: Dict[str, Any]) -> Goal:
    normalized, _ = normalize_goal_draft(draft)
    return Goal(
        user_id=user_id,
        title=normalized["title"],
        description=normalized["description"],
        type=normalized["category"],
        status="active",
        specific=normalized["specific"],
        measurable=normalized["measurable"],
        achievable=normalized["achievable"],
        relevant=normalized["relevant"],
        time_bound=normalized["timeBound"],
        baseline_value=0.0,
        current_value=0.0,
        target_value=normalized["targetValue"],
        unit=normalized["unit"],
        allowed_misses=normalized["allowedMisses"],
        recovery_strategy=normalized["recoveryStrategy"],
        fallback_goal=normalized["fallbackGoal"],
    )


def plan_from_draft(goal: Goal, draft: Dict[str, Any], *, today: date, duration_weeks: int) -> Plan:
    normalized, _ = normalize_plan_draft(draft, duration_weeks=duration_weeks)
    start = _parse_date(normalized["startDate"]) or today
    end = _parse_date(normalized["endDate"]) or start + timedelta(weeks=duration_weeks)
    return Plan(
        user_id=goal.user_id,
        goal_id=goal.id,
        title=normalized["title"],
        description=normalized["description"],
        status="active",
        version=1,
        strategy_type=normalized["strategyType"],
        start_date=start,
        end_date=end,
        current_week=1,
        physical_load=normalized["physicalLoad"],
        cognitive_load=normalized["cognitiveLoad"],
        sustainability_score=normalized["sustainabilityScore"],
        activities=normalized["activities"],
        progression_rules=normalized["progressionRules"],
        regression_rules=normalized["regressionRules"],
        fallback_plan=normalized["fallbackPlan"],
        recovery_plan=normalized["recoveryPlan"],
        has_fallback=True,
    )


def build_fallback_goal(
    user_id: UUID,
    *,
    category: str,
    description: str | None,
    target_value: float,
    target_unit: str | None,
    deadline: date,
) -> Goal:
    """Deterministic goal used when no reasoning credential is configured."""
    unit = target_unit or "sessions"
    category = category or "fitness"
    summary = description or f"Achieve {_format_number(target_value)} {unit}"
    return Goal(
        user_id=user_id,
        title=f"{category.capitalize()} Goal",
        description=summary,
        type=category,
        status="active",
        specific=summary,
        measurable=f"{_format_number(target_value)} {unit}",
        achievable="Based on user input and available time",
        relevant=f"User wants to improve {category}",
        time_bound=f"By {deadline.isoformat()}",
        baseline_value=0.0,
        current_value=0.0,
        target_value=target_value,
        unit=unit,
        allowed_misses=DEFAULT_ALLOWED_MISSES,
        recovery_strategy=DEFAULT_RECOVERY_STRATEGY,
        fallback_goal=_fallback_goal_text(target_value, unit),
    )


def build_fallback_plan(goal: Goal, *, today: date, duration_weeks: int = 4) -> Plan:
    """Deterministic gradual plan: 3 then 4 sessions a week, 20 up to 30 minutes."""
    activity = goal.description or goal.title
    blocks = _progressive_blocks(activity, duration_weeks)
    return Plan(
        user_id=goal.user_id,
        goal_id=goal.id,
        title=f"{goal.title} - {duration_weeks} Week Plan",
        description=f"Progressive plan for: {activity}",
        status="active",
        version=1,
        strategy_type="gradual",
        start_date=today,
        end_date=today + timedelta(weeks=duration_weeks),
        current_week=1,
        physical_load=5.0,
        cognitive_load=3.0,
        sustainability_score=8.0,
        activities=blocks,
        progression_rules=list(DEFAULT_PROGRESSION_RULES),
        regression_rules=list(DEFAULT_REGRESSION_RULES),
        fallback_plan=_reduced_blocks(blocks),
        recovery_plan=_restart_blocks(blocks),
        has_fallback=True,
    )


def _progressive_blocks(activity: str, weeks: int) -> List[Dict[str, Any]]:
    blocks: List[Dict[str, Any]] = []
    half = max(weeks // 2, 1)
    for week in range(1, max(weeks, 1) + 1):
        days = ["Monday", "Wednesday", "Friday"]
        if week > half:
            days.append("Saturday")
        duration = min(20 + 5 * ((week + 1) // 2), 30) if week > 1 else 20
        blocks.append(
            {
                "week": week,
                "days": days,
                "activity": activity,
                "duration": duration,
                "intensity": "low" if week <= half else "medium",
            }
        )
    return blocks


def _reduced_blocks(blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    first = blocks[0] if blocks else {"activity": "Planned session", "days": ["Monday", "Wednesday"], "duration": 20}
    days = list(first.get("days") or ["Monday", "Wednesday"])
    keep = max(len(days) - 1, 1)
    return [
        {
            "week": 1,
            "days": days[:keep],
            "activity": first.get("activity") or "Planned session",
            "duration": max(int(int(first.get("duration") or 20) * 0.75), 10),
            "intensity": "very-low",
        }
    ]


def _restart_blocks(blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    first = blocks[0] if blocks else {"activity": "Planned session", "days": ["Monday"]}
    days = list(first.get("days") or ["Monday"])
    return [
        {
            "week": 1,
            "days": days[:1],
            "activity": first.get("activity") or "Planned session",
            "duration": 10,
            "intensity": "very-low",
            "note": "Restart gently",
        }
    ]


def coerce_blocks(raw: Any) -> List[Dict[str, Any]]:
    if isinstance(raw, dict):
        if isinstance(raw.get("activities"), (list, dict)):
            return coerce_blocks(raw["activities"])
        blocks: List[Dict[str, Any]] = []
        for key, items in raw.items():
            match = WEEK_KEY.match(str(key))
            if not match or not isinstance(items, list):
                continue
            for item in items:
                if not isinstance(item, dict):
                    continue
                entry = dict(item)
                entry["week"] = int(match.group(1))
                if "days" not in entry and "day" in entry:
                    entry["days"] = [entry.pop("day")]
                blocks.append(ActivityBlock.model_validate(entry).model_dump())
        return blocks
    if isinstance(raw, list):
        return [ActivityBlock.model_validate(item).model_dump() for item in raw if isinstance(item, dict)]
    return []


def _coerce_rules(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [raw] if raw.strip() else []
    if isinstance(raw, dict):
        return [f"{key}: {value}" for key, value in raw.items()]
    if isinstance(raw, list):
        return [str(item) for item in raw if item not in (None, "")]
    return []


def _load(value: Any, default: float) -> float:
    return min(max(_float_or(value, default), 0.0), 10.0)


def _fallback_goal_text(target_value: float, unit: str) -> str:
    reduced = math.floor(_float_or(target_value, 0.0) * 0.7)
    return f"Reduce target to {reduced} {unit} if struggling"


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None
