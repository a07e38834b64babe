"""Adaptation lifecycle: autonomy gate, approval transitions and plan/goal effects."""
from __future__ import annotations

import copy
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from adaptwell.db.models.adaptation import Adaptation
from adaptwell.db.models.goal import Goal
from adaptwell.db.models.plan import STRATEGY_TYPES, Plan
from adaptwell.services.agents.base import AgentOutput
from adaptwell.services.drafts import coerce_blocks
from adaptwell.services.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

# Exclusive lower bound; the agent must also flag the action as autonomous.
AUTONOMY_CONFIDENCE_THRESHOLD = 0.75
MIN_SESSION_MINUTES = 5

ALLOWED_TRANSITIONS = {
    "proposed": {"approved", "rejected"},
    "approved": {"implemented"},
}


class InvalidAdaptationTransition(ValueError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move adaptation from '{current}' to '{target}'")
        self.current = current
        self.target = target


def passes_autonomy_gate(output: AgentOutput) -> bool:
    return output.action.get("autonomous") is True and output.confidence > AUTONOMY_CONFIDENCE_THRESHOLD


def transition(adaptation: Adaptation, target: str) -> None:
    current = adaptation.status or "proposed"
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidAdaptationTransition(current, target)
    adaptation.status = target


def adaptation_from_output(
    user_id: UUID,
    output: AgentOutput,
    *,
    goal: Optional[Goal] = None,
    plan: Optional[Plan] = None,
    trigger_data: Optional[Dict[str, Any]] = None,
) -> Adaptation:
    """Build a proposed Adaptation row from an adaptation agent result."""
    action = output.action or {}
    metadata = output.metadata or {}
    changes = action.get("changes")
    return Adaptation(
        user_id=user_id,
        goal_id=goal.id if goal is not None else None,
        plan_id=plan.id if plan is not None else None,
        trigger_type=str(metadata.get("triggerType") or "deviation")[:50],
        trigger_data=trigger_data or {},
        detected_issue=str(metadata.get("detectedIssue") or "unknown"),
        analysis_reasoning=output.reasoning,
        action_type=str(action.get("type") or "continue"),
        action_details=_finite_only(changes) if isinstance(changes, dict) else {},
        autonomous=action.get("autonomous") is True,
        confidence=output.confidence,
        expected_impact=str(action.get("expectedImpact") or action.get("rationale") or ""),
        status="proposed",
        implemented=False,
    )


class AdaptationApplier:
    """Interprets an adaptation's action against the user's goal and plan."""

    def __init__(self, persistence: PersistenceGateway) -> None:
        self.persistence = persistence

    def apply(self, adaptation: Adaptation) -> Dict[str, List[str]]:
        goal = self._goal_for(adaptation)
        plan = self._plan_for(adaptation, goal)
        details = dict(adaptation.action_details or {})
        changed: Dict[str, List[str]] = {"goal": [], "plan": []}

        action_type = adaptation.action_type
        if action_type == "adapt_plan" and plan is not None:
            changed["plan"] = _adapt_plan(plan, details)
        elif action_type == "adjust_goal" and goal is not None:
            changed["goal"] = _adjust_goal(goal, details)
        elif action_type == "change_strategy" and plan is not None:
            strategy = str(details.get("strategyType") or "").lower()
            if strategy in STRATEGY_TYPES and strategy != plan.strategy_type:
                plan.strategy_type = strategy
                changed["plan"] = ["strategy_type"]
            elif strategy not in STRATEGY_TYPES:
                logger.warning("Ignoring unknown strategy %r on adaptation %s", strategy, adaptation.id)
        elif action_type == "pause":
            if goal is not None and goal.status == "active":
                goal.status = "paused"
                changed["goal"] = ["status"]
            if plan is not None and plan.status == "active":
                plan.status = "paused"
                changed["plan"] = ["status"]

        touched: List[Any] = []
        if changed["plan"]:
            plan.version = (plan.version or 1) + 1
            touched.append(plan)
        if changed["goal"]:
            touched.append(goal)
        if touched:
            self.persistence.save(*touched)
        logger.info(
            "Applied adaptation %s (%s) goal_fields=%s plan_fields=%s",
            adaptation.id,
            action_type,
            changed["goal"],
            changed["plan"],
        )
        return changed

    def _goal_for(self, adaptation: Adaptation) -> Optional[Goal]:
        if adaptation.goal_id is not None:
            return self.persistence.get_goal(adaptation.goal_id, adaptation.user_id)
        return self.persistence.get_active_goal(adaptation.user_id)

    def _plan_for(self, adaptation: Adaptation, goal: Optional[Goal]) -> Optional[Plan]:
        if adaptation.plan_id is not None:
            return self.persistence.get_plan(adaptation.plan_id, adaptation.user_id)
        if goal is not None:
            return self.persistence.get_active_plan(goal.id)
        return None


def _adapt_plan(plan: Plan, details: Dict[str, Any]) -> List[str]:
    changed: List[str] = []
    blocks = copy.deepcopy(list(plan.activities or []))

    if details.get("useRecovery") is True and plan.recovery_plan:
        blocks = copy.deepcopy(list(plan.recovery_plan))
        changed.append("activities")
    elif details.get("useFallback") is True and plan.fallback_plan:
        blocks = copy.deepcopy(list(plan.fallback_plan))
        changed.append("activities")

    replacement = coerce_blocks(details.get("activities"))
    if replacement:
        blocks = replacement
        changed.append("activities")

    delta = _as_int(details.get("durationDelta"))
    current_week = plan.current_week or 1
    if delta:
        for block in blocks:
            if int(block.get("week") or 1) >= current_week:
                block["duration"] = max(int(block.get("duration") or 0) + delta, MIN_SESSION_MINUTES)
        changed.append("activities")

    if "activities" in changed:
        plan.activities = blocks

    length = max([int(block.get("week") or 1) for block in blocks] or [1])
    target_week = _as_int(details.get("currentWeek"))
    if target_week is None and details.get("advanceWeek") is True:
        target_week = current_week + 1
    if target_week is not None:
        target_week = min(max(target_week, 1), length)
        if target_week != current_week:
            plan.current_week = target_week
            changed.append("current_week")

    return sorted(set(changed))


def _adjust_goal(goal: Goal, details: Dict[str, Any]) -> List[str]:
    changed: List[str] = []
    target = _as_float(details.get("targetValue"))
    if target is not None and target > 0:
        goal.target_value = target
        changed.append("target_value")
    misses = _as_int(details.get("allowedMisses"))
    if misses is not None and misses >= 0:
        goal.allowed_misses = misses
        changed.append("allowed_misses")
    if isinstance(details.get("unit"), str) and details["unit"].strip():
        goal.unit = details["unit"].strip()[:50]
        changed.append("unit")
    if isinstance(details.get("timeBound"), str) and details["timeBound"].strip():
        goal.time_bound = details["timeBound"].strip()
        changed.append("time_bound")
    if details.get("useFallbackGoal") is True and goal.fallback_goal:
        goal.description = goal.fallback_goal
        changed.append("description")
    return changed


def mark_implemented(adaptation: Adaptation, *, now: Optional[datetime] = None) -> None:
    transition(adaptation, "implemented")
    adaptation.implemented = True
    adaptation.implemented_at = now or datetime.now(timezone.utc)


def implement_autonomously(
    persistence: PersistenceGateway,
    adaptation: Adaptation,
    applier: AdaptationApplier,
) -> Adaptation:
    """Approve and apply without user input; only call once the gate has passed."""
    transition(adaptation, "approved")
    adaptation.decided_by = "autonomous"
    applier.apply(adaptation)
    mark_implemented(adaptation)
    persistence.save(adaptation)
    return adaptation


def decide_adaptation(
    persistence: PersistenceGateway,
    user_id: UUID,
    adaptation_id: UUID,
    approved: bool,
    applier: Optional[AdaptationApplier] = None,
) -> Adaptation:
    """Record a user's decision on a proposed adaptation, applying it on approval."""
    adaptation = persistence.get_adaptation(adaptation_id, user_id)
    if adaptation is None:
        raise LookupError(f"Adaptation {adaptation_id} not found")

    if not approved:
        transition(adaptation, "rejected")
        adaptation.user_approved = False
        adaptation.decided_by = "user"
        persistence.save(adaptation)
        logger.info("Adaptation %s rejected by user %s", adaptation.id, user_id)
        return adaptation

    transition(adaptation, "approved")
    adaptation.user_approved = True
    adaptation.decided_by = "user"
    (applier or AdaptationApplier(persistence)).apply(adaptation)
    mark_implemented(adaptation)
    persistence.save(adaptation)
    logger.info("Adaptation %s approved and implemented for user %s", adaptation.id, user_id)
    return adaptation


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return None if number is None else int(number)


def _finite_only(value: Any) -> Any:
    """Copy a JSON-like value with NaN and infinities replaced by None."""
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _finite_only(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_finite_only(item) for item in value]
    return value
