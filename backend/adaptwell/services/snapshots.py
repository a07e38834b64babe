"""JSON-safe snapshots of persisted records for prompts and API payloads."""
from __future__ import annotations

from typing import Any, Dict, Optional

from adaptwell.db.models.adaptation import Adaptation
from adaptwell.db.models.goal import Goal
from adaptwell.db.models.monitoring_data import MonitoringData
from adaptwell.db.models.plan import Plan
from adaptwell.db.models.reflection import Reflection
from adaptwell.db.models.wellness_profile import WellnessProfile


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def profile_snapshot(profile: Optional[WellnessProfile]) -> Optional[Dict[str, Any]]:
    if profile is None:
        return None
    return {
        "primaryIntent": profile.primary_intent,
        "secondaryIntents": list(profile.secondary_intents or []),
        "availableTime": profile.available_time,
        "energyLevel": profile.energy_level,
        "currentRoutine": profile.current_routine,
        "barriers": list(profile.barriers or []),
        "motivationStyle": profile.motivation_style,
        "preferredActivities": list(profile.preferred_activities or []),
        "adherenceRisk": profile.adherence_risk,
        "historicalFailures": list(profile.historical_failures or []),
        "planningPreference": profile.planning_preference,
        "feedbackFrequency": profile.feedback_frequency,
    }


def goal_snapshot(goal: Optional[Goal]) -> Optional[Dict[str, Any]]:
    if goal is None:
        return None
    return {
        "id": str(goal.id),
        "title": goal.title,
        "description": goal.description,
        "type": goal.type,
        "status": goal.status,
        "specific": goal.specific,
        "measurable": goal.measurable,
        "achievable": goal.achievable,
        "relevant": goal.relevant,
        "timeBound": goal.time_bound,
        "baselineValue": goal.baseline_value,
        "currentValue": goal.current_value,
        "targetValue": goal.target_value,
        "unit": goal.unit,
        "allowedMisses": goal.allowed_misses,
        "recoveryStrategy": goal.recovery_strategy,
        "fallbackGoal": goal.fallback_goal,
    }


def plan_snapshot(plan: Optional[Plan]) -> Optional[Dict[str, Any]]:
    if plan is None:
        return None
    return {
        "id": str(plan.id),
        "goalId": str(plan.goal_id),
        "title": plan.title,
        "description": plan.description,
        "status": plan.status,
        "version": plan.version,
        "strategyType": plan.strategy_type,
        "startDate": _iso(plan.start_date),
        "endDate": _iso(plan.end_date),
        "currentWeek": plan.current_week,
        "physicalLoad": plan.physical_load,
        "cognitiveLoad": plan.cognitive_load,
        "sustainabilityScore": plan.sustainability_score,
        "activities": list(plan.activities or []),
        "progressionRules": list(plan.progression_rules or []),
        "regressionRules": list(plan.regression_rules or []),
        "fallbackPlan": plan.fallback_plan,
        "recoveryPlan": plan.recovery_plan,
        "hasFallback": bool(plan.has_fallback),
    }


def monitoring_snapshot(entry: MonitoringData) -> Dict[str, Any]:
    return {
        "id": str(entry.id),
        "goalId": str(entry.goal_id) if entry.goal_id else None,
        "planId": str(entry.plan_id) if entry.plan_id else None,
        "date": _iso(entry.date),
        "activityType": entry.activity_type,
        "completed": entry.completed,
        "value": entry.value,
        "unit": entry.unit,
        "energyLevel": entry.energy_level,
        "motivation": entry.motivation,
        "difficulty": entry.difficulty,
        "enjoyment": entry.enjoyment,
        "notes": entry.notes,
        "streakCount": entry.streak_count,
        "consecutiveMisses": entry.consecutive_misses,
        "isDeviation": entry.is_deviation,
        "deviationType": entry.deviation_type,
    }


def adaptation_snapshot(adaptation: Adaptation) -> Dict[str, Any]:
    return {
        "id": str(adaptation.id),
        "triggerType": adaptation.trigger_type,
        "detectedIssue": adaptation.detected_issue,
        "analysisReasoning": adaptation.analysis_reasoning,
        "actionType": adaptation.action_type,
        "actionDetails": adaptation.action_details or {},
        "autonomous": adaptation.autonomous,
        "confidence": adaptation.confidence,
        "expectedImpact": adaptation.expected_impact,
        "status": adaptation.status,
        "decidedBy": adaptation.decided_by,
        "userApproved": adaptation.user_approved,
        "implemented": adaptation.implemented,
        "implementedAt": _iso(adaptation.implemented_at),
        "explanation": adaptation.explanation,
    }


def reflection_snapshot(reflection: Reflection) -> Dict[str, Any]:
    return {
        "id": str(reflection.id),
        "reflectionType": reflection.reflection_type,
        "periodStart": _iso(reflection.period_start),
        "periodEnd": _iso(reflection.period_end),
        "patterns": list(reflection.patterns or []),
        "rootCauses": list(reflection.root_causes or []),
        "lessonsLearned": list(reflection.lessons_learned or []),
        "recommendations": list(reflection.recommendations or []),
        "heuristicUpdates": dict(reflection.heuristic_updates or {}),
        "confidenceScore": reflection.confidence_score,
    }
