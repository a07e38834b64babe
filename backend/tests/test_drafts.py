from datetime import date, timedelta
from uuid import uuid4

from adaptwell.db.models.goal import Goal
from adaptwell.services.drafts import (
    DEFAULT_PROGRESSION_RULES,
    DEFAULT_RECOVERY_STRATEGY,
    build_fallback_goal,
    build_fallback_plan,
    coerce_blocks,
    goal_from_draft,
    normalize_goal_draft,
    normalize_plan_draft,
    plan_from_draft,
)


def test_goal_draft_fills_tolerance_fields():
    normalized, defaulted = normalize_goal_draft(
        {"title": "Run more", "type": "fitness", "targetValue": "10", "unit": "km"}
    )

    assert normalized["category"] == "fitness"
    assert normalized["targetValue"] == 10.0
    assert normalized["allowedMisses"] == 2
    assert normalized["recoveryStrategy"] == DEFAULT_RECOVERY_STRATEGY
    assert normalized["fallbackGoal"] == "Reduce target to 7 km if struggling"
    assert defaulted == ["allowedMisses", "recoveryStrategy", "fallbackGoal"]


def test_goal_draft_keeps_supplied_values_and_ignores_junk():
    normalized, defaulted = normalize_goal_draft(
        {
            "title": "  ",
            "targetValue": "lots",
            "allowedMisses": 0,
            "recoveryStrategy": "Walk instead",
            "fallbackGoal": "Two sessions",
            "surprise": True,
        }
    )

    assert normalized["title"] == "Wellness goal"
    assert normalized["targetValue"] == 0.0
    assert normalized["allowedMisses"] == 0
    assert normalized["recoveryStrategy"] == "Walk instead"
    assert "surprise" not in normalized
    assert defaulted == []


def test_non_dict_goal_draft_is_fully_defaulted():
    normalized, defaulted = normalize_goal_draft(["not", "a", "goal"])

    assert normalized["unit"] == "sessions"
    assert "fallbackGoal" in defaulted


def test_goal_from_draft_maps_columns():
    user_id = uuid4()
    goal = goal_from_draft(user_id, {"title": "Sleep", "category": "sleep", "timeBound": "8 weeks", "targetValue": 8})

    assert goal.user_id == user_id
    assert goal.type == "sleep"
    assert goal.time_bound == "8 weeks"
    assert goal.status == "active"
    assert goal.allowed_misses == 2


def test_plan_draft_derives_fallback_and_recovery():
    normalized, defaulted = normalize_plan_draft(
        {
            "title": "Cardio",
            "strategyType": "Intensive",
            "activities": [
                {"week": 1, "days": ["Mon", "Wed", "Fri"], "activity": "Jog", "duration": 40, "intensity": "medium"}
            ],
            "physicalLoad": 14,
            "progressionRules": "Add a day after two good weeks",
        },
        duration_weeks=4,
    )

    assert normalized["strategyType"] == "intensive"
    assert normalized["physicalLoad"] == 10.0
    assert normalized["cognitiveLoad"] == 3.0
    assert normalized["hasFallback"] is True
    assert normalized["fallbackPlan"] == [
        {"week": 1, "days": ["Mon", "Wed"], "activity": "Jog", "duration": 30, "intensity": "very-low"}
    ]
    assert normalized["recoveryPlan"][0]["days"] == ["Mon"]
    assert normalized["recoveryPlan"][0]["duration"] == 10
    assert normalized["progressionRules"] == ["Add a day after two good weeks"]
    assert normalized["regressionRules"]
    assert defaulted == ["fallbackPlan", "recoveryPlan"]


def test_plan_draft_without_activities_gets_progressive_schedule():
    normalized, defaulted = normalize_plan_draft({"title": "Walks"}, duration_weeks=4)

    durations = [block["duration"] for block in normalized["activities"]]
    assert durations == [20, 25, 30, 30]
    assert len(normalized["activities"][3]["days"]) == 4
    assert normalized["strategyType"] == "gradual"
    assert "activities" in defaulted and "strategyType" in defaulted


def test_week_keyed_activities_are_flattened():
    blocks = coerce_blocks(
        {
            "week1": [{"day": "Monday", "activity": "Swim", "duration": 30}],
            "Week 2": [{"days": ["Tuesday"], "activity": "Swim", "duration": "35"}],
            "notes": "ignored",
        }
    )

    assert [(block["week"], block["days"], block["duration"]) for block in blocks] == [
        (1, ["Monday"], 30),
        (2, ["Tuesday"], 35),
    ]


def test_plan_from_draft_uses_dates_when_present():
    goal = Goal(id=uuid4(), user_id=uuid4(), title="Cardio")
    plan = plan_from_draft(
        goal,
        {"title": "Cardio", "startDate": "2024-03-04T00:00:00Z"},
        today=date(2024, 3, 1),
        duration_weeks=6,
    )

    assert plan.start_date == date(2024, 3, 4)
    assert plan.end_date == date(2024, 3, 4) + timedelta(weeks=6)
    assert plan.goal_id == goal.id
    assert plan.version == 1
    assert len(plan.activities) == 6


def test_fallback_goal_and_plan_are_deterministic():
    user_id = uuid4()
    goal = build_fallback_goal(
        user_id,
        category="fitness",
        description=None,
        target_value=12,
        target_unit=None,
        deadline=date(2024, 6, 30),
    )
    goal.id = uuid4()
    plan = build_fallback_plan(goal, today=date(2024, 6, 1))

    assert goal.title == "Fitness Goal"
    assert goal.description == "Achieve 12 sessions"
    assert goal.time_bound == "By 2024-06-30"
    assert goal.fallback_goal == "Reduce target to 8 sessions if struggling"
    assert plan.title == "Fitness Goal - 4 Week Plan"
    assert plan.sustainability_score == 8.0
    assert plan.end_date == date(2024, 6, 29)
    assert plan.progression_rules == DEFAULT_PROGRESSION_RULES
    assert plan.fallback_plan[0]["duration"] == 15
    assert plan.recovery_plan[0]["note"] == "Restart gently"


def test_non_finite_numbers_fall_back_to_defaults():
    for raw in (float("inf"), float("-inf"), float("nan"), 10**400):
        normalized, _ = normalize_goal_draft({"title": "Walk", "targetValue": raw, "allowedMisses": raw})

        assert normalized["targetValue"] == 0.0
        assert normalized["allowedMisses"] == 2
        assert normalized["fallbackGoal"] == "Reduce target to 0 sessions if struggling"

    blocks = coerce_blocks([{"week": float("nan"), "days": ["Monday"], "activity": "Walk", "duration": float("inf")}])
    assert (blocks[0]["week"], blocks[0]["duration"]) == (1, 20)
