"""Initial AdaptWell schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "202610190900"
down_revision = None
branch_labels = None
depends_on = None


def _uuid(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), **kwargs)


def _jsonb(name: str, default: str | None = None, nullable: bool = False) -> sa.Column:
    server_default = sa.text(f"'{default}'::jsonb") if default is not None else None
    return sa.Column(name, postgresql.JSONB(astext_type=sa.Text()), nullable=nullable, server_default=server_default)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid("id", primary_key=True, nullable=False),
        _created_at(),
    )

    op.create_table(
        "wellness_profiles",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("user_id", nullable=False),
        sa.Column("primary_intent", sa.Text(), nullable=False),
        _jsonb("secondary_intents", "[]"),
        sa.Column("available_time", sa.Integer(), nullable=False),
        sa.Column("energy_level", sa.String(length=20), nullable=False),
        sa.Column("current_routine", sa.Text(), nullable=False, server_default=sa.text("''")),
        _jsonb("barriers", "[]"),
        sa.Column("motivation_style", sa.String(length=20), nullable=False),
        _jsonb("preferred_activities", "[]"),
        sa.Column("adherence_risk", sa.String(length=20), nullable=False),
        _jsonb("historical_failures", "[]"),
        sa.Column("planning_preference", sa.String(length=20), nullable=False),
        sa.Column("feedback_frequency", sa.String(length=20), nullable=False),
        sa.Column("prefer_explanations", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", name="uq_wellness_profiles_user_id"),
    )

    op.create_table(
        "goals",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("user_id", nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("type", sa.String(length=50), nullable=False, server_default=sa.text("'fitness'")),
        sa.Column("status", sa.String(length=20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("specific", sa.Text(), nullable=True),
        sa.Column("measurable", sa.Text(), nullable=True),
        sa.Column("achievable", sa.Text(), nullable=True),
        sa.Column("relevant", sa.Text(), nullable=True),
        sa.Column("time_bound", sa.Text(), nullable=True),
        sa.Column("baseline_value", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_value", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("target_value", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("unit", sa.String(length=50), nullable=False, server_default=sa.text("'sessions'")),
        sa.Column("allowed_misses", sa.Integer(), nullable=False, server_default=sa.text("2")),
        sa.Column("recovery_strategy", sa.Text(), nullable=True),
        sa.Column("fallback_goal", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_goals_user_id", "goals", ["user_id"], unique=False)

    op.create_table(
        "plans",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("user_id", nullable=False),
        _uuid("goal_id", nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("status", sa.String(length=20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("strategy_type", sa.String(length=20), nullable=False, server_default=sa.text("'gradual'")),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("current_week", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("physical_load", sa.Float(), nullable=False, server_default=sa.text("5")),
        sa.Column("cognitive_load", sa.Float(), nullable=False, server_default=sa.text("3")),
        sa.Column("sustainability_score", sa.Float(), nullable=False, server_default=sa.text("7")),
        _jsonb("activities", "[]"),
        _jsonb("progression_rules", "[]"),
        _jsonb("regression_rules", "[]"),
        _jsonb("fallback_plan", nullable=True),
        _jsonb("recovery_plan", nullable=True),
        sa.Column("has_fallback", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["goal_id"], ["goals.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_plans_user_id", "plans", ["user_id"], unique=False)
    op.create_index("ix_plans_goal_id", "plans", ["goal_id"], unique=False)

    op.create_table(
        "monitoring_data",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("user_id", nullable=False),
        _uuid("goal_id", nullable=True),
        _uuid("plan_id", nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("activity_type", sa.Text(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("energy_level", sa.String(length=20), nullable=True),
        sa.Column("motivation", sa.String(length=20), nullable=True),
        sa.Column("difficulty", sa.String(length=20), nullable=True),
        sa.Column("enjoyment", sa.String(length=20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("time_of_day", sa.String(length=20), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("social", sa.Boolean(), nullable=True),
        sa.Column("streak_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("consecutive_misses", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_deviation", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("deviation_type", sa.String(length=20), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["goal_id"], ["goals.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_monitoring_data_user_id_date", "monitoring_data", ["user_id", "date"], unique=False)
    op.create_index("ix_monitoring_data_goal_id", "monitoring_data", ["goal_id"], unique=False)

    op.create_table(
        "adaptations",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("user_id", nullable=False),
        _uuid("goal_id", nullable=True),
        _uuid("plan_id", nullable=True),
        sa.Column("trigger_type", sa.String(length=50), nullable=False, server_default=sa.text("'manual'")),
        _jsonb("trigger_data", "{}"),
        sa.Column("detected_issue", sa.Text(), nullable=False, server_default=sa.text("'unknown'")),
        sa.Column("analysis_reasoning", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        _jsonb("action_details", "{}"),
        sa.Column("autonomous", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("confidence", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("expected_impact", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("status", sa.String(length=20), nullable=False, server_default=sa.text("'proposed'")),
        sa.Column("decided_by", sa.String(length=20), nullable=True),
        sa.Column("user_approved", sa.Boolean(), nullable=True),
        sa.Column("implemented", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("implemented_at", sa.DateTime(timezone=True), nullable=True),
        _jsonb("explanation", nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["goal_id"], ["goals.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_adaptations_user_id", "adaptations", ["user_id"], unique=False)

    op.create_table(
        "reflections",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("user_id", nullable=False),
        sa.Column("reflection_type", sa.String(length=20), nullable=False, server_default=sa.text("'weekly'")),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        _jsonb("intended_behavior", "{}"),
        _jsonb("actual_behavior", "{}"),
        _jsonb("comparison", "{}"),
        _jsonb("success_factors", "[]"),
        _jsonb("failure_factors", "[]"),
        _jsonb("external_factors", "[]"),
        _jsonb("patterns", "[]"),
        _jsonb("root_causes", "[]"),
        _jsonb("lessons_learned", "[]"),
        _jsonb("heuristic_updates", "{}"),
        _jsonb("recommendations", "[]"),
        sa.Column("confidence_score", sa.Float(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_reflections_user_id_period_end", "reflections", ["user_id", "period_end"], unique=False)

    op.create_table(
        "agent_logs",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("user_id", nullable=False),
        sa.Column("agent_type", sa.String(length=50), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        _jsonb("input", "{}"),
        _jsonb("reasoning", "{}"),
        _jsonb("output", "{}"),
        sa.Column("execution_time_ms", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_agent_logs_user_id", "agent_logs", ["user_id"], unique=False)
    op.create_index("ix_agent_logs_agent_type", "agent_logs", ["agent_type"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_agent_logs_agent_type", table_name="agent_logs")
    op.drop_index("ix_agent_logs_user_id", table_name="agent_logs")
    op.drop_table("agent_logs")
    op.drop_index("ix_reflections_user_id_period_end", table_name="reflections")
    op.drop_table("reflections")
    op.drop_index("ix_adaptations_user_id", table_name="adaptations")
    op.drop_table("adaptations")
    op.drop_index("ix_monitoring_data_goal_id", table_name="monitoring_data")
    op.drop_index("ix_monitoring_data_user_id_date", table_name="monitoring_data")
    op.drop_table("monitoring_data")
    op.drop_index("ix_plans_goal_id", table_name="plans")
    op.drop_index("ix_plans_user_id", table_name="plans")
    op.drop_table("plans")
    op.drop_index("ix_goals_user_id", table_name="goals")
    op.drop_table("goals")
    op.drop_table("wellness_profiles")
    op.drop_table("users")
