"""Agent orchestrator and the observe -> reason -> act -> explain -> reflect cycle."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from adaptwell.core.context import cycle_scope
from adaptwell.db.models.adaptation import Adaptation
from adaptwell.db.models.goal import Goal
from adaptwell.db.models.plan import Plan
from adaptwell.db.models.reflection import Reflection
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services import snapshots
from adaptwell.services.adaptation_decisions import (
    AdaptationApplier,
    adaptation_from_output,
    implement_autonomously,
    passes_autonomy_gate,
)
from adaptwell.services.agents import AGENT_CLASSES, Agent, AgentContext, AgentOutput, AgentType, resolve_agent_type
from adaptwell.services.behavior_summary import actual_behavior, intended_behavior
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway

logger = logging.getLogger(__name__)

REFLECTION_PERIOD_DAYS = 7
PREVIOUS_REFLECTIONS = 3


@dataclass
class AdaptationProposal:
    output: AgentOutput
    record: Optional[Adaptation] = None
    explanation: Optional[AgentOutput] = None
    applied: bool = False


@dataclass
class CycleResult:
    cycle_id: str
    monitoring: AgentOutput
    adaptation: Optional[AdaptationProposal] = None
    reflection: Optional[AgentOutput] = None
    steps: List[str] = field(default_factory=list)

    @property
    def adapted(self) -> bool:
        return bool(self.adaptation and self.adaptation.applied)


class Orchestrator:
    """Dispatches agent invocations for one unit of work (one session)."""

    def __init__(
        self,
        persistence: PersistenceGateway,
        reasoning: ReasoningGateway,
        applier: AdaptationApplier | None = None,
    ) -> None:
        self.persistence = persistence
        self.agents: Dict[AgentType, Agent] = {
            agent_type: agent_cls(persistence, reasoning) for agent_type, agent_cls in AGENT_CLASSES.items()
        }
        self.applier = applier or AdaptationApplier(persistence)

    def execute_agent(self, agent_type: AgentType | str, context: AgentContext) -> AgentOutput:
        agent = self.agents[resolve_agent_type(agent_type)]
        return agent.execute(context)

    def cognitive_cycle(
        self,
        user_id: UUID,
        *,
        now: datetime | None = None,
        reflect: bool = False,
    ) -> CycleResult:
        now = now or datetime.now(timezone.utc)
        with cycle_scope() as cycle_id, trace("cognitive_cycle", metadata={"reflect": reflect}, user_id=str(user_id)):
            logger.info("Cognitive cycle started for user %s", user_id)
            monitoring = self.execute_agent(AgentType.MONITORING, AgentContext(user_id=user_id, timestamp=now))
            result = CycleResult(cycle_id=cycle_id, monitoring=monitoring, steps=["monitoring"])
            if not monitoring.success:
                logger.warning("Cycle stopped after monitoring failure for user %s", user_id)
                log_metric("cycle.stopped", 1, metadata={"step": "monitoring"})
                return result

            if (monitoring.metadata or {}).get("requiresAdaptation") is True:
                result.adaptation = self.propose_adaptation(
                    user_id, monitoring, now=now, allow_autonomous=True
                )
                result.steps.append("adaptation")
                if result.adaptation.explanation is not None:
                    result.steps.append("explainability")

            if reflect:
                result.reflection = self.reflect(
                    user_id,
                    period_start=(now - timedelta(days=REFLECTION_PERIOD_DAYS)).date(),
                    period_end=now.date(),
                )
                result.steps.append("reflection")

            log_metric("cycle.completed", 1, metadata={"adapted": result.adapted})
            logger.info("Cognitive cycle finished for user %s steps=%s adapted=%s", user_id, result.steps, result.adapted)
            return result

    def propose_adaptation(
        self,
        user_id: UUID,
        monitoring: AgentOutput,
        *,
        now: datetime | None = None,
        goal_id: UUID | None = None,
        plan_id: UUID | None = None,
        allow_autonomous: bool = True,
    ) -> AdaptationProposal:
        """
        Run the adaptation agent against the user's current state and store the proposal.

        The record starts in `proposed`. When `allow_autonomous` is set and the
        autonomy gate passes it is applied immediately; otherwise it waits for a
        user decision. An explanation is requested for every stored proposal.
        """
        now = now or datetime.now(timezone.utc)
        goal = self._load_goal(user_id, goal_id)
        plan = self._load_plan(user_id, goal, plan_id)
        profile = self.persistence.get_profile(user_id)

        output = self.execute_agent(
            AgentType.ADAPTATION,
            AgentContext(
                user_id=user_id,
                timestamp=now,
                data={
                    "monitoringReport": monitoring.to_dict(),
                    "currentPlan": snapshots.plan_snapshot(plan),
                    "currentGoal": snapshots.goal_snapshot(goal),
                    "profile": snapshots.profile_snapshot(profile),
                },
            ),
        )
        proposal = AdaptationProposal(output=output)
        if not output.success:
            logger.warning("Adaptation analysis failed for user %s", user_id)
            return proposal

        record = self.persistence.add_adaptation(
            adaptation_from_output(
                user_id,
                output,
                goal=goal,
                plan=plan,
                trigger_data={"monitoring": monitoring.action, "monitoringMetadata": monitoring.metadata or {}},
            )
        )
        proposal.record = record

        if allow_autonomous and passes_autonomy_gate(output):
            try:
                implement_autonomously(self.persistence, record, self.applier)
            except Exception:
                # The stored row is still `proposed`, so it stays open for a user decision.
                self.persistence.rollback()
                logger.exception("Autonomous adaptation %s could not be applied for user %s", record.id, user_id)
                log_metric("adaptation.autonomous_failed", 1, metadata={"action_type": record.action_type})
            else:
                proposal.applied = True
                log_metric("adaptation.autonomous", 1, metadata={"action_type": record.action_type})
        else:
            log_metric("adaptation.proposed", 1, metadata={"action_type": record.action_type})

        explanation = self.execute_agent(
            AgentType.EXPLAINABILITY,
            AgentContext(
                user_id=user_id,
                timestamp=now,
                data={
                    "decision": output.to_dict(),
                    "userContext": {
                        "profile": snapshots.profile_snapshot(profile),
                        "goal": snapshots.goal_snapshot(goal),
                        "plan": snapshots.plan_snapshot(plan),
                    },
                },
            ),
        )
        proposal.explanation = explanation
        if explanation.success:
            record.explanation = explanation.to_dict()
            self.persistence.save(record)
        return proposal

    def reflect(self, user_id: UUID, period_start: date, period_end: date) -> AgentOutput:
        plans = self.persistence.list_active_plans(user_id)
        entries = self.persistence.list_monitoring(user_id, since=period_start, until=period_end)
        previous = self.persistence.list_reflections(user_id, limit=PREVIOUS_REFLECTIONS)

        intended = intended_behavior(plans, period_start, period_end)
        actual = actual_behavior(entries)
        output = self.execute_agent(
            AgentType.REFLECTION,
            AgentContext(
                user_id=user_id,
                data={
                    "periodStart": period_start.isoformat(),
                    "periodEnd": period_end.isoformat(),
                    "intended": intended,
                    "actual": actual,
                    "previousReflections": [snapshots.reflection_snapshot(item) for item in previous],
                },
            ),
        )
        if not output.success:
            return output

        self.persistence.add_reflection(
            _reflection_from_output(user_id, output, period_start, period_end, intended, actual)
        )
        logger.info("Reflection stored for user %s (%s to %s)", user_id, period_start, period_end)
        return output

    def _load_goal(self, user_id: UUID, goal_id: UUID | None) -> Optional[Goal]:
        if goal_id is not None:
            return self.persistence.get_goal(goal_id, user_id)
        return self.persistence.get_active_goal(user_id)

    def _load_plan(self, user_id: UUID, goal: Optional[Goal], plan_id: UUID | None) -> Optional[Plan]:
        if plan_id is not None:
            return self.persistence.get_plan(plan_id, user_id)
        if goal is None:
            return None
        return self.persistence.get_active_plan(goal.id)


def _reflection_from_output(
    user_id: UUID,
    output: AgentOutput,
    period_start: date,
    period_end: date,
    intended: Dict[str, Any],
    actual: Dict[str, Any],
) -> Reflection:
    action = output.action
    return Reflection(
        user_id=user_id,
        reflection_type="weekly",
        period_start=period_start,
        period_end=period_end,
        intended_behavior=intended,
        actual_behavior=actual,
        comparison=action.get("comparison") or {},
        success_factors=action.get("successFactors") or [],
        failure_factors=action.get("failureFactors") or [],
        external_factors=action.get("externalFactors") or [],
        patterns=action.get("patterns") or [],
        root_causes=action.get("rootCauses") or [],
        lessons_learned=action.get("lessonsLearned") or [],
        heuristic_updates=action.get("heuristicUpdates") or {},
        recommendations=action.get("recommendations") or [],
        confidence_score=output.confidence,
    )
