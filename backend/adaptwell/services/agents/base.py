"""Agent contract shared by the six cognitive agents."""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from time import perf_counter
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from adaptwell.db.models.agent_log import AgentLog
from adaptwell.observability.metrics import log_metric
from adaptwell.observability.tracing import trace
from adaptwell.services.persistence import PersistenceGateway
from adaptwell.services.reasoning.base import ReasoningGateway

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_CONFIDENCE = 0.7


class AgentType(str, Enum):
    GOAL_FORMULATION = "goal-formulation"
    PLANNING = "planning"
    MONITORING = "monitoring"
    ADAPTATION = "adaptation"
    REFLECTION = "reflection"
    EXPLAINABILITY = "explainability"


@dataclass
class AgentContext:
    user_id: UUID
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AgentOutput:
    success: bool
    reasoning: str
    action: Dict[str, Any]
    confidence: float
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def failed(cls, reasoning: str) -> "AgentOutput":
        return cls(success=False, reasoning=reasoning, action={}, confidence=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Agent:
    """
    Base class for a cognitive agent.

    Subclasses set `agent_type` and `system_prompt`, assemble a prompt in
    `execute`, and hand it to `reason`, which owns the reasoning call, the
    response defaults and the audit log write. `normalize_output` lets an
    agent repair its action schema before it is logged and returned.
    """

    agent_type: AgentType
    system_prompt: str = ""
    temperature: float = DEFAULT_TEMPERATURE

    def __init__(self, persistence: PersistenceGateway, reasoning: ReasoningGateway) -> None:
        self.persistence = persistence
        self.reasoning = reasoning

    @property
    def name(self) -> str:
        return self.agent_type.value

    def execute(self, context: AgentContext) -> AgentOutput:
        raise NotImplementedError

    def normalize_output(self, output: AgentOutput, context: AgentContext) -> AgentOutput:
        return output

    def reason(self, context: AgentContext, prompt: str, temperature: float | None = None) -> AgentOutput:
        temperature = self.temperature if temperature is None else temperature
        started = perf_counter()
        metadata = {"agent": self.name, "temperature": temperature, "prompt_chars": len(prompt)}

        with trace(f"agent.{self.name}", metadata=metadata, user_id=str(context.user_id)) as span:
            try:
                result = self.reasoning.complete(self.system_prompt, prompt, temperature)
            except Exception as exc:
                # Failed calls are not written to the audit log.
                logger.warning("[%s] reasoning failed for user %s: %s", self.name, context.user_id, exc)
                log_metric("agent.failure", 1, metadata={"agent": self.name})
                return AgentOutput.failed(f"Error in {self.name}: {exc}")

            execution_ms = max(int(round((perf_counter() - started) * 1000)), 0)
            try:
                output = self.normalize_output(_output_from_response(result), context)
            except Exception as exc:
                logger.warning("[%s] could not normalize reply for user %s: %s", self.name, context.user_id, exc)
                log_metric("agent.failure", 1, metadata={"agent": self.name})
                return AgentOutput.failed(f"Error in {self.name}: {exc}")

            try:
                self._log_activity(context, prompt, result, output, execution_ms)
            except SQLAlchemyError as exc:
                self.persistence.rollback()
                logger.exception("[%s] failed to write agent log for user %s", self.name, context.user_id)
                return AgentOutput.failed(f"Error in {self.name}: {exc}")

            if span:
                span.update(
                    metadata={
                        **metadata,
                        "confidence": output.confidence,
                        "action_type": output.action.get("type"),
                        "execution_ms": execution_ms,
                    }
                )

        log_metric("agent.latency_ms", execution_ms, metadata={"agent": self.name})
        logger.info(
            "[%s] reasoning ok user=%s confidence=%.2f in %sms",
            self.name,
            context.user_id,
            output.confidence,
            execution_ms,
        )
        return output

    def _log_activity(
        self,
        context: AgentContext,
        prompt: str,
        result: Dict[str, Any],
        output: AgentOutput,
        execution_ms: int,
    ) -> None:
        action_label = str(output.action.get("type") or "reasoning")[:100]
        self.persistence.add_agent_log(
            AgentLog(
                user_id=context.user_id,
                agent_type=self.name,
                action=action_label,
                input={"prompt": prompt},
                reasoning=result,
                output=output.to_dict(),
                execution_time_ms=execution_ms,
            )
        )


def _output_from_response(result: Dict[str, Any]) -> AgentOutput:
    reasoning = result.get("reasoning")
    if reasoning is None:
        reasoning = ""
    elif not isinstance(reasoning, str):
        reasoning = json.dumps(reasoning, default=str)

    action = result.get("action")
    metadata = result.get("metadata")
    return AgentOutput(
        success=True,
        reasoning=reasoning,
        action=dict(action) if isinstance(action, dict) else {},
        confidence=coerce_confidence(result.get("confidence")),
        metadata=dict(metadata) if isinstance(metadata, dict) else None,
    )


def coerce_confidence(raw: Any) -> float:
    """Parse a model-reported confidence into [0, 1], defaulting when unusable."""
    if isinstance(raw, bool) or raw is None:
        return DEFAULT_CONFIDENCE
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_CONFIDENCE
    if value != value:  # NaN
        return DEFAULT_CONFIDENCE
    return min(max(value, 0.0), 1.0)


def render_json(value: Any) -> str:
    """Pretty JSON for prompt embedding; dates and UUIDs become strings."""
    return json.dumps(value, indent=2, default=str)
