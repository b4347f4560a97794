"""Shared shape of every maintenance agent.

An agent renders a deterministic prompt, makes one inference call at a
fixed temperature, validates the answer against its output model and, on
any failure, returns a deterministic fallback built from the same input.
``run`` never raises.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Sequence, Type, TypeVar

import structlog
from pydantic import BaseModel

from autosentience.agents.schemas import AgentOutput
from autosentience.inference.client import InferenceService
from autosentience.inference.validate import validate_llm_output
from autosentience.schemas import AgentType, RuleViolation

logger = structlog.get_logger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=AgentOutput)

# Fallback decisions never claim more confidence than this.
FALLBACK_MAX_CONFIDENCE = 0.6


class InvalidAgentOutput(ValueError):
    """The model answered, but not with a usable decision."""


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """One inference call plus a deterministic fallback."""

    agent_type: ClassVar[AgentType]
    output_model: ClassVar[Type[AgentOutput]]
    system_prompt: ClassVar[str]
    temperature: ClassVar[float]

    def __init__(self, inference: InferenceService) -> None:
        self.inference = inference

    # -- hooks --------------------------------------------------------------

    @abstractmethod
    def build_prompt(self, agent_input: InputT) -> str:
        """Render the user prompt for *agent_input*."""

    @abstractmethod
    def fallback(self, agent_input: InputT) -> OutputT:
        """Deterministic decision used when inference fails."""

    # -- public API ---------------------------------------------------------

    async def run(self, agent_input: InputT) -> OutputT:
        agent = self.agent_type.value
        vehicle_id = getattr(agent_input, "vehicle_id", None)
        try:
            prompt = self.build_prompt(agent_input)
            raw = await self.inference.infer(prompt, self.system_prompt, self.temperature)
            result = validate_llm_output(raw, self.output_model)
            if result is None:
                raise InvalidAgentOutput(f"{agent} answer failed schema validation")
        except Exception as exc:
            logger.warning(
                "agent_fallback",
                agent=agent,
                vehicle_id=vehicle_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._as_fallback(self.fallback(agent_input))

        logger.info(
            "agent_decision",
            agent=agent,
            vehicle_id=vehicle_id,
            action=result.action,
            confidence=result.confidence,
        )
        return result.model_copy(update={"source": "ai"})  # type: ignore[return-value]

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _as_fallback(output: OutputT) -> OutputT:
        return output.model_copy(
            update={
                "source": "fallback",
                "confidence": min(output.confidence, FALLBACK_MAX_CONFIDENCE),
            }
        )


def to_json(value: Any) -> str:
    """Pretty JSON for prompt blocks (dates and enums rendered as strings)."""
    return json.dumps(value, indent=2, default=str, sort_keys=False)


def violation_lines(violations: Sequence[RuleViolation]) -> str:
    """``- SEVERITY: message`` bullets, or ``- none``."""
    if not violations:
        return "- none"
    return "\n".join(f"- {v.severity.value}: {v.message}" for v in violations)
