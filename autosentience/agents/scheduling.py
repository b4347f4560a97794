"""Scheduling agent: decides whether and when to book a service slot."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent
from autosentience.agents.schemas import SchedulingInput, SchedulingOutput
from autosentience.schemas import AgentType

DEFAULT_SERVICE_DURATION_MINUTES = 60
SUGGESTED_DAY_COUNT = 3


def _today() -> date:
    return datetime.now(timezone.utc).date()


def next_calendar_days(start: date, count: int = SUGGESTED_DAY_COUNT) -> List[str]:
    """ISO dates of the *count* calendar days following *start*."""
    return [(start + timedelta(days=i)).isoformat() for i in range(1, count + 1)]


class SchedulingAgent(BaseAgent[SchedulingInput, SchedulingOutput]):
    agent_type = AgentType.SCHEDULING
    output_model = SchedulingOutput
    system_prompt = prompts.SCHEDULING_SYSTEM_PROMPT
    temperature = 0.5

    def build_prompt(self, agent_input: SchedulingInput) -> str:
        alert = agent_input.alert
        return prompts.SCHEDULING_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            title=alert.title,
            severity=alert.severity.value,
            diagnosis=alert.diagnosis or "N/A",
            recommended_action=alert.recommended_action or "N/A",
            current_date=(agent_input.current_date or _today()).isoformat(),
        )

    def fallback(self, agent_input: SchedulingInput) -> SchedulingOutput:
        alert = agent_input.alert
        needs_booking = alert.severity.is_urgent
        current = agent_input.current_date or _today()

        return SchedulingOutput(
            booking_recommended=needs_booking,
            suggested_dates=next_calendar_days(current) if needs_booking else [],
            service_type=alert.alert_type.replace("_", " "),
            estimated_duration=DEFAULT_SERVICE_DURATION_MINUTES,
            action="Service booking recommended" if needs_booking else "Monitoring recommended",
            reasoning="Fallback scheduling logic due to AI service unavailability",
            confidence=0.6,
        )
