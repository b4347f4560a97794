"""Master agent: decides which branches of the workflow to take."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent, violation_lines
from autosentience.agents.schemas import MasterDecision, MasterInput, Priority
from autosentience.schemas import AgentType, Severity

# Readings shown to the master agent, with display units.
_SUMMARY_FIELDS = (
    ("Engine Temp", "engine_temp", "°C"),
    ("Engine RPM", "engine_rpm", ""),
    ("Battery", "battery_voltage", "V"),
    ("Fuel Level", "fuel_level", "%"),
    ("Speed", "speed", " km/h"),
    ("Oil Pressure", "oil_pressure", " PSI"),
    ("Tyre Pressure (FL)", "tyre_pressure_fl", " PSI"),
)


def fallback_priority(input_: MasterInput) -> Priority:
    """critical > high > medium (any violation) > low."""
    severities = {v.severity for v in input_.violations}
    if Severity.CRITICAL in severities:
        return "critical"
    if Severity.HIGH in severities:
        return "high"
    if severities:
        return "medium"
    return "low"


class MasterAgent(BaseAgent[MasterInput, MasterDecision]):
    agent_type = AgentType.MASTER
    output_model = MasterDecision
    system_prompt = prompts.MASTER_SYSTEM_PROMPT
    temperature = 0.5

    def build_prompt(self, agent_input: MasterInput) -> str:
        snapshot = agent_input.sensor_data
        summary = "\n".join(
            f"- {label}: {getattr(snapshot, field)}{unit}"
            for label, field, unit in _SUMMARY_FIELDS
        )
        return prompts.MASTER_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            sensor_summary=summary,
            violation_count=len(agent_input.violations),
            violations=violation_lines(agent_input.violations),
            existing_alert_count=len(agent_input.existing_alerts),
        )

    def fallback(self, agent_input: MasterInput) -> MasterDecision:
        has_violations = len(agent_input.violations) > 0
        urgent = any(v.severity.is_urgent for v in agent_input.violations)

        if has_violations:
            next_steps = [
                "Run diagnosis agent",
                "Create alert",
                "Notify user",
                "Recommend service booking",
            ]
        else:
            next_steps = ["Continue normal monitoring"]

        return MasterDecision(
            action="Create alert and notify user" if has_violations else "Continue monitoring",
            next_steps=next_steps,
            should_create_alert=has_violations,
            should_notify_user=urgent,
            should_book_service=urgent,
            priority=fallback_priority(agent_input),
            reasoning="Fallback decision logic based on rule violations",
            confidence=0.6,
        )
