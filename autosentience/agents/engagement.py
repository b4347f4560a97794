"""Engagement agent: drafts the driver-facing message for an alert."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent
from autosentience.agents.schemas import EngagementInput, EngagementOutput
from autosentience.schemas import AgentType, Severity


class EngagementAgent(BaseAgent[EngagementInput, EngagementOutput]):
    agent_type = AgentType.ENGAGEMENT
    output_model = EngagementOutput
    system_prompt = prompts.ENGAGEMENT_SYSTEM_PROMPT
    temperature = 0.7

    def build_prompt(self, agent_input: EngagementInput) -> str:
        alert = agent_input.alert
        user_context = ""
        if agent_input.user_name:
            user_context += f"USER NAME: {agent_input.user_name}\n"
        if agent_input.previous_interactions is not None:
            user_context += f"PREVIOUS INTERACTIONS: {agent_input.previous_interactions}\n"

        return prompts.ENGAGEMENT_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            title=alert.title,
            severity=alert.severity.value,
            description=alert.description or "N/A",
            diagnosis=alert.diagnosis or "N/A",
            recommended_action=alert.recommended_action or "N/A",
            estimated_cost=f"${alert.estimated_cost}" if alert.estimated_cost else "TBD",
            user_context=user_context,
        )

    def fallback(self, agent_input: EngagementInput) -> EngagementOutput:
        alert = agent_input.alert
        message = f"We've detected an issue with your vehicle: {alert.title}."
        if alert.recommended_action:
            message += f" {alert.recommended_action}"

        return EngagementOutput(
            message=message,
            tone="urgent" if alert.severity is Severity.CRITICAL else "informative",
            should_call_user=alert.severity.is_urgent,
            action="User notification prepared",
            reasoning="Fallback message due to AI service unavailability",
            confidence=0.6,
        )
