"""Feedback agent: simulated post-service satisfaction survey."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent, to_json
from autosentience.agents.schemas import FeedbackInput, FeedbackOutput
from autosentience.schemas import AgentType


class FeedbackAgent(BaseAgent[FeedbackInput, FeedbackOutput]):
    agent_type = AgentType.FEEDBACK
    output_model = FeedbackOutput
    system_prompt = prompts.FEEDBACK_SYSTEM_PROMPT
    temperature = 0.6

    def build_prompt(self, agent_input: FeedbackInput) -> str:
        return prompts.FEEDBACK_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            service_id=agent_input.service_id,
            service_outcome=agent_input.service_outcome,
            customer_profile=to_json(agent_input.customer_profile) if agent_input.customer_profile else "Standard",
        )

    def fallback(self, agent_input: FeedbackInput) -> FeedbackOutput:
        return FeedbackOutput(
            satisfaction_score=8,
            qualitative_feedback="Service was okay, but took longer than expected.",
            record_updated=True,
            action="Feedback recorded (fallback)",
            reasoning="AI unavailable",
            confidence=0.5,
        )
