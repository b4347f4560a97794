"""Root-cause analysis agent with CAPA recommendations."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent, to_json
from autosentience.agents.schemas import RCAInput, RCAOutput
from autosentience.schemas import AgentType


class RCAAgent(BaseAgent[RCAInput, RCAOutput]):
    agent_type = AgentType.RCA
    output_model = RCAOutput
    system_prompt = prompts.RCA_SYSTEM_PROMPT
    temperature = 0.6

    def build_prompt(self, agent_input: RCAInput) -> str:
        alert = agent_input.alert
        history = ""
        if agent_input.historical_data is not None:
            data = agent_input.historical_data
            history = "HISTORICAL DATA:\n" + to_json(
                {
                    "similar_alerts": data.similar_alerts,
                    "recent_sensors": [s.prompt_dict() for s in data.recent_sensors],
                }
            ) + "\n"

        return prompts.RCA_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            title=alert.title,
            severity=alert.severity.value,
            description=alert.description or "N/A",
            diagnosis=alert.diagnosis or "N/A",
            history=history,
        )

    def fallback(self, agent_input: RCAInput) -> RCAOutput:
        return RCAOutput(
            root_cause=f"Primary issue: {agent_input.alert.title}",
            contributing_factors=[
                "Sensor threshold violation detected",
                "Possible component wear or malfunction",
            ],
            capa_recommendations=[
                "Conduct thorough inspection of affected system",
                "Replace or repair faulty components",
                "Verify all sensor readings post-repair",
            ],
            preventive_measures=[
                "Schedule regular preventive maintenance",
                "Monitor sensor trends proactively",
                "Follow manufacturer service intervals",
            ],
            action="RCA completed",
            reasoning="Fallback RCA due to AI service unavailability",
            confidence=0.5,
        )
