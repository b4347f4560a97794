"""Manufacturing agent: design and quality insight from aggregated failures."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent, to_json
from autosentience.agents.schemas import ManufacturingInput, ManufacturingOutput
from autosentience.schemas import AgentType


class ManufacturingAgent(BaseAgent[ManufacturingInput, ManufacturingOutput]):
    agent_type = AgentType.MANUFACTURING
    output_model = ManufacturingOutput
    system_prompt = prompts.MANUFACTURING_SYSTEM_PROMPT
    temperature = 0.5

    def build_prompt(self, agent_input: ManufacturingInput) -> str:
        return prompts.MANUFACTURING_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            failures=to_json(list(agent_input.aggregated_failures)),
            rca_reports=to_json(list(agent_input.rca_reports)),
        )

    def fallback(self, agent_input: ManufacturingInput) -> ManufacturingOutput:
        return ManufacturingOutput(
            design_improvements=["Investigate component durability"],
            defect_reduction_strategies=["Increase quality control sampling"],
            affected_components=["Unknown"],
            action="Manufacturing analysis completed (fallback)",
            reasoning="AI unavailable",
            confidence=0.5,
        )
