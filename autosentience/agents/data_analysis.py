"""Data-analysis agent: anomaly screening and service-demand forecast."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent, to_json
from autosentience.agents.schemas import DataAnalysisInput, DataAnalysisOutput
from autosentience.schemas import AgentType


class DataAnalysisAgent(BaseAgent[DataAnalysisInput, DataAnalysisOutput]):
    agent_type = AgentType.DATA_ANALYSIS
    output_model = DataAnalysisOutput
    system_prompt = prompts.DATA_ANALYSIS_SYSTEM_PROMPT
    temperature = 0.4

    def build_prompt(self, agent_input: DataAnalysisInput) -> str:
        history = agent_input.maintenance_history
        return prompts.DATA_ANALYSIS_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            sensor_data=to_json(agent_input.sensor_data.prompt_dict()),
            maintenance_history=to_json(list(history)) if history else "No history available",
        )

    def fallback(self, agent_input: DataAnalysisInput) -> DataAnalysisOutput:
        return DataAnalysisOutput(
            anomalies_detected=False,
            predicted_maintenance_needs=[],
            demand_forecast=[],
            action="Data analysis completed (fallback)",
            reasoning="AI unavailable",
            confidence=0.5,
        )
