"""Diagnosis agent: turns rule violations into a fault diagnosis."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent, to_json
from autosentience.agents.schemas import DiagnosisInput, DiagnosisOutput
from autosentience.rules.detector import format_violations
from autosentience.schemas import AgentType, Severity, highest_severity


class DiagnosisAgent(BaseAgent[DiagnosisInput, DiagnosisOutput]):
    agent_type = AgentType.DIAGNOSIS
    output_model = DiagnosisOutput
    system_prompt = prompts.DIAGNOSIS_SYSTEM_PROMPT
    temperature = 0.5

    def build_prompt(self, agent_input: DiagnosisInput) -> str:
        return prompts.DIAGNOSIS_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            sensor_data=to_json(agent_input.sensor_data.prompt_dict()),
            violations=format_violations(agent_input.violations),
        )

    def fallback(self, agent_input: DiagnosisInput) -> DiagnosisOutput:
        violations = agent_input.violations
        severity = highest_severity(v.severity for v in violations) or Severity.LOW
        fault_type = violations[0].parameter.upper() if violations else "UNKNOWN"
        messages = ". ".join(v.message for v in violations)

        return DiagnosisOutput(
            fault_detected=len(violations) > 0,
            fault_type=fault_type,
            severity=severity,
            diagnosis=f"Detected {len(violations)} rule violation(s). {messages}".strip(),
            recommended_action="Schedule service inspection to diagnose and resolve issues.",
            estimated_cost=None,
            action="Fault diagnosis completed",
            reasoning="Fallback diagnosis due to AI service unavailability",
            confidence=0.6,
        )
