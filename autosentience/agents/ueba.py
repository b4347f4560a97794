"""UEBA agent: behavioral security screening of a workflow execution."""

from __future__ import annotations

from autosentience.agents import prompts
from autosentience.agents.base import BaseAgent, to_json, violation_lines
from autosentience.agents.schemas import UEBAInput, UEBAOutput
from autosentience.schemas import AgentType, Severity


class UEBAAgent(BaseAgent[UEBAInput, UEBAOutput]):
    agent_type = AgentType.UEBA
    output_model = UEBAOutput
    system_prompt = prompts.UEBA_SYSTEM_PROMPT
    temperature = 0.4

    def build_prompt(self, agent_input: UEBAInput) -> str:
        if agent_input.baseline_behavior:
            baseline = "BASELINE BEHAVIOR:\n" + to_json(agent_input.baseline_behavior) + "\n"
        else:
            baseline = "No baseline available - first-time analysis.\n"

        violations = ""
        if agent_input.violations:
            violations = prompts.UEBA_VIOLATIONS_NOTE.format(
                violations=violation_lines(agent_input.violations)
            )

        return prompts.UEBA_USER_TEMPLATE.format(
            vehicle_id=agent_input.vehicle_id,
            event_type=agent_input.event_type,
            current_behavior=to_json(agent_input.current_behavior),
            baseline=baseline,
            violations=violations,
        )

    def fallback(self, agent_input: UEBAInput) -> UEBAOutput:
        return UEBAOutput(
            anomaly_detected=False,
            risk_level=Severity.LOW,
            risk_score=10,
            suspicious_patterns=[],
            recommended_action=None,
            action="Security monitoring completed",
            reasoning="Fallback security analysis - no obvious anomalies detected",
            confidence=0.5,
        )
