"""Tests for LLM output parsing and validation."""

from __future__ import annotations

import json

from autosentience.agents.schemas import DiagnosisOutput, MasterDecision
from autosentience.inference.validate import extract_json, validate_llm_output
from autosentience.schemas import Severity

_DIAGNOSIS = {
    "fault_detected": True,
    "fault_type": "ENGINE_OVERHEAT",
    "severity": "high",
    "diagnosis": "Cooling system failure",
    "recommended_action": "Stop and let the engine cool",
    "estimated_cost": 450,
    "confidence": 0.82,
}


class TestExtractJson:
    def test_plain_object(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_json_fence(self) -> None:
        assert extract_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_bare_fence_with_prose(self) -> None:
        text = 'Here you go:\n```\n{"a": 1}\n```\nThanks.'
        assert extract_json(text) == {"a": 1}

    def test_invalid_json(self) -> None:
        assert extract_json("not json at all") is None

    def test_non_object(self) -> None:
        assert extract_json("[1, 2, 3]") is None


class TestValidateLlmOutput:
    def test_valid_diagnosis(self) -> None:
        result = validate_llm_output(json.dumps(_DIAGNOSIS), DiagnosisOutput)
        assert result is not None
        assert result.severity is Severity.HIGH
        assert result.estimated_cost == 450.0

    def test_missing_mandatory_field(self) -> None:
        data = {k: v for k, v in _DIAGNOSIS.items() if k != "fault_detected"}
        assert validate_llm_output(json.dumps(data), DiagnosisOutput) is None

    def test_empty_diagnosis_rejected(self) -> None:
        data = {**_DIAGNOSIS, "diagnosis": ""}
        assert validate_llm_output(json.dumps(data), DiagnosisOutput) is None

    def test_confidence_out_of_range(self) -> None:
        data = {**_DIAGNOSIS, "confidence": 1.5}
        assert validate_llm_output(json.dumps(data), DiagnosisOutput) is None

    def test_unknown_fields_ignored(self) -> None:
        data = {"action": "Monitor", "should_create_alert": False, "mood": "calm"}
        result = validate_llm_output(json.dumps(data), MasterDecision)
        assert result is not None
        assert result.priority == "low"

    def test_master_priority_normalised(self) -> None:
        data = {"action": "Alert", "should_create_alert": True, "priority": "HIGH"}
        result = validate_llm_output(json.dumps(data), MasterDecision)
        assert result is not None and result.priority == "high"

    def test_invalid_json_returns_none(self) -> None:
        assert validate_llm_output("{oops", MasterDecision) is None
