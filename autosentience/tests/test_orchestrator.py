"""Tests for the master workflow orchestrator."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from autosentience.agents import prompts
from autosentience.exceptions import StoreError, WorkflowInputError
from autosentience.rules.detector import detect
from autosentience.schemas import AgentType, AlertCreate, AlertStatus, SensorSnapshot, Severity
from autosentience.store.base import Store
from autosentience.workflow import (
    PLACEHOLDER_ALERT_ID,
    WorkflowInput,
    WorkflowOrchestrator,
    execute_workflow,
)

FIXED_NOW = datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc)


def _input(snapshot: SensorSnapshot, **overrides) -> WorkflowInput:
    defaults = dict(
        vehicle_id=snapshot.vehicle_id,
        sensor_data=snapshot,
        violations=detect(snapshot).violations,
    )
    defaults.update(overrides)
    return WorkflowInput(**defaults)


def _orchestrator(inference, store=None, **kwargs) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(inference, store, clock=lambda: FIXED_NOW, **kwargs)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class TestValidation:
    @pytest.mark.asyncio
    async def test_empty_vehicle_id(self, failing_inference, healthy_snapshot) -> None:
        with pytest.raises(WorkflowInputError):
            await _orchestrator(failing_inference).execute(_input(healthy_snapshot, vehicle_id=""))
        assert failing_inference.calls == []

    @pytest.mark.asyncio
    async def test_missing_sensor_data(self, failing_inference) -> None:
        with pytest.raises(WorkflowInputError):
            await _orchestrator(failing_inference).execute(WorkflowInput(vehicle_id="VH-1"))


# ---------------------------------------------------------------------------
# Degraded runs (inference always fails)
# ---------------------------------------------------------------------------


class TestAllFallback:
    @pytest.mark.asyncio
    async def test_complete_result(self, failing_inference, overheating_snapshot, store) -> None:
        result = await _orchestrator(failing_inference, store).execute(_input(overheating_snapshot))

        assert result.data_analysis.is_fallback
        assert result.master_decision.should_create_alert is True
        assert result.diagnosis is not None and result.diagnosis.fault_detected
        assert result.engagement is not None
        assert result.scheduling is not None
        assert result.ueba is not None
        assert result.feedback is not None
        assert result.manufacturing is not None
        assert result.execution_time_ms >= 0
        for output in (
            result.data_analysis,
            result.master_decision,
            result.diagnosis,
            result.engagement,
            result.scheduling,
            result.ueba,
            result.feedback,
            result.manufacturing,
        ):
            assert output.source == "fallback"

    @pytest.mark.asyncio
    async def test_stage_order(self, failing_inference, overheating_snapshot, store) -> None:
        await _orchestrator(failing_inference, store).execute(_input(overheating_snapshot))
        assert [c.system_prompt for c in failing_inference.calls] == [
            prompts.DATA_ANALYSIS_SYSTEM_PROMPT,
            prompts.MASTER_SYSTEM_PROMPT,
            prompts.DIAGNOSIS_SYSTEM_PROMPT,
            prompts.ENGAGEMENT_SYSTEM_PROMPT,
            prompts.SCHEDULING_SYSTEM_PROMPT,
            prompts.UEBA_SYSTEM_PROMPT,
            prompts.FEEDBACK_SYSTEM_PROMPT,
            prompts.MANUFACTURING_SYSTEM_PROMPT,
        ]

    @pytest.mark.asyncio
    async def test_scheduling_uses_clock(self, failing_inference, overheating_snapshot) -> None:
        result = await _orchestrator(failing_inference).execute(_input(overheating_snapshot))
        assert result.scheduling.suggested_dates == ["2026-01-11", "2026-01-12", "2026-01-13"]

    @pytest.mark.asyncio
    async def test_alert_round_trip(self, failing_inference, overheating_snapshot, store) -> None:
        result = await _orchestrator(failing_inference, store).execute(_input(overheating_snapshot))

        alert = store.get_alert(result.alert_id)
        assert alert is not None
        assert alert.status is AlertStatus.OPEN
        assert alert.severity is result.diagnosis.severity is Severity.HIGH
        assert alert.diagnosis == result.diagnosis.diagnosis
        assert alert.recommended_action == result.diagnosis.recommended_action
        assert alert.alert_type == "ENGINE_TEMP"
        assert alert.sensor_reading_id == overheating_snapshot.id

    @pytest.mark.asyncio
    async def test_logs_persisted(self, failing_inference, overheating_snapshot, store, db_session) -> None:
        from autosentience import models_db

        result = await _orchestrator(failing_inference, store).execute(_input(overheating_snapshot))

        ueba_rows = db_session.query(models_db.UEBALog).all()
        assert len(ueba_rows) == 1
        assert ueba_rows[0].event_type == "AGENT_WORKFLOW_EXECUTION"
        assert ueba_rows[0].detection_method == "AI_BEHAVIOR_ANALYSIS"
        assert ueba_rows[0].action_taken == "LOG_ONLY"
        assert ueba_rows[0].current_behavior == {"master_action": result.master_decision.action}

        capa_logs = store.list_agent_logs(agent_type=AgentType.RCA)
        assert len(capa_logs) == 1
        assert capa_logs[0].action == "GENERATE_CAPA_REPORT"
        assert capa_logs[0].confidence_score == 0.85
        assert capa_logs[0].input_data["diagnosis"]["fault_type"] == "ENGINE_TEMP"
        assert capa_logs[0].alert_id == result.alert_id


# ---------------------------------------------------------------------------
# Branch gating
# ---------------------------------------------------------------------------


class TestGating:
    @pytest.mark.asyncio
    async def test_no_violations_skips_gated_stages(self, failing_inference, healthy_snapshot, store) -> None:
        result = await _orchestrator(failing_inference, store).execute(
            _input(healthy_snapshot, violations=())
        )
        assert result.diagnosis is None
        assert result.engagement is None
        assert result.scheduling is None
        assert result.feedback is None
        assert result.manufacturing is None
        assert result.alert_id is None
        assert result.ueba is not None
        assert [c.system_prompt for c in failing_inference.calls] == [
            prompts.DATA_ANALYSIS_SYSTEM_PROMPT,
            prompts.MASTER_SYSTEM_PROMPT,
            prompts.UEBA_SYSTEM_PROMPT,
        ]
        assert store.list_alerts() == []

    @pytest.mark.asyncio
    async def test_master_declines_alert(self, make_inference, overheating_snapshot, store) -> None:
        inference = make_inference(
            {
                prompts.MASTER_SYSTEM_PROMPT: json.dumps(
                    {"action": "Continue monitoring", "should_create_alert": False}
                )
            }
        )
        result = await _orchestrator(inference, store).execute(_input(overheating_snapshot))
        assert result.master_decision.source == "ai"
        assert result.diagnosis is None
        assert result.ueba is not None
        assert store.list_alerts() == []

    @pytest.mark.asyncio
    async def test_no_fault_detected(self, make_inference, overheating_snapshot, store) -> None:
        inference = make_inference(
            {
                prompts.DIAGNOSIS_SYSTEM_PROMPT: json.dumps(
                    {
                        "fault_detected": False,
                        "severity": "LOW",
                        "diagnosis": "Transient spike after hill climb",
                    }
                )
            }
        )
        result = await _orchestrator(inference, store).execute(_input(overheating_snapshot))
        assert result.diagnosis is not None and not result.diagnosis.fault_detected
        assert result.engagement is None
        assert result.scheduling is None
        assert result.feedback is None
        assert result.manufacturing is None
        assert store.list_alerts() == []

    @pytest.mark.asyncio
    async def test_ueba_sees_master_action(self, make_inference, overheating_snapshot) -> None:
        inference = make_inference()
        await _orchestrator(inference).execute(_input(overheating_snapshot))
        ueba_call = next(c for c in inference.calls if c.system_prompt == prompts.UEBA_SYSTEM_PROMPT)
        assert '"master_action": "Create alert and notify user"' in ueba_call.prompt
        assert '"data_analysis_anomalies": false' in ueba_call.prompt


# ---------------------------------------------------------------------------
# Store behavior
# ---------------------------------------------------------------------------


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_no_store_uses_placeholder(self, failing_inference, overheating_snapshot) -> None:
        result = await _orchestrator(failing_inference).execute(_input(overheating_snapshot))
        assert result.alert_id == PLACEHOLDER_ALERT_ID
        assert result.engagement is not None

    @pytest.mark.asyncio
    async def test_store_errors_are_not_fatal(self, failing_inference, overheating_snapshot) -> None:
        store = MagicMock(spec=Store)
        store.create_alert.side_effect = StoreError("db down")
        store.insert_ueba_log.side_effect = StoreError("db down")
        store.insert_agent_log.side_effect = StoreError("db down")

        result = await _orchestrator(failing_inference, store).execute(_input(overheating_snapshot))

        assert result.alert_id == PLACEHOLDER_ALERT_ID
        assert result.ueba is not None
        assert result.manufacturing is not None
        store.create_alert.assert_called_once()
        store.insert_ueba_log.assert_called_once()
        store.insert_agent_log.assert_called_once()


class TestAlertDedupe:
    def _existing(self, store, snapshot) -> str:
        return store.create_alert(
            AlertCreate(
                vehicle_id=snapshot.vehicle_id,
                alert_type="ENGINE_TEMP",
                severity=Severity.HIGH,
                title="ENGINE_TEMP",
            )
        ).id

    @pytest.mark.asyncio
    async def test_duplicates_by_default(self, failing_inference, overheating_snapshot, store) -> None:
        existing_id = self._existing(store, overheating_snapshot)
        result = await _orchestrator(failing_inference, store).execute(_input(overheating_snapshot))
        assert result.alert_id != existing_id
        assert result.alert_reused is False
        assert store.count_alerts(overheating_snapshot.vehicle_id, "ENGINE_TEMP") == 2

    @pytest.mark.asyncio
    async def test_reuses_open_alert(self, failing_inference, overheating_snapshot, store) -> None:
        existing_id = self._existing(store, overheating_snapshot)
        result = await _orchestrator(failing_inference, store, dedupe_open_alerts=True).execute(
            _input(overheating_snapshot)
        )
        assert result.alert_id == existing_id
        assert result.alert_reused is True
        assert store.count_alerts(overheating_snapshot.vehicle_id, "ENGINE_TEMP") == 1

    @pytest.mark.asyncio
    async def test_closed_alert_not_reused(self, failing_inference, overheating_snapshot, store) -> None:
        existing_id = self._existing(store, overheating_snapshot)
        store.update_alert_status(existing_id, AlertStatus.CLOSED, FIXED_NOW)
        result = await _orchestrator(failing_inference, store, dedupe_open_alerts=True).execute(
            _input(overheating_snapshot)
        )
        assert result.alert_id != existing_id


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_result_is_frozen(failing_inference, healthy_snapshot) -> None:
    result = await _orchestrator(failing_inference).execute(_input(healthy_snapshot))
    with pytest.raises(ValidationError):
        result.alert_id = "other"


@pytest.mark.asyncio
async def test_execute_workflow_alias(failing_inference, overheating_snapshot) -> None:
    result = await execute_workflow(_input(overheating_snapshot), failing_inference)
    assert result.alert_id == PLACEHOLDER_ALERT_ID
    assert result.alert_reused is False
    assert isinstance(result.scheduling.suggested_dates[0], str)
    date.fromisoformat(result.scheduling.suggested_dates[0])
