"""Prediction entry point: latest snapshot -> rules -> agent workflow."""

from __future__ import annotations

import time
from typing import List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from autosentience.agents.schemas import DiagnosisOutput, MasterDecision
from autosentience.exceptions import NoDataAvailableError, WorkflowInputError
from autosentience.inference.client import InferenceService
from autosentience.rules.detector import ThresholdRule, detect
from autosentience.schemas import AgentLogCreate, AgentType, Alert, RuleViolation
from autosentience.store.base import Store
from autosentience.workflow.orchestrator import (
    PLACEHOLDER_ALERT_ID,
    Clock,
    WorkflowOrchestrator,
)
from autosentience.workflow.schemas import WorkflowInput, WorkflowResult

logger = structlog.get_logger(__name__)

ALL_NORMAL_MESSAGE = "All systems normal"


class PredictionReport(BaseModel):
    """Outcome of one prediction run for a vehicle."""

    vehicle_id: str
    anomalies_detected: bool
    sensor_reading_id: Optional[str] = None
    message: Optional[str] = None
    violations: List[RuleViolation] = Field(default_factory=list)
    alerts_created: List[Alert] = Field(default_factory=list)
    diagnosis: Optional[DiagnosisOutput] = None
    master_decision: Optional[MasterDecision] = None
    workflow: Optional[WorkflowResult] = None
    execution_time_ms: int = 0


class PredictionService:
    def __init__(
        self,
        store: Store,
        inference: InferenceService,
        *,
        rules: Optional[Sequence[ThresholdRule]] = None,
        clock: Optional[Clock] = None,
        dedupe_open_alerts: bool = False,
    ) -> None:
        self.store = store
        self.rules = rules
        self.orchestrator = WorkflowOrchestrator(
            inference,
            store,
            clock=clock,
            dedupe_open_alerts=dedupe_open_alerts,
        )

    async def run(self, vehicle_id: str) -> PredictionReport:
        """Run the full prediction pipeline on the vehicle's latest snapshot.

        Raises:
            WorkflowInputError: ``vehicle_id`` is empty.
            NoDataAvailableError: the vehicle has no sensor data.
        """
        if not vehicle_id:
            raise WorkflowInputError("vehicle_id is required")

        started = time.perf_counter()
        snapshot = self.store.latest_snapshot(vehicle_id)
        if snapshot is None:
            raise NoDataAvailableError(f"No sensor data found for vehicle {vehicle_id}")

        detection = detect(snapshot, self.rules)
        if not detection.has_violations:
            logger.info("prediction_all_normal", vehicle_id=vehicle_id, sensor_reading_id=snapshot.id)
            return PredictionReport(
                vehicle_id=vehicle_id,
                anomalies_detected=False,
                sensor_reading_id=snapshot.id,
                message=ALL_NORMAL_MESSAGE,
                execution_time_ms=int((time.perf_counter() - started) * 1000),
            )

        existing_alerts = self.store.list_open_alerts(vehicle_id)
        result = await self.orchestrator.execute(
            WorkflowInput(
                vehicle_id=vehicle_id,
                sensor_data=snapshot,
                violations=detection.violations,
                existing_alerts=tuple(existing_alerts),
            )
        )

        alerts_created: List[Alert] = []
        # A reused OPEN alert is not reported as created.
        if result.alert_id and result.alert_id != PLACEHOLDER_ALERT_ID and not result.alert_reused:
            alert = self.store.get_alert(result.alert_id)
            if alert is not None:
                alerts_created.append(alert)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        self._log_master_decision(
            vehicle_id,
            snapshot.id,
            len(detection.violations),
            result,
            alerts_created[0].id if alerts_created else None,
            elapsed_ms,
        )

        return PredictionReport(
            vehicle_id=vehicle_id,
            anomalies_detected=True,
            sensor_reading_id=snapshot.id,
            violations=list(detection.violations),
            alerts_created=alerts_created,
            diagnosis=result.diagnosis,
            master_decision=result.master_decision,
            workflow=result,
            execution_time_ms=elapsed_ms,
        )

    def _log_master_decision(
        self,
        vehicle_id: str,
        sensor_reading_id: Optional[str],
        violations_count: int,
        result: WorkflowResult,
        alert_id: Optional[str],
        execution_time_ms: int,
    ) -> None:
        decision = result.master_decision
        try:
            self.store.insert_agent_log(
                AgentLogCreate(
                    vehicle_id=vehicle_id,
                    agent_type=AgentType.MASTER,
                    action=decision.action,
                    input_data={
                        "sensor_reading_id": sensor_reading_id,
                        "violations_count": violations_count,
                    },
                    reasoning=decision.reasoning,
                    decision=decision.model_dump(mode="json"),
                    confidence_score=decision.confidence,
                    alert_id=alert_id,
                    execution_time_ms=execution_time_ms,
                )
            )
        except Exception as exc:
            logger.error(
                "master_log_persist_failed",
                vehicle_id=vehicle_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )


async def run_prediction(
    vehicle_id: str,
    store: Store,
    inference: InferenceService,
    **kwargs,
) -> PredictionReport:
    return await PredictionService(store, inference, **kwargs).run(vehicle_id)
