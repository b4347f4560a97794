"""Master decision on its own: snapshot -> rules -> master agent, no workflow."""

from __future__ import annotations

import time
from typing import List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from autosentience.agents.master import MasterAgent
from autosentience.agents.schemas import MasterDecision, MasterInput
from autosentience.exceptions import NoDataAvailableError, WorkflowInputError
from autosentience.inference.client import InferenceService
from autosentience.rules.detector import ThresholdRule, detect
from autosentience.schemas import AgentLogCreate, AgentType, RuleViolation, SensorSnapshot
from autosentience.store.base import Store

logger = structlog.get_logger(__name__)


class DecisionReport(BaseModel):
    vehicle_id: str
    master_decision: MasterDecision
    violations: List[RuleViolation] = Field(default_factory=list)
    sensor_reading: SensorSnapshot
    execution_time_ms: int = 0


class DecisionService:
    """Asks the master agent what to do next for one snapshot.

    Nothing else runs: no diagnosis, no alert, no UEBA.  The decision is
    written to the agent log (best-effort).
    """

    def __init__(
        self,
        store: Store,
        inference: InferenceService,
        *,
        rules: Optional[Sequence[ThresholdRule]] = None,
    ) -> None:
        self.store = store
        self.rules = rules
        self.agent = MasterAgent(inference)

    def _snapshot(self, vehicle_id: str, sensor_reading_id: Optional[str]) -> SensorSnapshot:
        if sensor_reading_id:
            snapshot = self.store.get_snapshot(sensor_reading_id)
            if snapshot is None:
                raise NoDataAvailableError(f"Sensor reading {sensor_reading_id} not found")
            return snapshot

        snapshot = self.store.latest_snapshot(vehicle_id)
        if snapshot is None:
            raise NoDataAvailableError(f"No sensor data found for vehicle {vehicle_id}")
        return snapshot

    async def decide(
        self, vehicle_id: str, sensor_reading_id: Optional[str] = None
    ) -> DecisionReport:
        """Run the master agent on a given snapshot, or the vehicle's latest.

        Raises:
            WorkflowInputError: ``vehicle_id`` is empty.
            NoDataAvailableError: the snapshot does not exist.
        """
        if not vehicle_id:
            raise WorkflowInputError("vehicle_id is required")

        started = time.perf_counter()
        snapshot = self._snapshot(vehicle_id, sensor_reading_id)
        detection = detect(snapshot, self.rules)
        existing_alerts = self.store.list_open_alerts(vehicle_id)

        decision = await self.agent.run(
            MasterInput(
                vehicle_id=vehicle_id,
                sensor_data=snapshot,
                violations=detection.violations,
                existing_alerts=tuple(existing_alerts),
            )
        )
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        try:
            self.store.insert_agent_log(
                AgentLogCreate(
                    vehicle_id=vehicle_id,
                    agent_type=AgentType.MASTER,
                    action=decision.action,
                    input_data={
                        "sensor_reading_id": snapshot.id,
                        "violations_count": len(detection.violations),
                        "existing_alerts_count": len(existing_alerts),
                    },
                    reasoning=decision.reasoning,
                    decision=decision.model_dump(mode="json"),
                    confidence_score=decision.confidence,
                    execution_time_ms=elapsed_ms,
                )
            )
        except Exception as exc:
            logger.error(
                "master_log_persist_failed",
                vehicle_id=vehicle_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )

        logger.info(
            "master_decision_made",
            vehicle_id=vehicle_id,
            sensor_reading_id=snapshot.id,
            action=decision.action,
            source=decision.source,
            execution_time_ms=elapsed_ms,
        )
        return DecisionReport(
            vehicle_id=vehicle_id,
            master_decision=decision,
            violations=list(detection.violations),
            sensor_reading=snapshot,
            execution_time_ms=elapsed_ms,
        )
