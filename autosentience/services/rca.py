"""Root-cause analysis reports for existing alerts."""

from __future__ import annotations

import time
from typing import List, Optional

import structlog
from pydantic import BaseModel

from autosentience.agents.rca import RCAAgent
from autosentience.agents.schemas import RCAHistory, RCAInput, RCAOutput
from autosentience.exceptions import AlertNotFoundError, WorkflowInputError
from autosentience.inference.client import InferenceService
from autosentience.schemas import AgentLog, AgentLogCreate, AgentType, Alert, Severity
from autosentience.store.base import Store

logger = structlog.get_logger(__name__)

RECENT_SENSOR_LIMIT = 10
RCA_LOG_ACTION = "RCA report generated"


class RCAReport(BaseModel):
    alert: Alert
    rca: RCAOutput
    execution_time_ms: int


class RCAService:
    def __init__(self, store: Store, inference: InferenceService) -> None:
        self.store = store
        self.agent = RCAAgent(inference)

    def _resolve_alert(self, alert_id: Optional[str], vehicle_id: Optional[str]) -> Alert:
        if alert_id:
            alert = self.store.get_alert(alert_id)
            if alert is None:
                raise AlertNotFoundError(f"Alert {alert_id} not found")
            return alert

        if not vehicle_id:
            raise WorkflowInputError("Either alert_id or vehicle_id is required")
        alert = self.store.latest_alert_with_severity(
            vehicle_id, (Severity.HIGH, Severity.CRITICAL)
        )
        if alert is None:
            raise AlertNotFoundError(f"No high-severity alerts found for vehicle {vehicle_id}")
        return alert

    async def generate(
        self,
        alert_id: Optional[str] = None,
        vehicle_id: Optional[str] = None,
    ) -> RCAReport:
        """Run the RCA agent on an alert.

        The alert is either given by id, or is the vehicle's most recent
        HIGH/CRITICAL alert.

        Raises:
            WorkflowInputError: neither ``alert_id`` nor ``vehicle_id`` given.
            AlertNotFoundError: no matching alert.
        """
        started = time.perf_counter()
        alert = self._resolve_alert(alert_id, vehicle_id)

        history = RCAHistory(
            similar_alerts=self.store.count_alerts(alert.vehicle_id, alert.alert_type),
            recent_sensors=tuple(
                self.store.recent_snapshots(alert.vehicle_id, limit=RECENT_SENSOR_LIMIT)
            ),
        )
        rca = await self.agent.run(
            RCAInput(vehicle_id=alert.vehicle_id, alert=alert, historical_data=history)
        )
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        try:
            self.store.insert_agent_log(
                AgentLogCreate(
                    vehicle_id=alert.vehicle_id,
                    agent_type=AgentType.RCA,
                    action=RCA_LOG_ACTION,
                    input_data={"alert_id": alert.id},
                    reasoning=rca.reasoning,
                    decision=rca.model_dump(mode="json"),
                    confidence_score=rca.confidence,
                    alert_id=alert.id,
                    execution_time_ms=elapsed_ms,
                )
            )
        except Exception as exc:
            logger.error("rca_log_persist_failed", alert_id=alert.id, error=str(exc))

        logger.info(
            "rca_generated",
            vehicle_id=alert.vehicle_id,
            alert_id=alert.id,
            source=rca.source,
            execution_time_ms=elapsed_ms,
        )
        return RCAReport(alert=alert, rca=rca, execution_time_ms=elapsed_ms)

    def list_reports(self, vehicle_id: Optional[str] = None, limit: int = 10) -> List[AgentLog]:
        return self.store.list_agent_logs(vehicle_id=vehicle_id, agent_type=AgentType.RCA, limit=limit)
