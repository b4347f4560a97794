"""Master workflow: sequences the agents for one vehicle snapshot.

Stages run strictly in order, one inference call at a time:

1. data analysis (always)
2. master decision (always)
3. diagnosis, when the master wants an alert and there are violations
4. alert persistence, engagement and scheduling, when a fault is confirmed
5. UEBA security screening and its log (always)
6. feedback, manufacturing insight and the CAPA log, when a fault is confirmed

Every stage returns a delta that is merged into an immutable
:class:`WorkflowResult`.  Store writes are best-effort: a failing write is
logged and the workflow carries on.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

import structlog

from autosentience.agents.data_analysis import DataAnalysisAgent
from autosentience.agents.diagnosis import DiagnosisAgent
from autosentience.agents.engagement import EngagementAgent
from autosentience.agents.feedback import FeedbackAgent
from autosentience.agents.manufacturing import ManufacturingAgent
from autosentience.agents.master import MasterAgent
from autosentience.agents.scheduling import SchedulingAgent
from autosentience.agents.schemas import (
    DataAnalysisInput,
    DiagnosisInput,
    DiagnosisOutput,
    EngagementInput,
    FeedbackInput,
    ManufacturingInput,
    ManufacturingOutput,
    MasterDecision,
    MasterInput,
    SchedulingInput,
    UEBAInput,
    UEBAOutput,
)
from autosentience.agents.ueba import UEBAAgent
from autosentience.exceptions import WorkflowInputError
from autosentience.inference.client import InferenceService
from autosentience.schemas import (
    AgentLogCreate,
    AgentType,
    Alert,
    AlertCreate,
    UEBALogCreate,
)
from autosentience.store.base import Store
from autosentience.workflow.schemas import WorkflowInput, WorkflowResult

logger = structlog.get_logger(__name__)

# Id used for the in-memory alert when it could not be persisted.
PLACEHOLDER_ALERT_ID = "temp-alert-id"

WORKFLOW_EVENT_TYPE = "AGENT_WORKFLOW_EXECUTION"
UEBA_DETECTION_METHOD = "AI_BEHAVIOR_ANALYSIS"
UEBA_ACTION_TAKEN = "LOG_ONLY"
CAPA_LOG_ACTION = "GENERATE_CAPA_REPORT"
CAPA_LOG_CONFIDENCE = 0.85
SIMULATED_SERVICE_ID = "simulated-service-id"
DEFAULT_FAULT_TYPE = "GENERAL_FAULT"
DEFAULT_ALERT_TITLE = "Unknown Fault"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WorkflowAgents:
    """The agents a workflow run uses.  Swap individual agents in tests."""

    data_analysis: DataAnalysisAgent
    master: MasterAgent
    diagnosis: DiagnosisAgent
    engagement: EngagementAgent
    scheduling: SchedulingAgent
    ueba: UEBAAgent
    feedback: FeedbackAgent
    manufacturing: ManufacturingAgent

    @classmethod
    def build(cls, inference: InferenceService) -> "WorkflowAgents":
        return cls(
            data_analysis=DataAnalysisAgent(inference),
            master=MasterAgent(inference),
            diagnosis=DiagnosisAgent(inference),
            engagement=EngagementAgent(inference),
            scheduling=SchedulingAgent(inference),
            ueba=UEBAAgent(inference),
            feedback=FeedbackAgent(inference),
            manufacturing=ManufacturingAgent(inference),
        )


class WorkflowOrchestrator:
    """Runs the agent pipeline for one vehicle snapshot.

    Parameters
    ----------
    inference :
        Inference backend shared by all agents.
    store :
        Persistence for alerts and logs.  ``None`` skips every write (the
        alert then keeps the placeholder id).
    clock :
        Returns "now"; defaults to UTC wall time.
    agents :
        Pre-built agents; defaults to :meth:`WorkflowAgents.build`.
    dedupe_open_alerts :
        Reuse an OPEN alert with the same vehicle and type instead of
        inserting another.
    """

    def __init__(
        self,
        inference: InferenceService,
        store: Optional[Store] = None,
        clock: Optional[Clock] = None,
        agents: Optional[WorkflowAgents] = None,
        dedupe_open_alerts: bool = False,
    ) -> None:
        self.store = store
        self.clock = clock or _utcnow
        self.agents = agents or WorkflowAgents.build(inference)
        self.dedupe_open_alerts = dedupe_open_alerts

    async def execute(self, workflow_input: WorkflowInput) -> WorkflowResult:
        """Run every applicable stage and return the aggregated result.

        Raises
        ------
        WorkflowInputError
            If ``vehicle_id`` is empty or ``sensor_data`` is missing.
        """
        if not workflow_input.vehicle_id or workflow_input.sensor_data is None:
            raise WorkflowInputError("Missing required data: vehicle_id or sensor_data")

        started = time.perf_counter()
        vehicle_id = workflow_input.vehicle_id
        logger.info(
            "workflow_started",
            vehicle_id=vehicle_id,
            violations=len(workflow_input.violations),
            existing_alerts=len(workflow_input.existing_alerts),
        )

        # 1-2. analysis and master decision
        data_analysis = await self.agents.data_analysis.run(
            DataAnalysisInput(vehicle_id=vehicle_id, sensor_data=workflow_input.sensor_data)
        )
        master_decision = await self.agents.master.run(
            MasterInput(
                vehicle_id=vehicle_id,
                sensor_data=workflow_input.sensor_data,
                violations=workflow_input.violations,
                existing_alerts=workflow_input.existing_alerts,
            )
        )
        result = WorkflowResult(data_analysis=data_analysis, master_decision=master_decision)

        # 3-4. diagnosis, alert, engagement, scheduling
        if master_decision.should_create_alert and workflow_input.violations:
            result = result.model_copy(update=await self._diagnose(workflow_input))

        # 5. security screening
        result = result.model_copy(update=await self._screen(workflow_input, result))

        # 6. feedback and manufacturing loop
        if result.diagnosis is not None and result.diagnosis.fault_detected:
            result = result.model_copy(
                update=await self._close_loop(workflow_input, result.diagnosis, result.alert_id)
            )

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        result = result.model_copy(update={"execution_time_ms": elapsed_ms})

        logger.info(
            "workflow_completed",
            vehicle_id=vehicle_id,
            master_action=master_decision.action,
            fault_detected=result.fault_detected,
            alert_id=result.alert_id,
            alert_reused=result.alert_reused,
            execution_time_ms=elapsed_ms,
        )
        return result

    # -- stages -------------------------------------------------------------

    async def _diagnose(self, workflow_input: WorkflowInput) -> Dict[str, Any]:
        vehicle_id = workflow_input.vehicle_id
        diagnosis = await self.agents.diagnosis.run(
            DiagnosisInput(
                vehicle_id=vehicle_id,
                sensor_data=workflow_input.sensor_data,
                violations=workflow_input.violations,
            )
        )
        delta: Dict[str, Any] = {"diagnosis": diagnosis}
        if not diagnosis.fault_detected:
            return delta

        alert = self._alert_from_diagnosis(workflow_input, diagnosis)
        alert_id, inserted = self._persist_alert(alert)
        alert_id = alert_id or PLACEHOLDER_ALERT_ID
        now = self.clock()
        in_memory = Alert(
            id=alert_id,
            created_at=now,
            updated_at=now,
            **alert.model_dump(),
        )

        delta["alert_id"] = alert_id
        delta["alert_reused"] = alert_id != PLACEHOLDER_ALERT_ID and not inserted
        delta["engagement"] = await self.agents.engagement.run(
            EngagementInput(vehicle_id=vehicle_id, alert=in_memory)
        )
        delta["scheduling"] = await self.agents.scheduling.run(
            SchedulingInput(vehicle_id=vehicle_id, alert=in_memory, current_date=now.date())
        )
        return delta

    async def _screen(
        self, workflow_input: WorkflowInput, result: WorkflowResult
    ) -> Dict[str, Any]:
        ueba = await self.agents.ueba.run(
            UEBAInput(
                vehicle_id=workflow_input.vehicle_id,
                event_type=WORKFLOW_EVENT_TYPE,
                current_behavior={
                    "master_action": result.master_decision.action,
                    "data_analysis_anomalies": result.data_analysis.anomalies_detected,
                },
                violations=workflow_input.violations,
            )
        )
        self._persist_ueba_log(workflow_input.vehicle_id, result.master_decision, ueba)
        return {"ueba": ueba}

    async def _close_loop(
        self,
        workflow_input: WorkflowInput,
        diagnosis: DiagnosisOutput,
        alert_id: Optional[str],
    ) -> Dict[str, Any]:
        vehicle_id = workflow_input.vehicle_id

        feedback = await self.agents.feedback.run(
            FeedbackInput(
                vehicle_id=vehicle_id,
                service_id=SIMULATED_SERVICE_ID,
                service_outcome="success",
            )
        )
        manufacturing = await self.agents.manufacturing.run(
            ManufacturingInput(
                vehicle_id=vehicle_id,
                aggregated_failures=({"type": diagnosis.fault_type, "count": 1},),
                rca_reports=(),
            )
        )
        self._persist_capa_log(vehicle_id, diagnosis, manufacturing, alert_id)
        return {"feedback": feedback, "manufacturing": manufacturing}

    # -- best-effort writes -------------------------------------------------

    def _alert_from_diagnosis(
        self, workflow_input: WorkflowInput, diagnosis: DiagnosisOutput
    ) -> AlertCreate:
        return AlertCreate(
            vehicle_id=workflow_input.vehicle_id,
            alert_type=diagnosis.fault_type or DEFAULT_FAULT_TYPE,
            severity=diagnosis.severity,
            title=diagnosis.fault_type or DEFAULT_ALERT_TITLE,
            description=diagnosis.diagnosis,
            diagnosis=diagnosis.diagnosis,
            recommended_action=diagnosis.recommended_action,
            estimated_cost=diagnosis.estimated_cost or 0,
            sensor_reading_id=workflow_input.sensor_data.id if workflow_input.sensor_data else None,
            metadata={"source": "workflow", "decision_source": diagnosis.source},
        )

    def _persist_alert(self, alert: AlertCreate) -> Tuple[Optional[str], bool]:
        """Insert (or reuse) the alert.

        Returns ``(alert_id, inserted)``; the id is ``None`` when there is no
        usable store.
        """
        if self.store is None:
            return None, False
        try:
            if self.dedupe_open_alerts:
                existing = self.store.find_open_alert(alert.vehicle_id, alert.alert_type)
                if existing is not None:
                    logger.info(
                        "alert_reused",
                        vehicle_id=alert.vehicle_id,
                        alert_id=existing.id,
                        alert_type=alert.alert_type,
                    )
                    return existing.id, False
            saved = self.store.create_alert(alert)
        except Exception as exc:
            logger.error(
                "alert_persist_failed",
                vehicle_id=alert.vehicle_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None, False
        logger.info(
            "alert_created",
            vehicle_id=alert.vehicle_id,
            alert_id=saved.id,
            severity=saved.severity.value,
        )
        return saved.id, True

    def _persist_ueba_log(
        self, vehicle_id: str, master_decision: MasterDecision, ueba: UEBAOutput
    ) -> None:
        if self.store is None:
            return
        try:
            self.store.insert_ueba_log(
                UEBALogCreate(
                    vehicle_id=vehicle_id,
                    event_type=WORKFLOW_EVENT_TYPE,
                    risk_level=ueba.risk_level,
                    risk_score=ueba.risk_score,
                    anomaly_detected=ueba.anomaly_detected,
                    detection_method=UEBA_DETECTION_METHOD,
                    current_behavior={"master_action": master_decision.action},
                    action_taken=UEBA_ACTION_TAKEN,
                    metadata={"reasoning": ueba.reasoning},
                )
            )
        except Exception as exc:
            logger.error(
                "ueba_log_persist_failed",
                vehicle_id=vehicle_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )

    def _persist_capa_log(
        self,
        vehicle_id: str,
        diagnosis: DiagnosisOutput,
        manufacturing: ManufacturingOutput,
        alert_id: Optional[str],
    ) -> None:
        if self.store is None:
            return
        try:
            self.store.insert_agent_log(
                AgentLogCreate(
                    vehicle_id=vehicle_id,
                    agent_type=AgentType.RCA,
                    action=CAPA_LOG_ACTION,
                    input_data={"diagnosis": diagnosis.model_dump(mode="json")},
                    decision=manufacturing.model_dump(mode="json"),
                    reasoning=manufacturing.reasoning,
                    confidence_score=CAPA_LOG_CONFIDENCE,
                    alert_id=alert_id if alert_id != PLACEHOLDER_ALERT_ID else None,
                )
            )
        except Exception as exc:
            logger.error(
                "capa_log_persist_failed",
                vehicle_id=vehicle_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )


async def execute_workflow(
    workflow_input: WorkflowInput,
    inference: InferenceService,
    store: Optional[Store] = None,
    **kwargs: Any,
) -> WorkflowResult:
    """Build a :class:`WorkflowOrchestrator` and run it once."""
    orchestrator = WorkflowOrchestrator(inference, store, **kwargs)
    return await orchestrator.execute(workflow_input)
