"""Orchestrator input and aggregated result."""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from autosentience.agents.schemas import (
    DataAnalysisOutput,
    DiagnosisOutput,
    EngagementOutput,
    FeedbackOutput,
    ManufacturingOutput,
    MasterDecision,
    SchedulingOutput,
    UEBAOutput,
)
from autosentience.schemas import Alert, RuleViolation, SensorSnapshot


class WorkflowInput(BaseModel):
    """One orchestrator invocation.

    ``vehicle_id`` and ``sensor_data`` are checked by the orchestrator, which
    raises :class:`~autosentience.exceptions.WorkflowInputError` rather than a
    pydantic validation error.
    """

    model_config = ConfigDict(frozen=True)

    vehicle_id: str
    sensor_data: Optional[SensorSnapshot] = None
    violations: Tuple[RuleViolation, ...] = ()
    existing_alerts: Tuple[Alert, ...] = ()


class WorkflowResult(BaseModel):
    """Aggregated outputs of every stage that ran.

    Optional fields stay ``None`` when their branch was not taken.  ``ueba``
    is always set once :meth:`WorkflowOrchestrator.execute` returns.
    ``alert_reused`` is true when ``alert_id`` names an OPEN alert that
    existed before this run.
    """

    model_config = ConfigDict(frozen=True)

    data_analysis: DataAnalysisOutput
    master_decision: MasterDecision
    diagnosis: Optional[DiagnosisOutput] = None
    engagement: Optional[EngagementOutput] = None
    scheduling: Optional[SchedulingOutput] = None
    ueba: Optional[UEBAOutput] = None
    feedback: Optional[FeedbackOutput] = None
    manufacturing: Optional[ManufacturingOutput] = None
    alert_id: Optional[str] = None
    alert_reused: bool = False
    execution_time_ms: int = 0

    @property
    def fault_detected(self) -> bool:
        return self.diagnosis is not None and self.diagnosis.fault_detected
