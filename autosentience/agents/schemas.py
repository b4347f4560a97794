"""Agent input and output contracts.

Every agent output shares the :class:`AgentOutput` base fields and adds
its own domain fields.  Fields an agent *must* return are declared without
defaults, so a model answer that omits them fails validation and triggers
the deterministic fallback instead of leaking a half-formed decision.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autosentience.schemas import Alert, RuleViolation, SensorSnapshot, Severity

DecisionSource = Literal["ai", "fallback"]
Priority = Literal["low", "medium", "high", "critical"]
Tone = Literal["informative", "urgent", "reassuring"]
Urgency = Literal["immediate", "within_24h", "within_week", "routine"]
Volume = Literal["low", "medium", "high"]
ServiceOutcome = Literal["success", "failure", "pending"]


def _upper(v: Any) -> Any:
    return v.strip().upper() if isinstance(v, str) else v


def _lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


class AgentOutput(BaseModel):
    """Uniform decision shape logged and branched on by the orchestrator."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    action: str = ""
    reasoning: str = ""
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    source: DecisionSource = Field(
        default="ai",
        description="'fallback' when the decision was computed locally",
    )

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


class MasterDecision(AgentOutput):
    action: str = Field(..., min_length=1)
    next_steps: List[str] = Field(default_factory=list)
    should_create_alert: bool
    should_notify_user: bool = False
    should_book_service: bool = False
    priority: Priority = "low"

    @field_validator("priority", mode="before")
    @classmethod
    def normalise_priority(cls, v: Any) -> Any:
        return _lower(v)


class DiagnosisOutput(AgentOutput):
    fault_detected: bool
    fault_type: Optional[str] = None
    severity: Severity
    diagnosis: str = Field(..., min_length=1)
    recommended_action: str = ""
    estimated_cost: Optional[float] = None

    @field_validator("severity", mode="before")
    @classmethod
    def normalise_severity(cls, v: Any) -> Any:
        return _upper(v)


class EngagementOutput(AgentOutput):
    message: str = Field(..., min_length=1)
    tone: Tone
    should_call_user: bool = False

    @field_validator("tone", mode="before")
    @classmethod
    def normalise_tone(cls, v: Any) -> Any:
        return _lower(v)


class SchedulingOutput(AgentOutput):
    booking_recommended: bool
    urgency: Optional[Urgency] = None
    suggested_dates: List[str] = Field(default_factory=list)
    service_type: Optional[str] = None
    estimated_duration: Optional[int] = Field(default=None, description="Minutes")


class DemandForecast(BaseModel):
    service_type: str
    predicted_volume: Volume
    timeframe: str

    @field_validator("predicted_volume", mode="before")
    @classmethod
    def normalise_volume(cls, v: Any) -> Any:
        return _lower(v)


class DataAnalysisOutput(AgentOutput):
    anomalies_detected: bool
    predicted_maintenance_needs: List[str] = Field(default_factory=list)
    demand_forecast: List[DemandForecast] = Field(default_factory=list)


class FeedbackOutput(AgentOutput):
    satisfaction_score: int = Field(..., ge=1, le=10)
    qualitative_feedback: str = ""
    record_updated: bool = False


class ManufacturingOutput(AgentOutput):
    design_improvements: List[str]
    defect_reduction_strategies: List[str] = Field(default_factory=list)
    affected_components: List[str] = Field(default_factory=list)


class UEBAOutput(AgentOutput):
    anomaly_detected: bool
    risk_level: Severity
    risk_score: float = Field(default=0.0, ge=0.0, le=100.0)
    suspicious_patterns: List[str] = Field(default_factory=list)
    recommended_action: Optional[str] = None

    @field_validator("risk_level", mode="before")
    @classmethod
    def normalise_risk(cls, v: Any) -> Any:
        return _upper(v)


class RCAOutput(AgentOutput):
    root_cause: str = Field(..., min_length=1)
    contributing_factors: List[str] = Field(default_factory=list)
    capa_recommendations: List[str]
    preventive_measures: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class _AgentInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    vehicle_id: str


class MasterInput(_AgentInput):
    sensor_data: SensorSnapshot
    violations: Tuple[RuleViolation, ...] = ()
    existing_alerts: Tuple[Alert, ...] = ()


class DiagnosisInput(_AgentInput):
    sensor_data: SensorSnapshot
    violations: Tuple[RuleViolation, ...] = ()


class EngagementInput(_AgentInput):
    alert: Alert
    user_name: Optional[str] = None
    previous_interactions: Optional[int] = None


class SchedulingInput(_AgentInput):
    alert: Alert
    current_date: Optional[date] = None


class DataAnalysisInput(_AgentInput):
    sensor_data: SensorSnapshot
    maintenance_history: Tuple[Dict[str, Any], ...] = ()


class FeedbackInput(_AgentInput):
    service_id: str
    service_outcome: ServiceOutcome
    customer_profile: Dict[str, Any] = Field(default_factory=dict)


class ManufacturingInput(_AgentInput):
    aggregated_failures: Tuple[Dict[str, Any], ...] = ()
    rca_reports: Tuple[Dict[str, Any], ...] = ()


class UEBAInput(_AgentInput):
    event_type: str
    current_behavior: Dict[str, Any] = Field(default_factory=dict)
    baseline_behavior: Optional[Dict[str, Any]] = None
    violations: Tuple[RuleViolation, ...] = ()


class RCAHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    similar_alerts: int = 0
    recent_sensors: Tuple[SensorSnapshot, ...] = ()


class RCAInput(_AgentInput):
    alert: Alert
    historical_data: Optional[RCAHistory] = None
