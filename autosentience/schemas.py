"""Domain models shared by the rule engine, agents, store and API.

Pydantic v2 models.  Sensor snapshots, violations and detection results are
frozen: they are produced once and only read afterwards.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    """Ordinal alert severity: LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @property
    def is_urgent(self) -> bool:
        """HIGH and CRITICAL warrant notifying the driver and booking service."""
        return self in (Severity.HIGH, Severity.CRITICAL)


_SEVERITY_ORDER: Tuple[Severity, ...] = (
    Severity.LOW,
    Severity.MEDIUM,
    Severity.HIGH,
    Severity.CRITICAL,
)


def highest_severity(severities: Iterable[Severity]) -> Optional[Severity]:
    """Return the max-ranked severity, or ``None`` for an empty iterable.

    Ties keep the first value seen.
    """
    best: Optional[Severity] = None
    for sev in severities:
        if best is None or sev.rank > best.rank:
            best = sev
    return best


class AlertStatus(str, Enum):
    """Alert lifecycle.  CLOSED is terminal and acts as a soft delete."""

    OPEN = "OPEN"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_SERVICE = "IN_SERVICE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AgentType(str, Enum):
    MASTER = "MASTER"
    DIAGNOSIS = "DIAGNOSIS"
    ENGAGEMENT = "ENGAGEMENT"
    SCHEDULING = "SCHEDULING"
    DATA_ANALYSIS = "DATA_ANALYSIS"
    FEEDBACK = "FEEDBACK"
    MANUFACTURING = "MANUFACTURING"
    RCA = "RCA"
    UEBA = "UEBA"


# ---------------------------------------------------------------------------
# Sensor data
# ---------------------------------------------------------------------------

SENSOR_PARAMETERS: Tuple[str, ...] = (
    "engine_temp",
    "engine_rpm",
    "engine_load",
    "battery_voltage",
    "battery_current",
    "fuel_level",
    "fuel_pressure",
    "transmission_temp",
    "gear_position",
    "tyre_pressure_fl",
    "tyre_pressure_fr",
    "tyre_pressure_rl",
    "tyre_pressure_rr",
    "coolant_temp",
    "oil_pressure",
    "speed",
    "odometer",
)


class SensorReadingInput(BaseModel):
    """Ingest payload: one raw reading from a vehicle."""

    vehicle_id: str = Field(..., min_length=1, description="Vehicle identifier")
    timestamp: datetime = Field(default_factory=_utcnow)

    engine_temp: Optional[float] = None
    engine_rpm: Optional[float] = None
    engine_load: Optional[float] = None
    battery_voltage: Optional[float] = None
    battery_current: Optional[float] = None
    fuel_level: Optional[float] = None
    fuel_pressure: Optional[float] = None
    transmission_temp: Optional[float] = None
    gear_position: Optional[float] = None
    tyre_pressure_fl: Optional[float] = None
    tyre_pressure_fr: Optional[float] = None
    tyre_pressure_rl: Optional[float] = None
    tyre_pressure_rr: Optional[float] = None
    coolant_temp: Optional[float] = None
    oil_pressure: Optional[float] = None
    speed: Optional[float] = None
    odometer: Optional[float] = None

    raw_data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator(*SENSOR_PARAMETERS, mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> Optional[float]:
        """Lenient numeric coercion: anything unparseable becomes ``None``."""
        if v is None or isinstance(v, bool):
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None

    def readings(self) -> Dict[str, Optional[float]]:
        """Return ``{parameter: value}`` for every monitored parameter."""
        return {name: getattr(self, name) for name in SENSOR_PARAMETERS}


class SensorSnapshot(SensorReadingInput):
    """A stored sensor reading.  Immutable once read."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def prompt_dict(self) -> Dict[str, Any]:
        """Present, finite readings only -- keeps prompts short and JSON-safe."""
        out: Dict[str, Any] = {"vehicle_id": self.vehicle_id, "timestamp": self.timestamp.isoformat()}
        for name, value in self.readings().items():
            if value is not None and not math.isnan(value):
                out[name] = value
        return out


# ---------------------------------------------------------------------------
# Rule detection
# ---------------------------------------------------------------------------


class RuleViolation(BaseModel):
    """A single threshold breach on one sensor parameter."""

    model_config = ConfigDict(frozen=True)

    rule_name: str
    parameter: str
    current_value: float
    threshold: float
    severity: Severity
    message: str


class RuleDetectionResult(BaseModel):
    """Violations in rule evaluation order plus derived summary fields."""

    model_config = ConfigDict(frozen=True)

    violations: Tuple[RuleViolation, ...] = ()
    has_violations: bool = False
    highest_severity: Optional[Severity] = None


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------


class AlertCreate(BaseModel):
    """Fields required to open a new alert."""

    vehicle_id: str = Field(..., min_length=1)
    alert_type: str = Field(..., min_length=1)
    severity: Severity
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    diagnosis: Optional[str] = None
    recommended_action: Optional[str] = None
    estimated_cost: Optional[float] = None
    sensor_reading_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Alert(AlertCreate):
    """A persisted (or placeholder) alert."""

    id: str
    status: AlertStatus = AlertStatus.OPEN
    acknowledged_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------


class AgentLogCreate(BaseModel):
    """One agent decision, as written to the agent log."""

    agent_type: AgentType
    action: str
    vehicle_id: Optional[str] = None
    input_data: Dict[str, Any] = Field(default_factory=dict)
    reasoning: Optional[str] = None
    decision: Dict[str, Any] = Field(default_factory=dict)
    confidence_score: Optional[float] = None
    alert_id: Optional[str] = None
    booking_id: Optional[str] = None
    execution_time_ms: Optional[int] = None


class AgentLog(AgentLogCreate):
    id: str
    created_at: datetime


class UEBALogCreate(BaseModel):
    """Security-layer record of one workflow execution."""

    event_type: str
    anomaly_detected: bool
    vehicle_id: Optional[str] = None
    risk_level: Optional[Severity] = None
    risk_score: Optional[float] = None
    detection_method: Optional[str] = None
    current_behavior: Dict[str, Any] = Field(default_factory=dict)
    action_taken: Optional[str] = None
    flagged_for_review: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)


class UEBALog(UEBALogCreate):
    id: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    vehicle_id: str = Field(..., min_length=1)
    service_type: str = Field(..., min_length=1)
    scheduled_date: str = Field(..., min_length=1, description="ISO date, e.g. 2026-10-19")
    scheduled_time: str = Field(..., min_length=1, description="e.g. 09:30")
    alert_id: Optional[str] = None
    service_center: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    issue_description: Optional[str] = None
    special_instructions: Optional[str] = None
    estimated_duration: Optional[int] = None
    estimated_cost: Optional[float] = None


class Booking(BookingCreate):
    id: str
    status: BookingStatus = BookingStatus.PENDING
    confirmation_number: str
    actual_cost: Optional[float] = None
    created_at: datetime
    updated_at: datetime


__all__: List[str] = [
    "AgentLog",
    "AgentLogCreate",
    "AgentType",
    "Alert",
    "AlertCreate",
    "AlertStatus",
    "Booking",
    "BookingCreate",
    "BookingStatus",
    "RuleDetectionResult",
    "RuleViolation",
    "SENSOR_PARAMETERS",
    "SensorReadingInput",
    "SensorSnapshot",
    "Severity",
    "UEBALog",
    "UEBALogCreate",
    "highest_severity",
]
