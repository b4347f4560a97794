"""Database models for sensor readings, alerts, logs and bookings."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from autosentience.db.base import Base

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid4())


class SensorReading(Base):
    """One telemetry snapshot from a vehicle."""

    __tablename__ = "sensor_data"

    id = Column(String(36), primary_key=True, default=_uuid)
    vehicle_id = Column(String(50), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, index=True)

    engine_temp = Column(Float, nullable=True)
    engine_rpm = Column(Float, nullable=True)
    engine_load = Column(Float, nullable=True)
    battery_voltage = Column(Float, nullable=True)
    battery_current = Column(Float, nullable=True)
    fuel_level = Column(Float, nullable=True)
    fuel_pressure = Column(Float, nullable=True)
    transmission_temp = Column(Float, nullable=True)
    gear_position = Column(Float, nullable=True)
    tyre_pressure_fl = Column(Float, nullable=True)
    tyre_pressure_fr = Column(Float, nullable=True)
    tyre_pressure_rl = Column(Float, nullable=True)
    tyre_pressure_rr = Column(Float, nullable=True)
    coolant_temp = Column(Float, nullable=True)
    oil_pressure = Column(Float, nullable=True)
    speed = Column(Float, nullable=True)
    odometer = Column(Float, nullable=True)

    raw_data = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Alert(Base):
    """Maintenance alert.  Never deleted; CLOSED is the archived state."""

    __tablename__ = "alerts"

    id = Column(String(36), primary_key=True, default=_uuid)
    vehicle_id = Column(String(50), nullable=False, index=True)
    alert_type = Column(String(100), nullable=False, index=True)
    severity = Column(String(20), nullable=False, index=True)  # LOW, MEDIUM, HIGH, CRITICAL
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    diagnosis = Column(Text, nullable=True)
    recommended_action = Column(Text, nullable=True)
    estimated_cost = Column(Float, nullable=True)

    status = Column(String(20), default="OPEN", index=True)
    sensor_reading_id = Column(String(36), nullable=True)

    acknowledged_at = Column(DateTime(timezone=True), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    # "metadata" is reserved on declarative classes
    alert_metadata = Column("metadata", JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class AgentLog(Base):
    """One agent decision."""

    __tablename__ = "agent_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    vehicle_id = Column(String(50), nullable=True, index=True)
    agent_type = Column(String(30), nullable=False, index=True)
    action = Column(String(255), nullable=False)

    input_data = Column(JSONType, nullable=True)
    reasoning = Column(Text, nullable=True)
    decision = Column(JSONType, nullable=True)
    confidence_score = Column(Float, nullable=True)

    alert_id = Column(String(36), nullable=True)
    booking_id = Column(String(36), nullable=True)
    execution_time_ms = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)


class UEBALog(Base):
    """Security-layer record of a workflow execution."""

    __tablename__ = "ueba_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    vehicle_id = Column(String(50), nullable=True, index=True)
    event_type = Column(String(100), nullable=False)
    risk_level = Column(String(20), nullable=True)
    risk_score = Column(Float, nullable=True)
    anomaly_detected = Column(Boolean, default=False)
    detection_method = Column(String(100), nullable=True)
    current_behavior = Column(JSONType, nullable=True)
    action_taken = Column(String(100), nullable=True)
    flagged_for_review = Column(Boolean, default=False)

    log_metadata = Column("metadata", JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)


class Booking(Base):
    """Service appointment."""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=_uuid)
    vehicle_id = Column(String(50), nullable=False, index=True)
    alert_id = Column(String(36), nullable=True)
    service_type = Column(String(100), nullable=False)
    scheduled_date = Column(String(10), nullable=False)  # ISO date
    scheduled_time = Column(String(8), nullable=False)
    service_center = Column(String(255), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    customer_email = Column(String(255), nullable=True)
    issue_description = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)
    estimated_duration = Column(Integer, nullable=True)
    estimated_cost = Column(Float, nullable=True)
    actual_cost = Column(Float, nullable=True)

    status = Column(String(20), default="PENDING", index=True)
    confirmation_number = Column(String(40), nullable=False, unique=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
