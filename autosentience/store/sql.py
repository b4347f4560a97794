"""SQLAlchemy implementation of :class:`~autosentience.store.base.Store`."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from autosentience import models_db
from autosentience.exceptions import StoreError
from autosentience.schemas import (
    SENSOR_PARAMETERS,
    AgentLog,
    AgentLogCreate,
    AgentType,
    Alert,
    AlertCreate,
    AlertStatus,
    Booking,
    BookingCreate,
    BookingStatus,
    SensorReadingInput,
    SensorSnapshot,
    Severity,
    UEBALog,
    UEBALogCreate,
)
from autosentience.store.base import Store

logger = structlog.get_logger(__name__)

_ACKNOWLEDGING = (AlertStatus.ACKNOWLEDGED, AlertStatus.IN_PROGRESS)
_RESOLVING = (AlertStatus.RESOLVED, AlertStatus.CLOSED)


# ---------------------------------------------------------------------------
# Row -> model conversion
# ---------------------------------------------------------------------------


def _to_snapshot(row: models_db.SensorReading) -> SensorSnapshot:
    readings = {name: getattr(row, name) for name in SENSOR_PARAMETERS}
    return SensorSnapshot(
        id=row.id,
        vehicle_id=row.vehicle_id,
        timestamp=row.timestamp,
        raw_data=row.raw_data or {},
        created_at=row.created_at,
        **readings,
    )


def _to_alert(row: models_db.Alert) -> Alert:
    return Alert(
        id=row.id,
        vehicle_id=row.vehicle_id,
        alert_type=row.alert_type,
        severity=Severity(row.severity),
        title=row.title,
        description=row.description,
        diagnosis=row.diagnosis,
        recommended_action=row.recommended_action,
        estimated_cost=row.estimated_cost,
        sensor_reading_id=row.sensor_reading_id,
        metadata=row.alert_metadata or {},
        status=AlertStatus(row.status),
        acknowledged_at=row.acknowledged_at,
        resolved_at=row.resolved_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_agent_log(row: models_db.AgentLog) -> AgentLog:
    return AgentLog(
        id=row.id,
        vehicle_id=row.vehicle_id,
        agent_type=AgentType(row.agent_type),
        action=row.action,
        input_data=row.input_data or {},
        reasoning=row.reasoning,
        decision=row.decision or {},
        confidence_score=row.confidence_score,
        alert_id=row.alert_id,
        booking_id=row.booking_id,
        execution_time_ms=row.execution_time_ms,
        created_at=row.created_at,
    )


def _to_ueba_log(row: models_db.UEBALog) -> UEBALog:
    return UEBALog(
        id=row.id,
        vehicle_id=row.vehicle_id,
        event_type=row.event_type,
        anomaly_detected=bool(row.anomaly_detected),
        risk_level=Severity(row.risk_level) if row.risk_level else None,
        risk_score=row.risk_score,
        detection_method=row.detection_method,
        current_behavior=row.current_behavior or {},
        action_taken=row.action_taken,
        flagged_for_review=bool(row.flagged_for_review),
        metadata=row.log_metadata or {},
        created_at=row.created_at,
    )


def _to_booking(row: models_db.Booking) -> Booking:
    return Booking(
        id=row.id,
        vehicle_id=row.vehicle_id,
        alert_id=row.alert_id,
        service_type=row.service_type,
        scheduled_date=row.scheduled_date,
        scheduled_time=row.scheduled_time,
        service_center=row.service_center,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        customer_email=row.customer_email,
        issue_description=row.issue_description,
        special_instructions=row.special_instructions,
        estimated_duration=row.estimated_duration,
        estimated_cost=row.estimated_cost,
        status=BookingStatus(row.status),
        confirmation_number=row.confirmation_number,
        actual_cost=row.actual_cost,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SqlStore(Store):
    """Store backed by a SQLAlchemy session.

    The session is owned by the caller (a FastAPI request dependency or a
    test fixture).  Every write commits immediately; any
    :class:`SQLAlchemyError` rolls back and is re-raised as
    :class:`StoreError`.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("store_operation_failed", operation=operation, error=str(exc))
            raise StoreError(f"{operation} failed: {exc}") from exc

    def _add(self, row: models_db.Base) -> None:
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)

    # -- sensor data --------------------------------------------------------

    def insert_snapshot(self, reading: SensorReadingInput) -> SensorSnapshot:
        with self._guard("insert_snapshot"):
            row = models_db.SensorReading(
                vehicle_id=reading.vehicle_id,
                timestamp=reading.timestamp,
                raw_data=reading.raw_data,
                **reading.readings(),
            )
            self._add(row)
            return _to_snapshot(row)

    def get_snapshot(self, snapshot_id: str) -> Optional[SensorSnapshot]:
        with self._guard("get_snapshot"):
            row = self.db.get(models_db.SensorReading, snapshot_id)
            return _to_snapshot(row) if row else None

    def latest_snapshot(self, vehicle_id: str) -> Optional[SensorSnapshot]:
        snapshots = self.recent_snapshots(vehicle_id, limit=1)
        return snapshots[0] if snapshots else None

    def recent_snapshots(self, vehicle_id: str, limit: int = 10) -> List[SensorSnapshot]:
        with self._guard("recent_snapshots"):
            rows = (
                self.db.query(models_db.SensorReading)
                .filter(models_db.SensorReading.vehicle_id == vehicle_id)
                .order_by(
                    models_db.SensorReading.timestamp.desc(),
                    models_db.SensorReading.created_at.desc(),
                )
                .limit(limit)
                .all()
            )
            return [_to_snapshot(r) for r in rows]

    # -- alerts -------------------------------------------------------------

    def create_alert(self, alert: AlertCreate) -> Alert:
        with self._guard("create_alert"):
            row = models_db.Alert(
                vehicle_id=alert.vehicle_id,
                alert_type=alert.alert_type,
                severity=alert.severity.value,
                title=alert.title,
                description=alert.description,
                diagnosis=alert.diagnosis,
                recommended_action=alert.recommended_action,
                estimated_cost=alert.estimated_cost,
                sensor_reading_id=alert.sensor_reading_id,
                alert_metadata=alert.metadata,
                status=AlertStatus.OPEN.value,
            )
            self._add(row)
            return _to_alert(row)

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._guard("get_alert"):
            row = self.db.get(models_db.Alert, alert_id)
            return _to_alert(row) if row else None

    def list_alerts(
        self,
        vehicle_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        status: Optional[AlertStatus] = None,
        limit: int = 50,
    ) -> List[Alert]:
        with self._guard("list_alerts"):
            query = self.db.query(models_db.Alert)
            if vehicle_id:
                query = query.filter(models_db.Alert.vehicle_id == vehicle_id)
            if severity is not None:
                query = query.filter(models_db.Alert.severity == severity.value)
            if status is not None:
                query = query.filter(models_db.Alert.status == status.value)
            rows = query.order_by(models_db.Alert.created_at.desc()).limit(limit).all()
            return [_to_alert(r) for r in rows]

    def list_open_alerts(self, vehicle_id: str) -> List[Alert]:
        return self.list_alerts(vehicle_id=vehicle_id, status=AlertStatus.OPEN, limit=1000)

    def find_open_alert(self, vehicle_id: str, alert_type: str) -> Optional[Alert]:
        with self._guard("find_open_alert"):
            row = (
                self.db.query(models_db.Alert)
                .filter(
                    models_db.Alert.vehicle_id == vehicle_id,
                    models_db.Alert.alert_type == alert_type,
                    models_db.Alert.status == AlertStatus.OPEN.value,
                )
                .order_by(models_db.Alert.created_at.desc())
                .first()
            )
            return _to_alert(row) if row else None

    def latest_alert_with_severity(
        self, vehicle_id: str, severities: Sequence[Severity]
    ) -> Optional[Alert]:
        with self._guard("latest_alert_with_severity"):
            row = (
                self.db.query(models_db.Alert)
                .filter(
                    models_db.Alert.vehicle_id == vehicle_id,
                    models_db.Alert.severity.in_([s.value for s in severities]),
                )
                .order_by(models_db.Alert.created_at.desc())
                .first()
            )
            return _to_alert(row) if row else None

    def count_alerts(self, vehicle_id: str, alert_type: str) -> int:
        with self._guard("count_alerts"):
            return (
                self.db.query(models_db.Alert)
                .filter(
                    models_db.Alert.vehicle_id == vehicle_id,
                    models_db.Alert.alert_type == alert_type,
                )
                .count()
            )

    def update_alert_status(
        self, alert_id: str, status: AlertStatus, now: datetime
    ) -> Optional[Alert]:
        with self._guard("update_alert_status"):
            row = self.db.get(models_db.Alert, alert_id)
            if row is None:
                return None
            row.status = status.value
            row.updated_at = now
            if status in _ACKNOWLEDGING:
                row.acknowledged_at = now
            elif status in _RESOLVING:
                row.resolved_at = now
            self.db.commit()
            self.db.refresh(row)
            return _to_alert(row)

    # -- logs ---------------------------------------------------------------

    def insert_agent_log(self, log: AgentLogCreate) -> AgentLog:
        with self._guard("insert_agent_log"):
            row = models_db.AgentLog(
                vehicle_id=log.vehicle_id,
                agent_type=log.agent_type.value,
                action=log.action,
                input_data=log.input_data,
                reasoning=log.reasoning,
                decision=log.decision,
                confidence_score=log.confidence_score,
                alert_id=log.alert_id,
                booking_id=log.booking_id,
                execution_time_ms=log.execution_time_ms,
            )
            self._add(row)
            return _to_agent_log(row)

    def list_agent_logs(
        self,
        vehicle_id: Optional[str] = None,
        agent_type: Optional[AgentType] = None,
        limit: int = 50,
    ) -> List[AgentLog]:
        with self._guard("list_agent_logs"):
            query = self.db.query(models_db.AgentLog)
            if vehicle_id:
                query = query.filter(models_db.AgentLog.vehicle_id == vehicle_id)
            if agent_type is not None:
                query = query.filter(models_db.AgentLog.agent_type == agent_type.value)
            rows = query.order_by(models_db.AgentLog.created_at.desc()).limit(limit).all()
            return [_to_agent_log(r) for r in rows]

    def insert_ueba_log(self, log: UEBALogCreate) -> UEBALog:
        with self._guard("insert_ueba_log"):
            row = models_db.UEBALog(
                vehicle_id=log.vehicle_id,
                event_type=log.event_type,
                risk_level=log.risk_level.value if log.risk_level else None,
                risk_score=log.risk_score,
                anomaly_detected=log.anomaly_detected,
                detection_method=log.detection_method,
                current_behavior=log.current_behavior,
                action_taken=log.action_taken,
                flagged_for_review=log.flagged_for_review,
                log_metadata=log.metadata,
            )
            self._add(row)
            return _to_ueba_log(row)

    # -- bookings -----------------------------------------------------------

    def create_booking(self, booking: BookingCreate, confirmation_number: str) -> Booking:
        with self._guard("create_booking"):
            row = models_db.Booking(
                **booking.model_dump(),
                status=BookingStatus.PENDING.value,
                confirmation_number=confirmation_number,
            )
            self._add(row)
            return _to_booking(row)

    def list_bookings(
        self,
        vehicle_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
        limit: int = 50,
    ) -> List[Booking]:
        with self._guard("list_bookings"):
            query = self.db.query(models_db.Booking)
            if vehicle_id:
                query = query.filter(models_db.Booking.vehicle_id == vehicle_id)
            if status is not None:
                query = query.filter(models_db.Booking.status == status.value)
            rows = query.order_by(models_db.Booking.created_at.desc()).limit(limit).all()
            return [_to_booking(r) for r in rows]

    def update_booking_status(
        self,
        booking_id: str,
        status: BookingStatus,
        now: datetime,
        actual_cost: Optional[float] = None,
    ) -> Optional[Booking]:
        with self._guard("update_booking_status"):
            row = self.db.get(models_db.Booking, booking_id)
            if row is None:
                return None
            row.status = status.value
            row.updated_at = now
            if actual_cost is not None:
                row.actual_cost = actual_cost
            self.db.commit()
            self.db.refresh(row)
            return _to_booking(row)
