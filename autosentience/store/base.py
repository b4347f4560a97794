"""Persistence interface used by the orchestrator, services and API.

Reads that the caller depends on propagate errors; the orchestrator wraps
its own writes so a failing store never aborts a workflow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from autosentience.schemas import (
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


class Store(ABC):
    """Abstract store for snapshots, alerts, agent/UEBA logs and bookings."""

    # -- sensor data --------------------------------------------------------

    @abstractmethod
    def insert_snapshot(self, reading: SensorReadingInput) -> SensorSnapshot:
        ...

    @abstractmethod
    def get_snapshot(self, snapshot_id: str) -> Optional[SensorSnapshot]:
        ...

    @abstractmethod
    def latest_snapshot(self, vehicle_id: str) -> Optional[SensorSnapshot]:
        """Most recent snapshot by reading timestamp, or ``None``."""

    @abstractmethod
    def recent_snapshots(self, vehicle_id: str, limit: int = 10) -> List[SensorSnapshot]:
        """Newest first."""

    # -- alerts -------------------------------------------------------------

    @abstractmethod
    def create_alert(self, alert: AlertCreate) -> Alert:
        """Insert an OPEN alert and return it with its generated id."""

    @abstractmethod
    def get_alert(self, alert_id: str) -> Optional[Alert]:
        ...

    @abstractmethod
    def list_alerts(
        self,
        vehicle_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        status: Optional[AlertStatus] = None,
        limit: int = 50,
    ) -> List[Alert]:
        """Newest first, optionally filtered."""

    @abstractmethod
    def list_open_alerts(self, vehicle_id: str) -> List[Alert]:
        ...

    @abstractmethod
    def find_open_alert(self, vehicle_id: str, alert_type: str) -> Optional[Alert]:
        ...

    @abstractmethod
    def latest_alert_with_severity(
        self, vehicle_id: str, severities: Sequence[Severity]
    ) -> Optional[Alert]:
        ...

    @abstractmethod
    def count_alerts(self, vehicle_id: str, alert_type: str) -> int:
        ...

    @abstractmethod
    def update_alert_status(
        self, alert_id: str, status: AlertStatus, now: datetime
    ) -> Optional[Alert]:
        """Set *status* and its lifecycle timestamp; ``None`` if the id is unknown.

        ACKNOWLEDGED and IN_PROGRESS stamp ``acknowledged_at``; RESOLVED and
        CLOSED stamp ``resolved_at``.
        """

    # -- logs ---------------------------------------------------------------

    @abstractmethod
    def insert_agent_log(self, log: AgentLogCreate) -> AgentLog:
        ...

    @abstractmethod
    def list_agent_logs(
        self,
        vehicle_id: Optional[str] = None,
        agent_type: Optional[AgentType] = None,
        limit: int = 50,
    ) -> List[AgentLog]:
        ...

    @abstractmethod
    def insert_ueba_log(self, log: UEBALogCreate) -> UEBALog:
        ...

    # -- bookings -----------------------------------------------------------

    @abstractmethod
    def create_booking(self, booking: BookingCreate, confirmation_number: str) -> Booking:
        ...

    @abstractmethod
    def list_bookings(
        self,
        vehicle_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
        limit: int = 50,
    ) -> List[Booking]:
        ...

    @abstractmethod
    def update_booking_status(
        self,
        booking_id: str,
        status: BookingStatus,
        now: datetime,
        actual_cost: Optional[float] = None,
    ) -> Optional[Booking]:
        """Set *status* (and *actual_cost* when given); ``None`` if the id is unknown."""
