"""Alert lifecycle operations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog

from autosentience.exceptions import AlertNotFoundError
from autosentience.schemas import Alert, AlertCreate, AlertStatus, Severity
from autosentience.store.base import Store

logger = structlog.get_logger(__name__)

# Re-applying one of these to an alert already in that state changes nothing.
_TERMINAL = (AlertStatus.RESOLVED, AlertStatus.CLOSED)


class AlertService:
    def __init__(self, store: Store, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def list_alerts(
        self,
        vehicle_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        status: Optional[AlertStatus] = None,
        limit: int = 50,
    ) -> List[Alert]:
        return self.store.list_alerts(vehicle_id=vehicle_id, severity=severity, status=status, limit=limit)

    def create_alert(self, alert: AlertCreate) -> Alert:
        created = self.store.create_alert(alert)
        logger.info(
            "alert_created",
            vehicle_id=created.vehicle_id,
            alert_id=created.id,
            severity=created.severity.value,
        )
        return created

    def get_alert(self, alert_id: str) -> Alert:
        alert = self.store.get_alert(alert_id)
        if alert is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")
        return alert

    def update_status(self, alert_id: str, status: AlertStatus) -> Alert:
        """Move an alert to *status*, stamping the matching timestamp.

        Raises:
            AlertNotFoundError: no alert with this id.
        """
        current = self.get_alert(alert_id)
        if status in _TERMINAL and current.status is status:
            return current

        updated = self.store.update_alert_status(alert_id, status, self.clock())
        if updated is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")
        logger.info(
            "alert_status_updated",
            alert_id=alert_id,
            previous_status=current.status.value,
            status=status.value,
        )
        return updated

    def archive(self, alert_id: str) -> Alert:
        """Soft delete: alerts are never removed, only CLOSED."""
        return self.update_status(alert_id, AlertStatus.CLOSED)
