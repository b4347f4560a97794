"""Tests for the SQLAlchemy store (in-memory SQLite)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from autosentience.exceptions import StoreError
from autosentience.schemas import (
    AgentLogCreate,
    AgentType,
    AlertCreate,
    AlertStatus,
    BookingCreate,
    BookingStatus,
    SensorReadingInput,
    Severity,
    UEBALogCreate,
)
from autosentience.store.sql import SqlStore

_NOW = datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc)


def _alert(vehicle_id: str = "VH-1", alert_type: str = "ENGINE_TEMP", **overrides) -> AlertCreate:
    defaults = dict(
        vehicle_id=vehicle_id,
        alert_type=alert_type,
        severity=Severity.HIGH,
        title="Engine overheating",
        diagnosis="Coolant leak",
        recommended_action="Inspect cooling system",
        metadata={"source": "test"},
    )
    defaults.update(overrides)
    return AlertCreate(**defaults)


# ---------------------------------------------------------------------------
# Sensor snapshots
# ---------------------------------------------------------------------------


class TestSnapshots:
    def test_insert_and_get(self, store: SqlStore, sample_snapshot_dict) -> None:
        saved = store.insert_snapshot(SensorReadingInput.model_validate(sample_snapshot_dict))
        assert saved.id
        fetched = store.get_snapshot(saved.id)
        assert fetched is not None
        assert fetched.engine_temp == 92.0
        assert fetched.tyre_pressure_rr == 32.5
        assert fetched.raw_data == {"source": "telematics-simulator"}

    def test_get_unknown(self, store: SqlStore) -> None:
        assert store.get_snapshot("missing") is None

    def test_latest_by_timestamp(self, store: SqlStore) -> None:
        for minutes, temp in ((0, 90.0), (10, 120.0), (5, 95.0)):
            store.insert_snapshot(
                SensorReadingInput(
                    vehicle_id="VH-1",
                    timestamp=_NOW + timedelta(minutes=minutes),
                    engine_temp=temp,
                )
            )
        store.insert_snapshot(SensorReadingInput(vehicle_id="VH-2", engine_temp=1.0))

        latest = store.latest_snapshot("VH-1")
        assert latest is not None and latest.engine_temp == 120.0
        assert [s.engine_temp for s in store.recent_snapshots("VH-1", limit=2)] == [120.0, 95.0]

    def test_latest_none(self, store: SqlStore) -> None:
        assert store.latest_snapshot("VH-404") is None


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------


class TestAlerts:
    def test_create_round_trip(self, store: SqlStore) -> None:
        created = store.create_alert(_alert())
        fetched = store.get_alert(created.id)
        assert fetched is not None
        assert fetched.status is AlertStatus.OPEN
        assert fetched.severity is Severity.HIGH
        assert fetched.diagnosis == "Coolant leak"
        assert fetched.metadata == {"source": "test"}

    def test_list_filters(self, store: SqlStore) -> None:
        store.create_alert(_alert())
        store.create_alert(_alert(severity=Severity.LOW))
        store.create_alert(_alert(vehicle_id="VH-2"))

        assert len(store.list_alerts()) == 3
        assert len(store.list_alerts(vehicle_id="VH-1")) == 2
        assert len(store.list_alerts(severity=Severity.LOW)) == 1
        assert len(store.list_alerts(limit=1)) == 1

    def test_open_alert_queries(self, store: SqlStore) -> None:
        first = store.create_alert(_alert())
        store.create_alert(_alert(alert_type="BATTERY_LOW"))
        store.update_alert_status(first.id, AlertStatus.RESOLVED, _NOW)

        assert [a.alert_type for a in store.list_open_alerts("VH-1")] == ["BATTERY_LOW"]
        assert store.find_open_alert("VH-1", "ENGINE_TEMP") is None
        assert store.find_open_alert("VH-1", "BATTERY_LOW") is not None
        assert store.count_alerts("VH-1", "ENGINE_TEMP") == 1

    def test_latest_alert_with_severity(self, store: SqlStore) -> None:
        store.create_alert(_alert(severity=Severity.LOW))
        high = store.create_alert(_alert(severity=Severity.CRITICAL))
        found = store.latest_alert_with_severity("VH-1", (Severity.HIGH, Severity.CRITICAL))
        assert found is not None and found.id == high.id
        assert store.latest_alert_with_severity("VH-2", (Severity.HIGH,)) is None

    @pytest.mark.parametrize(
        "status, stamped",
        [
            (AlertStatus.ACKNOWLEDGED, "acknowledged_at"),
            (AlertStatus.IN_PROGRESS, "acknowledged_at"),
            (AlertStatus.RESOLVED, "resolved_at"),
            (AlertStatus.CLOSED, "resolved_at"),
        ],
    )
    def test_status_timestamps(self, store: SqlStore, status, stamped) -> None:
        created = store.create_alert(_alert())
        updated = store.update_alert_status(created.id, status, _NOW)
        assert updated is not None
        assert updated.status is status
        assert getattr(updated, stamped).replace(tzinfo=timezone.utc) == _NOW

    def test_update_unknown(self, store: SqlStore) -> None:
        assert store.update_alert_status("missing", AlertStatus.CLOSED, _NOW) is None


# ---------------------------------------------------------------------------
# Logs and bookings
# ---------------------------------------------------------------------------


def test_agent_logs(store: SqlStore) -> None:
    store.insert_agent_log(
        AgentLogCreate(agent_type=AgentType.MASTER, action="Continue monitoring", vehicle_id="VH-1")
    )
    store.insert_agent_log(
        AgentLogCreate(
            agent_type=AgentType.RCA,
            action="GENERATE_CAPA_REPORT",
            vehicle_id="VH-1",
            decision={"design_improvements": ["x"]},
            confidence_score=0.85,
        )
    )
    logs = store.list_agent_logs(vehicle_id="VH-1", agent_type=AgentType.RCA)
    assert len(logs) == 1
    assert logs[0].decision == {"design_improvements": ["x"]}
    assert len(store.list_agent_logs()) == 2


def test_ueba_log(store: SqlStore) -> None:
    saved = store.insert_ueba_log(
        UEBALogCreate(
            event_type="AGENT_WORKFLOW_EXECUTION",
            anomaly_detected=False,
            vehicle_id="VH-1",
            risk_level=Severity.LOW,
            risk_score=10,
            metadata={"reasoning": "ok"},
        )
    )
    assert saved.id
    assert saved.risk_level is Severity.LOW
    assert saved.metadata == {"reasoning": "ok"}


def test_bookings(store: SqlStore) -> None:
    booking = BookingCreate(
        vehicle_id="VH-1",
        service_type="Engine Inspection",
        scheduled_date="2026-01-12",
        scheduled_time="09:30",
    )
    saved = store.create_booking(booking, "BK-1-ABCDEF")
    assert saved.status is BookingStatus.PENDING
    assert saved.confirmation_number == "BK-1-ABCDEF"
    assert [b.id for b in store.list_bookings(vehicle_id="VH-1")] == [saved.id]
    assert store.list_bookings(status=BookingStatus.CONFIRMED) == []


def test_update_booking_status(store: SqlStore) -> None:
    saved = store.create_booking(
        BookingCreate(
            vehicle_id="VH-1",
            service_type="Engine Inspection",
            scheduled_date="2026-01-12",
            scheduled_time="09:30",
        ),
        "BK-1-ABCDEF",
    )
    confirmed = store.update_booking_status(saved.id, BookingStatus.CONFIRMED, _NOW)
    assert confirmed.status is BookingStatus.CONFIRMED
    assert confirmed.actual_cost is None

    done = store.update_booking_status(saved.id, BookingStatus.COMPLETED, _NOW, actual_cost=240.0)
    assert done.status is BookingStatus.COMPLETED
    assert done.actual_cost == 240.0
    assert [b.id for b in store.list_bookings(status=BookingStatus.COMPLETED)] == [saved.id]
    assert store.update_booking_status("missing", BookingStatus.CANCELLED, _NOW) is None


def test_sqlalchemy_errors_wrapped() -> None:
    db = MagicMock()
    db.get.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
    store = SqlStore(db)
    with pytest.raises(StoreError, match="get_alert failed"):
        store.get_alert("any")
    db.rollback.assert_called_once()
