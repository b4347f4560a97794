"""Tests for the v1 HTTP API.

Covers:
  - GET /, /health
  - POST/GET /v1/ingest (422 on bad body, 400 without vehicle_id)
  - POST /v1/predict (400, 404, all-normal, full workflow)
  - POST /v1/agent (400, 404, latest reading, reading by id)
  - GET/POST/PATCH/DELETE /v1/alerts (filters, 400, 404, archive)
  - POST/GET /v1/rca, GET /v1/agent-logs, POST/GET/PATCH /v1/bookings
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from autosentience.api.deps import get_inference, get_store
from autosentience.main import app
from autosentience.schemas import AlertCreate, SensorReadingInput, Severity


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def client(store, failing_inference):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_inference] = lambda: failing_inference
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _alert(store, severity: Severity = Severity.HIGH):
    return store.create_alert(
        AlertCreate(
            vehicle_id="VH-1",
            alert_type="ENGINE_TEMP",
            severity=severity,
            title="Engine overheating",
        )
    )


# ---------------------------------------------------------------------------
# Root and ingest
# ---------------------------------------------------------------------------


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert client.get("/").json()["health"] == "/health"


def test_ingest_and_list(client, sample_snapshot_dict) -> None:
    resp = client.post("/v1/ingest", json=sample_snapshot_dict)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["vehicle_id"] == sample_snapshot_dict["vehicle_id"]

    listed = client.get("/v1/ingest", params={"vehicle_id": sample_snapshot_dict["vehicle_id"]})
    assert listed.status_code == 200
    assert listed.json()["count"] == 1


def test_ingest_rejects_missing_vehicle(client) -> None:
    assert client.post("/v1/ingest", json={"engine_temp": 90}).status_code == 422


def test_list_sensor_data_requires_vehicle(client) -> None:
    assert client.get("/v1/ingest").status_code == 400


# ---------------------------------------------------------------------------
# Predict
# ---------------------------------------------------------------------------


def test_predict_requires_vehicle(client) -> None:
    assert client.post("/v1/predict", json={}).status_code == 400


def test_predict_unknown_vehicle(client) -> None:
    assert client.post("/v1/predict", json={"vehicle_id": "VH-404"}).status_code == 404


def test_predict_all_normal(client, store, sample_snapshot_dict) -> None:
    store.insert_snapshot(SensorReadingInput.model_validate(sample_snapshot_dict))
    resp = client.post("/v1/predict", json={"vehicle_id": sample_snapshot_dict["vehicle_id"]})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["anomalies_detected"] is False
    assert data["message"] == "All systems normal"


def test_predict_runs_workflow_on_fallbacks(client, store) -> None:
    store.insert_snapshot(SensorReadingInput(vehicle_id="VH-1", engine_temp=125))
    resp = client.post("/v1/predict", json={"vehicle_id": "VH-1"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["anomalies_detected"] is True
    assert len(data["alerts_created"]) == 1
    assert data["master_decision"]["source"] == "fallback"
    assert data["workflow"]["scheduling"]["booking_recommended"] is True


# ---------------------------------------------------------------------------
# Master decision
# ---------------------------------------------------------------------------


def test_agent_decision_errors(client, store) -> None:
    assert client.post("/v1/agent", json={}).status_code == 400
    assert client.post("/v1/agent", json={"vehicle_id": "VH-404"}).status_code == 404
    store.insert_snapshot(SensorReadingInput(vehicle_id="VH-1", engine_temp=90))
    resp = client.post("/v1/agent", json={"vehicle_id": "VH-1", "sensor_reading_id": "missing"})
    assert resp.status_code == 404


def test_agent_decision_latest(client, store) -> None:
    store.insert_snapshot(SensorReadingInput(vehicle_id="VH-1", engine_temp=125))
    resp = client.post("/v1/agent", json={"vehicle_id": "VH-1"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["master_decision"]["should_create_alert"] is True
    assert len(data["violations"]) == 2
    assert client.get("/v1/alerts").json()["count"] == 0


def test_agent_decision_by_reading_id(client, store) -> None:
    old = store.insert_snapshot(
        SensorReadingInput(
            vehicle_id="VH-1", engine_temp=125, timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc)
        )
    )
    store.insert_snapshot(SensorReadingInput(vehicle_id="VH-1", engine_temp=90))

    resp = client.post("/v1/agent", json={"vehicle_id": "VH-1", "sensor_reading_id": old.id})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["sensor_reading"]["id"] == old.id
    assert data["master_decision"]["priority"] == "high"


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------


def test_create_and_filter_alerts(client) -> None:
    resp = client.post(
        "/v1/alerts",
        json={"vehicle_id": "VH-1", "alert_type": "BATTERY", "severity": "LOW", "title": "Battery low"},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["status"] == "OPEN"

    assert client.get("/v1/alerts", params={"severity": "low"}).json()["count"] == 1
    assert client.get("/v1/alerts", params={"severity": "CRITICAL"}).json()["count"] == 0
    assert client.get("/v1/alerts", params={"status": "bogus"}).status_code == 400


def test_patch_alert(client, store) -> None:
    alert = _alert(store)
    assert client.patch("/v1/alerts", json={"alert_id": alert.id}).status_code == 400
    assert client.patch("/v1/alerts", json={"alert_id": alert.id, "status": "DONE"}).status_code == 400
    assert client.patch("/v1/alerts", json={"alert_id": "missing", "status": "CLOSED"}).status_code == 404

    resp = client.patch("/v1/alerts", json={"alert_id": alert.id, "status": "acknowledged"})
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "ACKNOWLEDGED"
    assert resp.json()["data"]["acknowledged_at"] is not None


def test_delete_archives_alert(client, store) -> None:
    alert = _alert(store)
    resp = client.delete("/v1/alerts", params={"alert_id": alert.id})
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "CLOSED"
    assert store.get_alert(alert.id) is not None
    assert client.delete("/v1/alerts", params={"alert_id": "missing"}).status_code == 404
    assert client.delete("/v1/alerts").status_code == 400


# ---------------------------------------------------------------------------
# RCA, agent logs, bookings
# ---------------------------------------------------------------------------


def test_rca_errors(client, store) -> None:
    assert client.post("/v1/rca", json={}).status_code == 400
    assert client.post("/v1/rca", json={"alert_id": "missing"}).status_code == 404
    _alert(store, severity=Severity.LOW)
    assert client.post("/v1/rca", json={"vehicle_id": "VH-1"}).status_code == 404


def test_rca_generate_and_list(client, store) -> None:
    alert = _alert(store, severity=Severity.CRITICAL)
    resp = client.post("/v1/rca", json={"alert_id": alert.id})
    assert resp.status_code == 200
    assert resp.json()["data"]["rca"]["root_cause"] == "Primary issue: Engine overheating"

    listed = client.get("/v1/rca", params={"vehicle_id": "VH-1"})
    assert listed.json()["count"] == 1

    logs = client.get("/v1/agent-logs", params={"agent_type": "rca"})
    assert logs.status_code == 200
    assert logs.json()["count"] == 1
    assert client.get("/v1/agent-logs", params={"agent_type": "nope"}).status_code == 400


def test_bookings(client) -> None:
    resp = client.post(
        "/v1/bookings",
        json={
            "vehicle_id": "VH-1",
            "service_type": "Engine Inspection",
            "scheduled_date": "2026-01-12",
            "scheduled_time": "09:30",
        },
    )
    assert resp.status_code == 201
    booking = resp.json()["data"]
    assert booking["status"] == "PENDING"
    assert booking["confirmation_number"].startswith("BK-")

    listed = client.get("/v1/bookings", params={"vehicle_id": "VH-1", "status": "pending"})
    assert listed.json()["count"] == 1
    assert client.get("/v1/bookings", params={"status": "bogus"}).status_code == 400


def test_patch_booking_status(client) -> None:
    created = client.post(
        "/v1/bookings",
        json={
            "vehicle_id": "VH-1",
            "service_type": "Engine Inspection",
            "scheduled_date": "2026-01-12",
            "scheduled_time": "09:30",
        },
    ).json()["data"]

    assert client.patch("/v1/bookings", json={"booking_id": created["id"]}).status_code == 400
    assert client.patch(
        "/v1/bookings", json={"booking_id": created["id"], "status": "bogus"}
    ).status_code == 400
    assert client.patch(
        "/v1/bookings", json={"booking_id": "missing", "status": "CONFIRMED"}
    ).status_code == 404

    resp = client.patch(
        "/v1/bookings",
        json={"booking_id": created["id"], "status": "completed", "actual_cost": 210},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "COMPLETED"
    assert data["actual_cost"] == 210.0
