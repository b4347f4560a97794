"""Alert listing, manual creation, status updates and archiving."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from autosentience.api.deps import get_store
from autosentience.api.v1.schemas import AlertStatusUpdate, ApiResponse
from autosentience.exceptions import AlertNotFoundError
from autosentience.schemas import AlertCreate, AlertStatus, Severity
from autosentience.services.alerts import AlertService
from autosentience.store.base import Store

logger = structlog.get_logger()
router = APIRouter()


def _parse_enum(enum_cls, value: Optional[str], field: str):
    if value is None:
        return None
    try:
        return enum_cls(value.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field} value: {value}",
        )


@router.get("", response_model=ApiResponse)
def list_alerts(
    vehicle_id: Optional[str] = None,
    severity: Optional[str] = None,
    alert_status: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    store: Store = Depends(get_store),
):
    sev = _parse_enum(Severity, severity, "severity")
    st = _parse_enum(AlertStatus, alert_status, "status")
    try:
        alerts = AlertService(store).list_alerts(vehicle_id, sev, st, limit)
    except Exception as e:
        logger.error("alerts_list_endpoint_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch alerts")
    return ApiResponse(data=alerts, count=len(alerts))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_alert(alert: AlertCreate, store: Store = Depends(get_store)):
    try:
        created = AlertService(store).create_alert(alert)
    except Exception as e:
        logger.error("alerts_create_endpoint_error", vehicle_id=alert.vehicle_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create alert")
    return ApiResponse(data=created, message="Alert created successfully")


@router.patch("", response_model=ApiResponse)
def update_alert_status(update: AlertStatusUpdate, store: Store = Depends(get_store)):
    if not update.alert_id or not update.status:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="alert_id and status are required",
        )
    new_status = _parse_enum(AlertStatus, update.status, "status")
    try:
        alert = AlertService(store).update_status(update.alert_id, new_status)
    except AlertNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("alerts_update_endpoint_error", alert_id=update.alert_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to update alert")
    return ApiResponse(data=alert, message="Alert updated successfully")


@router.delete("", response_model=ApiResponse)
def archive_alert(
    alert_id: Optional[str] = Query(None, description="Alert to archive"),
    store: Store = Depends(get_store),
):
    """Soft delete: the alert is moved to CLOSED, never removed."""
    if not alert_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="alert_id is required")
    try:
        alert = AlertService(store).archive(alert_id)
    except AlertNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("alerts_archive_endpoint_error", alert_id=alert_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to archive alert")
    return ApiResponse(data=alert, message="Alert archived successfully")
