"""POST /v1/ingest stores a sensor reading; GET lists recent readings."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from autosentience.api.deps import get_store
from autosentience.api.v1.schemas import ApiResponse
from autosentience.exceptions import WorkflowInputError
from autosentience.schemas import SensorReadingInput
from autosentience.services.ingest import IngestService
from autosentience.store.base import Store

logger = structlog.get_logger()
router = APIRouter()


@router.post("", response_model=ApiResponse)
def ingest_sensor_data(reading: SensorReadingInput, store: Store = Depends(get_store)):
    try:
        snapshot = IngestService(store).ingest(reading)
    except Exception as e:
        logger.error("ingest_endpoint_error", vehicle_id=reading.vehicle_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store sensor data",
        )
    return ApiResponse(data=snapshot, message="Sensor data ingested successfully")


@router.get("", response_model=ApiResponse)
def list_sensor_data(
    vehicle_id: str = Query("", description="Vehicle to list readings for"),
    limit: int = Query(10, ge=1, le=500),
    store: Store = Depends(get_store),
):
    try:
        snapshots = IngestService(store).recent(vehicle_id, limit=limit)
    except WorkflowInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error("ingest_list_endpoint_error", vehicle_id=vehicle_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch sensor data",
        )
    return ApiResponse(data=snapshots, count=len(snapshots))
