"""Root-cause analysis: generate for an alert, list past reports."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from autosentience.api.deps import get_inference, get_store
from autosentience.api.v1.schemas import ApiResponse, RCARequest
from autosentience.exceptions import AlertNotFoundError, WorkflowInputError
from autosentience.inference.client import InferenceService
from autosentience.services.rca import RCAService
from autosentience.store.base import Store

logger = structlog.get_logger()
router = APIRouter()


@router.post("", response_model=ApiResponse)
async def generate_rca(
    request: RCARequest,
    store: Store = Depends(get_store),
    inference: InferenceService = Depends(get_inference),
):
    try:
        report = await RCAService(store, inference).generate(
            alert_id=request.alert_id, vehicle_id=request.vehicle_id
        )
    except WorkflowInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AlertNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("rca_endpoint_error", alert_id=request.alert_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return ApiResponse(data=report)


@router.get("", response_model=ApiResponse)
def list_rca_reports(
    vehicle_id: Optional[str] = None,
    limit: int = Query(10, ge=1, le=500),
    store: Store = Depends(get_store),
    inference: InferenceService = Depends(get_inference),
):
    try:
        reports = RCAService(store, inference).list_reports(vehicle_id, limit)
    except Exception as e:
        logger.error("rca_list_endpoint_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch RCA reports")
    return ApiResponse(data=reports, count=len(reports))
