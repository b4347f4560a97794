"""POST /v1/predict: rules plus the agent workflow on the latest snapshot."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from autosentience.api.deps import get_inference, get_settings, get_store
from autosentience.api.v1.schemas import ApiResponse, PredictRequest
from autosentience.config import Settings
from autosentience.exceptions import NoDataAvailableError, WorkflowInputError
from autosentience.inference.client import InferenceService
from autosentience.services.prediction import PredictionService
from autosentience.store.base import Store

logger = structlog.get_logger()
router = APIRouter()


@router.post("", response_model=ApiResponse)
async def predict(
    request: PredictRequest,
    store: Store = Depends(get_store),
    inference: InferenceService = Depends(get_inference),
    settings: Settings = Depends(get_settings),
):
    """
    Run predictive analysis for a vehicle.

    1. **Applies the threshold rules** to the latest sensor snapshot.
    2. **Runs the agent workflow** when any rule fires.
    3. **Logs the master decision** to the agent log.

    Degraded (fallback) agent decisions are still a 200 response.
    """
    service = PredictionService(
        store,
        inference,
        dedupe_open_alerts=settings.dedupe_open_alerts,
    )
    try:
        report = await service.run(request.vehicle_id or "")
    except WorkflowInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NoDataAvailableError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("predict_endpoint_error", vehicle_id=request.vehicle_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return ApiResponse(data=report, message=report.message)
