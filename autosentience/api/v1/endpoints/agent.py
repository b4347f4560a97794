"""POST /v1/agent: master agent decision for one snapshot."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from autosentience.api.deps import get_inference, get_store
from autosentience.api.v1.schemas import AgentDecisionRequest, ApiResponse
from autosentience.exceptions import NoDataAvailableError, WorkflowInputError
from autosentience.inference.client import InferenceService
from autosentience.services.decision import DecisionService
from autosentience.store.base import Store

logger = structlog.get_logger()
router = APIRouter()


@router.post("", response_model=ApiResponse)
async def master_decision(
    request: AgentDecisionRequest,
    store: Store = Depends(get_store),
    inference: InferenceService = Depends(get_inference),
):
    try:
        report = await DecisionService(store, inference).decide(
            request.vehicle_id or "", request.sensor_reading_id
        )
    except WorkflowInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NoDataAvailableError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("agent_endpoint_error", vehicle_id=request.vehicle_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return ApiResponse(data=report)
