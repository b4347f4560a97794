from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from autosentience.api.deps import get_store
from autosentience.api.v1.schemas import ApiResponse
from autosentience.schemas import AgentType
from autosentience.store.base import Store

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=ApiResponse)
def list_agent_logs(
    vehicle_id: Optional[str] = None,
    agent_type: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    store: Store = Depends(get_store),
):
    """Recent agent decisions, newest first."""
    parsed_type = None
    if agent_type:
        try:
            parsed_type = AgentType(agent_type.upper())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid agent_type value: {agent_type}",
            )
    try:
        logs = store.list_agent_logs(vehicle_id=vehicle_id, agent_type=parsed_type, limit=limit)
    except Exception as e:
        logger.error("agent_logs_endpoint_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch agent logs")
    return ApiResponse(data=logs, count=len(logs))
