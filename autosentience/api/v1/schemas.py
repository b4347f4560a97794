"""Request and response bodies for the v1 API."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Envelope shared by every v1 endpoint."""

    success: bool = True
    data: Any = None
    count: Optional[int] = Field(None, description="Number of items when data is a list")
    message: Optional[str] = None


class PredictRequest(BaseModel):
    vehicle_id: Optional[str] = Field(None, description="Vehicle to run the prediction pipeline for")


class AlertStatusUpdate(BaseModel):
    alert_id: Optional[str] = Field(None, description="Alert to update")
    status: Optional[str] = Field(
        None, description="OPEN, ACKNOWLEDGED, IN_PROGRESS, RESOLVED or CLOSED"
    )


class RCARequest(BaseModel):
    """Either an alert id, or a vehicle id (uses its latest HIGH/CRITICAL alert)."""

    alert_id: Optional[str] = None
    vehicle_id: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    booking_id: Optional[str] = Field(None, description="Booking to update")
    status: Optional[str] = Field(
        None, description="PENDING, CONFIRMED, IN_SERVICE, COMPLETED or CANCELLED"
    )
    actual_cost: Optional[float] = Field(None, description="Final cost once the service is done")


class AgentDecisionRequest(BaseModel):
    """Runs only the master agent; defaults to the vehicle's latest reading."""

    vehicle_id: Optional[str] = None
    sensor_reading_id: Optional[str] = None
