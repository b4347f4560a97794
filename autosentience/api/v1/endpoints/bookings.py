"""Service bookings."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from autosentience.api.deps import get_store
from autosentience.api.v1.schemas import ApiResponse, BookingStatusUpdate
from autosentience.exceptions import BookingNotFoundError
from autosentience.schemas import BookingCreate, BookingStatus
from autosentience.services.bookings import BookingService
from autosentience.store.base import Store

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=ApiResponse)
def list_bookings(
    vehicle_id: Optional[str] = None,
    booking_status: Optional[str] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=500),
    store: Store = Depends(get_store),
):
    parsed_status = None
    if booking_status:
        try:
            parsed_status = BookingStatus(booking_status.upper())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status value: {booking_status}",
            )
    try:
        bookings = BookingService(store).list_bookings(vehicle_id, parsed_status, limit)
    except Exception as e:
        logger.error("bookings_list_endpoint_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch bookings")
    return ApiResponse(data=bookings, count=len(bookings))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_booking(booking: BookingCreate, store: Store = Depends(get_store)):
    try:
        created = BookingService(store).create(booking)
    except Exception as e:
        logger.error("bookings_create_endpoint_error", vehicle_id=booking.vehicle_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create booking")
    return ApiResponse(data=created, message="Booking created successfully")


@router.patch("", response_model=ApiResponse)
def update_booking_status(update: BookingStatusUpdate, store: Store = Depends(get_store)):
    if not update.booking_id or not update.status:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="booking_id and status are required",
        )
    try:
        new_status = BookingStatus(update.status.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status value: {update.status}",
        )
    try:
        booking = BookingService(store).update_status(
            update.booking_id, new_status, update.actual_cost
        )
    except BookingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("bookings_update_endpoint_error", booking_id=update.booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to update booking")
    return ApiResponse(data=booking, message="Booking updated successfully")
