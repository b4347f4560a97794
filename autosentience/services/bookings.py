"""Service bookings."""

from __future__ import annotations

import random
import string
from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog

from autosentience.exceptions import BookingNotFoundError
from autosentience.schemas import (
    AgentLogCreate,
    AgentType,
    Booking,
    BookingCreate,
    BookingStatus,
)
from autosentience.store.base import Store

logger = structlog.get_logger(__name__)

_CONFIRMATION_ALPHABET = string.ascii_uppercase + string.digits


def generate_confirmation_number(
    now: datetime, rng: Optional[random.Random] = None
) -> str:
    """``BK-<epoch milliseconds>-<6 uppercase alphanumerics>``."""
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_CONFIRMATION_ALPHABET) for _ in range(6))
    return f"BK-{int(now.timestamp() * 1000)}-{suffix}"


class BookingService:
    def __init__(
        self,
        store: Store,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.rng = rng

    def create(self, booking: BookingCreate) -> Booking:
        confirmation = generate_confirmation_number(self.clock(), self.rng)
        created = self.store.create_booking(booking, confirmation)
        logger.info(
            "booking_created",
            vehicle_id=created.vehicle_id,
            booking_id=created.id,
            confirmation_number=confirmation,
        )

        try:
            self.store.insert_agent_log(
                AgentLogCreate(
                    vehicle_id=created.vehicle_id,
                    agent_type=AgentType.SCHEDULING,
                    action="Service booking created",
                    input_data=booking.model_dump(mode="json"),
                    reasoning="User requested service booking",
                    decision={"booking_id": created.id, "confirmation_number": confirmation},
                    confidence_score=1.0,
                    booking_id=created.id,
                )
            )
        except Exception as exc:
            logger.error("booking_log_persist_failed", booking_id=created.id, error=str(exc))
        return created

    def list_bookings(
        self,
        vehicle_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
        limit: int = 20,
    ) -> List[Booking]:
        return self.store.list_bookings(vehicle_id=vehicle_id, status=status, limit=limit)

    def update_status(
        self,
        booking_id: str,
        status: BookingStatus,
        actual_cost: Optional[float] = None,
    ) -> Booking:
        """Move a booking to *status*, recording *actual_cost* when given.

        Raises:
            BookingNotFoundError: no booking with this id.
        """
        updated = self.store.update_booking_status(booking_id, status, self.clock(), actual_cost)
        if updated is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        logger.info(
            "booking_status_updated",
            booking_id=booking_id,
            status=status.value,
            actual_cost=actual_cost,
        )
        return updated
