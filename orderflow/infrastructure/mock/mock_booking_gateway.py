from __future__ import annotations

import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import Callable

from orderflow.application.exceptions import StateConflict
from orderflow.application.ports.booking_gateway import BookingGatewayPort
from orderflow.application.utils.clock import utc_now
from orderflow.domain.entities.booking import Booking
from orderflow.domain.status_taxonomy import BookingStatus, can_transition


class MockBookingGateway(BookingGatewayPort):
    """In-memory stand-in for the booking backend; it enforces the same state machine."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._bookings: dict[str, Booking] = {}
        self._clock = clock
        self.requests: list[tuple[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def seed(self, booking: Booking) -> None:
        self._bookings[booking.id] = booking

    async def get_booking(self, booking_id: str) -> Booking:
        self.requests.append(("get", booking_id))
        return self._require(booking_id)

    async def update_status(
        self,
        booking_id: str,
        status: str,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> Booking | None:
        self.requests.append(("status", booking_id))
        booking = self._require(booking_id)
        if not can_transition(booking.status, status) or status == BookingStatus.in_progress.value:
            raise StateConflict(f"Cannot change booking from {booking.status} to {status}")

        now = self._clock()
        changes: dict[str, object] = {"status": status, "admin_notes": admin_notes or booking.admin_notes}
        if status == BookingStatus.confirmed.value:
            changes.update(confirmed_at=now, service_otp=f"{random.randint(0, 999999):06d}", otp_generated_at=now)
        elif status == BookingStatus.rejected.value:
            changes.update(rejection_reason=rejection_reason)
        elif status == BookingStatus.completed.value:
            changes.update(completed_at=now)

        updated = replace(booking, **changes)
        self._bookings[booking_id] = updated
        self._logger.info("Mock booking status changed", extra={"booking_id": booking_id, "status": status})
        return updated

    async def cancel(self, booking_id: str) -> None:
        self.requests.append(("cancel", booking_id))
        booking = self._require(booking_id)
        if not can_transition(booking.status, BookingStatus.cancelled.value):
            raise StateConflict("Booking can no longer be cancelled")
        self._bookings[booking_id] = replace(
            booking, status=BookingStatus.cancelled.value, cancelled_at=self._clock()
        )

    async def list_admin(self, status: str, limit: int = 50) -> list[Booking]:
        self.requests.append(("list_admin", status))
        return [b for b in self._bookings.values() if b.status == status][:limit]

    async def list_mine(self, status: str | None = None) -> list[Booking]:
        self.requests.append(("list_mine", status or "all"))
        return [b for b in self._bookings.values() if status is None or b.status == status]

    def verify_otp(self, booking_id: str, otp: str) -> Booking:
        """What the professional's device does server-side when the customer reads out the code."""
        booking = self._require(booking_id)
        if booking.status != BookingStatus.confirmed.value or booking.service_otp != otp:
            raise StateConflict("Invalid OTP")
        now = self._clock()
        updated = replace(
            booking,
            status=BookingStatus.in_progress.value,
            otp_verified_at=now,
            service_started_at=now,
        )
        self._bookings[booking_id] = updated
        return updated

    def _require(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise StateConflict("Booking not found")
        return booking
