from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from orderflow.application.exceptions import ActionError, LifecycleError, StateConflict, ValidationFailure
from orderflow.application.ports.booking_gateway import BookingGatewayPort
from orderflow.application.utils.clock import as_utc, utc_now
from orderflow.domain.entities.booking import Booking, OtpDisplay
from orderflow.domain.status_taxonomy import BookingStatus, can_transition


@dataclass(frozen=True)
class BookingActionResult:
    action: str
    booking: Booking | None
    error: ActionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BookingListResult:
    bookings: list[Booking] = field(default_factory=list)
    error: ActionError | None = None


class BookingLifecycle:
    """
    Client side of the booking state machine.

    Transitions are checked locally against the cached booking before any
    request goes out; the server stays the authority and every booking it
    returns replaces the cached one wholesale. Failures never raise out of
    this class, they come back on the result.
    """

    def __init__(
        self,
        gateway: BookingGatewayPort,
        otp_window: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._gateway = gateway
        self._otp_window = otp_window
        self._clock = clock
        self._bookings: dict[str, Booking] = {}
        self._in_flight: set[str] = set()
        self._logger = logging.getLogger(__name__)

    def cached(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def is_busy(self, booking_id: str) -> bool:
        return booking_id in self._in_flight

    def apply_snapshot(self, booking: Booking) -> None:
        if booking.status == BookingStatus.in_progress.value and booking.otp_verified_at is None:
            self._logger.warning(
                "Booking in progress without OTP verification",
                extra={"booking_id": booking.id, "status": booking.status},
            )
        self._bookings[booking.id] = booking

    async def refresh(self, booking_id: str) -> BookingActionResult:
        """Re-read the booking; this is how the server-side OTP start becomes visible."""
        try:
            booking = await self._gateway.get_booking(booking_id)
        except LifecycleError as e:
            self._logger.warning("Booking refresh failed", extra={"booking_id": booking_id, "error": e.message})
            return BookingActionResult("failed", self.cached(booking_id), ActionError.from_exception(e))
        self.apply_snapshot(booking)
        return BookingActionResult("loaded", booking)

    async def request_confirmation(self, booking_id: str, admin_notes: str | None = None) -> BookingActionResult:
        return await self._transition(
            booking_id,
            BookingStatus.confirmed.value,
            lambda: self._gateway.update_status(
                booking_id,
                BookingStatus.confirmed.value,
                admin_notes=_clean(admin_notes),
            ),
        )

    async def request_rejection(
        self,
        booking_id: str,
        reason: str | None,
        admin_notes: str | None = None,
    ) -> BookingActionResult:
        if not reason or not reason.strip():
            return self._blocked(booking_id, ValidationFailure("Please provide a reason for rejection"))
        return await self._transition(
            booking_id,
            BookingStatus.rejected.value,
            lambda: self._gateway.update_status(
                booking_id,
                BookingStatus.rejected.value,
                admin_notes=_clean(admin_notes),
                rejection_reason=reason.strip(),
            ),
        )

    async def cancel(self, booking_id: str, acknowledged: bool = False) -> BookingActionResult:
        """Customer cancellation; nothing is sent until the user has acknowledged it."""
        current = self.cached(booking_id)
        if current is not None and not can_transition(current.status, BookingStatus.cancelled.value):
            return self._blocked(booking_id, _conflict(current, BookingStatus.cancelled.value))
        if not acknowledged:
            return BookingActionResult("awaiting_acknowledgment", current)

        async def _cancel() -> Booking | None:
            await self._gateway.cancel(booking_id)
            return None

        return await self._transition(booking_id, BookingStatus.cancelled.value, _cancel)

    async def mark_complete(self, booking_id: str) -> BookingActionResult:
        return await self._transition(
            booking_id,
            BookingStatus.completed.value,
            lambda: self._gateway.update_status(booking_id, BookingStatus.completed.value),
        )

    def otp_display(self, booking_id: str) -> OtpDisplay:
        booking = self.cached(booking_id)
        if booking is None:
            return OtpDisplay(visible=False)

        if booking.status == BookingStatus.in_progress.value:
            return OtpDisplay(visible=False, verified_at=booking.otp_verified_at)

        if booking.status != BookingStatus.confirmed.value or not booking.service_otp:
            return OtpDisplay(visible=False)

        valid_until = None
        expired = False
        if booking.otp_generated_at is not None:
            valid_until = as_utc(booking.otp_generated_at) + self._otp_window
            expired = as_utc(self._clock()) >= valid_until

        return OtpDisplay(
            visible=True,
            code=booking.service_otp,
            generated_at=booking.otp_generated_at,
            valid_until=valid_until,
            expired=expired,
        )

    async def list_for_admin(self, status: str, limit: int = 50) -> BookingListResult:
        try:
            bookings = await self._gateway.list_admin(status, limit=limit)
        except LifecycleError as e:
            self._logger.warning("Admin booking list failed", extra={"status": status, "error": e.message})
            return BookingListResult(error=ActionError.from_exception(e))
        for booking in bookings:
            self.apply_snapshot(booking)
        return BookingListResult(bookings=bookings)

    async def list_mine(self, status: str | None = None) -> BookingListResult:
        try:
            bookings = await self._gateway.list_mine(None if status == "all" else status)
        except LifecycleError as e:
            self._logger.warning("Booking list failed", extra={"status": status, "error": e.message})
            return BookingListResult(error=ActionError.from_exception(e))
        # product-only orders share the endpoint
        bookings = [b for b in bookings if b.service_count > 0]
        for booking in bookings:
            self.apply_snapshot(booking)
        return BookingListResult(bookings=bookings)

    async def _transition(
        self,
        booking_id: str,
        target: str,
        call: Callable[[], Awaitable[Booking | None]],
    ) -> BookingActionResult:
        current = self.cached(booking_id)
        if current is not None and not can_transition(current.status, target):
            return self._blocked(booking_id, _conflict(current, target))
        if booking_id in self._in_flight:
            return self._blocked(booking_id, StateConflict("Another action is already in progress for this booking"))

        self._in_flight.add(booking_id)
        try:
            updated = await call()
        except LifecycleError as e:
            self._logger.warning(
                "Booking action failed",
                extra={"booking_id": booking_id, "status": target, "error": e.message},
            )
            return BookingActionResult("failed", current, ActionError.from_exception(e))
        finally:
            self._in_flight.discard(booking_id)

        self._logger.info("Booking action applied", extra={"booking_id": booking_id, "status": target})

        if updated is None:
            try:
                updated = await self._gateway.get_booking(booking_id)
            except LifecycleError as e:
                # the action went through; drop the stale copy rather than patch it locally
                self._logger.warning(
                    "Booking reload after action failed",
                    extra={"booking_id": booking_id, "error": e.message},
                )
                self._bookings.pop(booking_id, None)
                return BookingActionResult(target, None)

        self.apply_snapshot(updated)
        return BookingActionResult(target, updated)

    def _blocked(self, booking_id: str, error: LifecycleError) -> BookingActionResult:
        self._logger.info("Booking action blocked", extra={"booking_id": booking_id, "reason": error.message})
        return BookingActionResult("blocked", self.cached(booking_id), ActionError.from_exception(error))


def _conflict(booking: Booking, target: str) -> StateConflict:
    return StateConflict(f"Booking cannot move from {booking.status} to {target}")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
