"""
Tests for the booking lifecycle: local transition checks, cancel
acknowledgment, rejection reasons and the OTP display window.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from orderflow.application.exceptions import TransientFailure
from orderflow.application.use_cases.booking_lifecycle import BookingLifecycle
from orderflow.domain.entities.booking import Booking
from orderflow.domain.status_taxonomy import BookingStatus, can_transition
from orderflow.infrastructure.mock.mock_booking_gateway import MockBookingGateway

NOW = datetime(2026, 5, 10, 9, 0, tzinfo=timezone.utc)


def _clock() -> datetime:
    return NOW


def _lifecycle(*bookings: Booking) -> tuple[BookingLifecycle, MockBookingGateway]:
    gateway = MockBookingGateway(clock=_clock)
    for booking in bookings:
        gateway.seed(booking)
    return BookingLifecycle(gateway, clock=_clock), gateway


class FlakyBookingGateway(MockBookingGateway):
    async def update_status(self, booking_id, status, admin_notes=None, rejection_reason=None):
        self.requests.append(("status", booking_id))
        raise TransientFailure("Network error, please try again")


@pytest.mark.asyncio
async def test_confirm_pending_booking_generates_otp():
    lifecycle, _ = _lifecycle(Booking(id="b1", status="pending"))
    await lifecycle.refresh("b1")

    result = await lifecycle.request_confirmation("b1", admin_notes="  bring towels ")

    assert result.ok
    assert result.action == "confirmed"
    assert result.booking.status == "confirmed"
    assert len(result.booking.service_otp) == 6
    assert result.booking.confirmed_at == NOW
    assert result.booking.admin_notes == "bring towels"
    assert lifecycle.cached("b1") is result.booking


@pytest.mark.asyncio
async def test_reject_without_reason_sends_nothing():
    lifecycle, gateway = _lifecycle(Booking(id="b1", status="pending"))
    await lifecycle.refresh("b1")
    gateway.requests.clear()

    for reason in (None, "", "   "):
        result = await lifecycle.request_rejection("b1", reason)
        assert result.action == "blocked"
        assert result.error.kind == "validation"
        assert result.error.message == "Please provide a reason for rejection"

    assert gateway.requests == []
    assert lifecycle.cached("b1").status == "pending"


@pytest.mark.asyncio
async def test_reject_with_reason_records_it():
    lifecycle, _ = _lifecycle(Booking(id="b1", status="pending"))
    await lifecycle.refresh("b1")

    result = await lifecycle.request_rejection("b1", "  Fully booked that day ")

    assert result.ok
    assert result.booking.status == "rejected"
    assert result.booking.rejection_reason == "Fully booked that day"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [s.value for s in BookingStatus])
async def test_disallowed_transitions_leave_booking_untouched(status):
    lifecycle, gateway = _lifecycle(Booking(id="b1", status=status))
    await lifecycle.refresh("b1")
    before = lifecycle.cached("b1")
    gateway.requests.clear()

    attempts = {
        "confirmed": lambda: lifecycle.request_confirmation("b1"),
        "rejected": lambda: lifecycle.request_rejection("b1", "No staff"),
        "cancelled": lambda: lifecycle.cancel("b1", acknowledged=True),
        "completed": lambda: lifecycle.mark_complete("b1"),
    }
    for target, attempt in attempts.items():
        if can_transition(status, target):
            continue
        result = await attempt()
        assert result.action == "blocked"
        assert result.error.kind == "conflict"
        assert lifecycle.cached("b1") is before

    assert gateway.requests == []


@pytest.mark.asyncio
async def test_cancel_needs_acknowledgment_first():
    lifecycle, gateway = _lifecycle(Booking(id="b1", status="confirmed", service_otp="123456"))
    await lifecycle.refresh("b1")
    gateway.requests.clear()

    pending = await lifecycle.cancel("b1")
    assert pending.action == "awaiting_acknowledgment"
    assert pending.error is None
    assert gateway.requests == []

    result = await lifecycle.cancel("b1", acknowledged=True)
    assert result.ok
    assert result.action == "cancelled"
    assert result.booking.status == "cancelled"
    assert result.booking.cancelled_at == NOW
    # the cancel endpoint returns nothing, so the booking is re-read
    assert gateway.requests == [("cancel", "b1"), ("get", "b1")]


@pytest.mark.asyncio
async def test_cancel_in_progress_is_blocked_without_asking():
    lifecycle, gateway = _lifecycle(Booking(id="b1", status="in_progress", otp_verified_at=NOW))
    await lifecycle.refresh("b1")

    result = await lifecycle.cancel("b1")

    assert result.action == "blocked"
    assert result.error.kind == "conflict"
    assert ("cancel", "b1") not in gateway.requests


@pytest.mark.asyncio
async def test_server_conflict_is_reported_once_without_retry():
    # client never loaded the booking, so only the server can refuse
    lifecycle, gateway = _lifecycle(Booking(id="b1", status="completed"))

    result = await lifecycle.cancel("b1", acknowledged=True)

    assert result.action == "failed"
    assert result.error.kind == "conflict"
    assert result.error.retryable is False
    assert gateway.requests.count(("cancel", "b1")) == 1


@pytest.mark.asyncio
async def test_transient_failure_keeps_cached_booking():
    gateway = FlakyBookingGateway(clock=_clock)
    gateway.seed(Booking(id="b1", status="pending"))
    lifecycle = BookingLifecycle(gateway, clock=_clock)
    await lifecycle.refresh("b1")
    before = lifecycle.cached("b1")

    result = await lifecycle.request_confirmation("b1")

    assert result.action == "failed"
    assert result.error.kind == "transient"
    assert result.error.retryable is True
    assert result.booking is before
    assert lifecycle.cached("b1") is before
    assert lifecycle.is_busy("b1") is False


@pytest.mark.asyncio
async def test_otp_visible_only_while_confirmed():
    lifecycle, gateway = _lifecycle(Booking(id="b1", status="pending"))
    await lifecycle.refresh("b1")
    assert lifecycle.otp_display("b1").visible is False

    confirmed = await lifecycle.request_confirmation("b1")
    otp = lifecycle.otp_display("b1")
    assert otp.visible is True
    assert otp.code == confirmed.booking.service_otp
    assert otp.valid_until == NOW + timedelta(hours=24)
    assert otp.expired is False

    # the professional enters the code on their device; the customer only sees it on refresh
    gateway.verify_otp("b1", otp.code)
    assert lifecycle.otp_display("b1").visible is True
    await lifecycle.refresh("b1")

    started = lifecycle.otp_display("b1")
    assert lifecycle.cached("b1").status == "in_progress"
    assert started.visible is False
    assert started.code is None
    assert started.verified_at == NOW


@pytest.mark.asyncio
async def test_otp_past_window_is_flagged_but_still_shown():
    booking = Booking(
        id="b1",
        status="confirmed",
        service_otp="004211",
        otp_generated_at=NOW - timedelta(hours=25),
    )
    lifecycle, _ = _lifecycle(booking)
    await lifecycle.refresh("b1")

    otp = lifecycle.otp_display("b1")

    assert otp.visible is True
    assert otp.code == "004211"
    assert otp.expired is True


def test_otp_hidden_for_unknown_booking():
    lifecycle, _ = _lifecycle()
    assert lifecycle.otp_display("nope").visible is False


@pytest.mark.asyncio
async def test_mark_complete_from_confirmed_and_in_progress():
    lifecycle, _ = _lifecycle(
        Booking(id="b1", status="confirmed", service_otp="111111"),
        Booking(id="b2", status="in_progress", otp_verified_at=NOW),
    )
    await lifecycle.refresh("b1")
    await lifecycle.refresh("b2")

    first = await lifecycle.mark_complete("b1")
    second = await lifecycle.mark_complete("b2")

    assert first.booking.status == "completed"
    assert second.booking.status == "completed"
    assert second.booking.completed_at == NOW


@pytest.mark.asyncio
async def test_admin_list_and_customer_list():
    lifecycle, _ = _lifecycle(
        Booking(id="b1", status="pending", service_count=2),
        Booking(id="b2", status="pending", service_count=0),
        Booking(id="b3", status="confirmed", service_count=1),
    )

    admin = await lifecycle.list_for_admin("pending")
    assert [b.id for b in admin.bookings] == ["b1", "b2"]

    mine = await lifecycle.list_mine("all")
    assert [b.id for b in mine.bookings] == ["b1", "b3"]
    assert lifecycle.cached("b3").status == "confirmed"


@pytest.mark.asyncio
async def test_refresh_of_missing_booking_reports_error():
    lifecycle, _ = _lifecycle()

    result = await lifecycle.refresh("ghost")

    assert result.action == "failed"
    assert result.booking is None
    assert result.error.message == "Booking not found"
