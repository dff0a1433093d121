"""
Tests for the delivery progress track and phase derivation.
"""

from __future__ import annotations

import pytest

from orderflow.application.utils.delivery_progress import compute_progress, delivery_phase, shows_progress_bar
from orderflow.domain.entities.delivery import DeliveryRequest
from orderflow.domain.status_taxonomy import (
    DELIVERY_DISPLAY_STEPS,
    DELIVERY_HALTED,
    DELIVERY_PRE_FLIGHT,
    DELIVERY_PROGRESS_ORDER,
    progress_index,
)


@pytest.mark.parametrize("status", DELIVERY_PROGRESS_ORDER)
def test_steps_before_status_completed_and_status_active(status):
    current = DELIVERY_PROGRESS_ORDER.index(status)
    steps = compute_progress(status)
    assert [s.key for s in steps] == list(DELIVERY_PROGRESS_ORDER)
    for index, step in enumerate(steps):
        if index < current:
            assert step.state == "completed"
        elif index == current:
            assert step.state == "active"
        else:
            assert step.state == "pending"


def test_picked_up_track():
    steps = {s.key: s.state for s in compute_progress("picked_up")}
    completed = {k for k, v in steps.items() if v == "completed"}
    assert completed == {"new", "available", "active", "courier_assigned", "pickup_arrived"}
    assert steps["picked_up"] == "active"
    assert {k for k, v in steps.items() if v == "pending"} == {"delivering", "delivered"}


def test_statuses_outside_order_leave_every_step_pending():
    for status in sorted(DELIVERY_PRE_FLIGHT | DELIVERY_HALTED) + ["teleporting", None]:
        assert progress_index(status) == -1
        assert all(step.state == "pending" for step in compute_progress(status))


def test_skipped_statuses_still_mark_earlier_steps_completed():
    # server jumped straight from "new" to "delivering"
    first = compute_progress("new")
    second = compute_progress("delivering")
    assert [s.state for s in first][:2] == ["active", "pending"]
    assert all(s.state == "completed" for s in second[:6])


def test_compact_display_track():
    steps = compute_progress("pickup_arrived", DELIVERY_DISPLAY_STEPS)
    assert [s.label for s in steps] == ["Created", "Courier Assigned", "Picked Up", "Delivering", "Delivered"]
    assert [s.state for s in steps] == ["completed", "completed", "pending", "pending", "pending"]


def test_delivery_phases():
    assert delivery_phase(None) == "not_assigned"
    assert delivery_phase(DeliveryRequest(status="price_calculated")) == "pre_flight"
    assert delivery_phase(DeliveryRequest(status="failed")) == "halted"
    assert delivery_phase(DeliveryRequest(status="cancelled")) == "halted"
    assert delivery_phase(DeliveryRequest(status="delivered")) == "delivered"
    assert delivery_phase(DeliveryRequest(status="available")) == "in_transit"
    assert delivery_phase(DeliveryRequest(status="teleporting")) == "unknown"


def test_progress_bar_hidden_for_pre_flight_and_halted():
    assert shows_progress_bar(DeliveryRequest(status="pending_admin_approval")) is False
    assert shows_progress_bar(DeliveryRequest(status="failed")) is False
    assert shows_progress_bar(DeliveryRequest(status="delivering")) is True
    assert shows_progress_bar(None) is False
