"""
Finite status sets shared by the booking and delivery state machines,
plus the per-status display metadata the view models hand out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    rejected = "rejected"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class DeliveryStatus(str, Enum):
    pending_admin_approval = "pending_admin_approval"
    price_calculated = "price_calculated"
    creating = "creating"
    new = "new"
    available = "available"
    active = "active"
    courier_assigned = "courier_assigned"
    pickup_arrived = "pickup_arrived"
    picked_up = "picked_up"
    delivering = "delivering"
    delivered = "delivered"
    cancelled = "cancelled"
    failed = "failed"


BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    BookingStatus.pending.value: frozenset({BookingStatus.confirmed.value, BookingStatus.rejected.value}),
    # confirmed -> completed is the admin "Mark Complete" action
    BookingStatus.confirmed.value: frozenset(
        {BookingStatus.in_progress.value, BookingStatus.cancelled.value, BookingStatus.completed.value}
    ),
    BookingStatus.in_progress.value: frozenset({BookingStatus.completed.value}),
    BookingStatus.rejected.value: frozenset(),
    BookingStatus.completed.value: frozenset(),
    BookingStatus.cancelled.value: frozenset(),
}

BOOKING_TERMINAL = frozenset(
    {BookingStatus.rejected.value, BookingStatus.completed.value, BookingStatus.cancelled.value}
)
BOOKING_CANCELLABLE = frozenset({BookingStatus.pending.value, BookingStatus.confirmed.value})


DELIVERY_PROGRESS_ORDER: tuple[str, ...] = (
    DeliveryStatus.new.value,
    DeliveryStatus.available.value,
    DeliveryStatus.active.value,
    DeliveryStatus.courier_assigned.value,
    DeliveryStatus.pickup_arrived.value,
    DeliveryStatus.picked_up.value,
    DeliveryStatus.delivering.value,
    DeliveryStatus.delivered.value,
)

DELIVERY_PRE_FLIGHT = frozenset(
    {
        DeliveryStatus.pending_admin_approval.value,
        DeliveryStatus.price_calculated.value,
        DeliveryStatus.creating.value,
    }
)
DELIVERY_HALTED = frozenset({DeliveryStatus.cancelled.value, DeliveryStatus.failed.value})
DELIVERY_TERMINAL = DELIVERY_HALTED | {DeliveryStatus.delivered.value}


@dataclass(frozen=True)
class StatusDisplay:
    label: str
    message: str
    color: str
    icon: str


@dataclass(frozen=True)
class ProgressStepDef:
    key: str
    label: str


# Compact track shown to customers; indices still come from DELIVERY_PROGRESS_ORDER.
DELIVERY_DISPLAY_STEPS: tuple[ProgressStepDef, ...] = (
    ProgressStepDef(DeliveryStatus.new.value, "Created"),
    ProgressStepDef(DeliveryStatus.courier_assigned.value, "Courier Assigned"),
    ProgressStepDef(DeliveryStatus.picked_up.value, "Picked Up"),
    ProgressStepDef(DeliveryStatus.delivering.value, "Delivering"),
    ProgressStepDef(DeliveryStatus.delivered.value, "Delivered"),
)


BOOKING_DISPLAY: dict[str, StatusDisplay] = {
    "pending": StatusDisplay("Pending", "Waiting for confirmation", "#F39C12", "time-outline"),
    "confirmed": StatusDisplay("Confirmed", "Your booking is confirmed", "#27AE60", "checkmark-circle-outline"),
    "rejected": StatusDisplay("Rejected", "Your booking was rejected", "#E74C3C", "close-circle-outline"),
    "in_progress": StatusDisplay("In Progress", "Service has started", "#3498DB", "play-circle-outline"),
    "completed": StatusDisplay("Completed", "Service completed", "#8E44AD", "checkmark-done-circle-outline"),
    "cancelled": StatusDisplay("Cancelled", "Booking was cancelled", "#95A5A6", "ban-outline"),
}
UNKNOWN_BOOKING_DISPLAY = StatusDisplay("Unknown", "", "#7F8C8D", "help-circle-outline")


DELIVERY_DISPLAY: dict[str, StatusDisplay] = {
    "pending_admin_approval": StatusDisplay(
        "Pending Admin Approval", "Your order is being reviewed by our team", "#FFA500", "time-outline"
    ),
    "price_calculated": StatusDisplay(
        "Price Calculated", "Delivery price calculated, awaiting confirmation", "#2196F3", "calculator-outline"
    ),
    "creating": StatusDisplay("Creating", "Creating delivery request...", "#9C27B0", "hourglass-outline"),
    "new": StatusDisplay("New", "Delivery request created, finding courier", "#4CAF50", "checkmark-circle-outline"),
    "available": StatusDisplay("Available", "Looking for available courier", "#00BCD4", "radio-button-on-outline"),
    "active": StatusDisplay("Active", "Courier assigned and on the way to pickup", "#FF5722", "play-circle-outline"),
    "courier_assigned": StatusDisplay(
        "Courier Assigned", "Courier assigned to your delivery", "#673AB7", "person-circle-outline"
    ),
    "pickup_arrived": StatusDisplay(
        "Pickup Arrived", "Courier has arrived at pickup location", "#3F51B5", "location-outline"
    ),
    "picked_up": StatusDisplay("Picked Up", "Your order has been picked up", "#009688", "checkmark-done-outline"),
    "delivering": StatusDisplay("Delivering", "Your order is on the way!", "#FF9800", "bicycle-outline"),
    "delivered": StatusDisplay("Delivered", "Successfully delivered!", "#4CAF50", "checkmark-done-circle"),
    "cancelled": StatusDisplay("Cancelled", "Delivery was cancelled", "#F44336", "close-circle-outline"),
    "failed": StatusDisplay("Failed", "Delivery failed, please contact support", "#F44336", "alert-circle-outline"),
}
UNKNOWN_DELIVERY_DISPLAY = StatusDisplay("Processing", "Processing your delivery...", "#666", "help-circle-outline")


def booking_display(status: str) -> StatusDisplay:
    return BOOKING_DISPLAY.get(status, UNKNOWN_BOOKING_DISPLAY)


def delivery_display(status: str) -> StatusDisplay:
    return DELIVERY_DISPLAY.get(status, UNKNOWN_DELIVERY_DISPLAY)


def can_transition(current: str, target: str) -> bool:
    return target in BOOKING_TRANSITIONS.get(current, frozenset())


def progress_index(status: str | None) -> int:
    """Position of `status` in the delivery progress order, -1 when outside it."""
    if status is None:
        return -1
    try:
        return DELIVERY_PROGRESS_ORDER.index(status)
    except ValueError:
        return -1
