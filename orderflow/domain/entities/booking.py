from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Booking:
    id: str
    status: str  # "pending", "confirmed", "rejected", "in_progress", "completed", "cancelled"
    service_otp: str | None = None
    otp_generated_at: datetime | None = None
    otp_verified_at: datetime | None = None
    service_started_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    rejection_reason: str | None = None
    admin_notes: str | None = None
    professional_id: str | None = None  # assigned operator
    total_amount: float | None = None
    service_count: int = 0
    created_at: datetime | None = None


@dataclass(frozen=True)
class OtpDisplay:
    """What the customer sees for the service start code.

    `expired` is informational only; the server is the one that verifies.
    """

    visible: bool
    code: str | None = None
    generated_at: datetime | None = None
    valid_until: datetime | None = None
    expired: bool = False
    verified_at: datetime | None = None
