from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Courier:
    name: str | None = None
    phone: str | None = None
    photo: str | None = None


@dataclass(frozen=True)
class DeliveryPricing:
    distance: float | None = None  # km
    final_price: float | None = None


@dataclass(frozen=True)
class DeliveryRequest:
    status: str
    courier: Courier | None = None
    pricing: DeliveryPricing | None = None
    tracking_url: str | None = None
    estimated_delivery_time: datetime | None = None
    provider_order_id: str | None = None
    pickup_address: str | None = None
    drop_address: str | None = None
