from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OfferDescriptor:
    active: bool = False
    discount: int = 0  # percent, 0-90
    end_date: datetime | None = None
    start_date: datetime | None = None
    title: str | None = None


@dataclass(frozen=True)
class PricedItem:
    id: str
    kind: str  # "product" | "service"
    name: str
    price: float
    offer: OfferDescriptor = OfferDescriptor()
    image_url: str | None = None
    featured: bool = False


@dataclass(frozen=True)
class OfferQuote:
    item: PricedItem
    valid: bool
    offer_price: int
    savings: float
    time_left: str
