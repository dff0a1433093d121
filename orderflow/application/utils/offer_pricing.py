from __future__ import annotations

import math
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from orderflow.application.utils.clock import as_utc
from orderflow.domain.entities.offer import OfferDescriptor, OfferQuote, PricedItem

MAX_DISCOUNT = 90


def is_valid(offer: OfferDescriptor, now: datetime) -> bool:
    """An offer counts only while active and not past its end date."""
    if not offer.active:
        return False
    if offer.end_date is None:
        return True
    return as_utc(offer.end_date) > as_utc(now)


def offer_price(base: float, discount: int) -> int:
    if base < 0:
        raise ValueError(f"price must be non-negative, got {base}")
    if not 0 <= discount <= MAX_DISCOUNT:
        raise ValueError(f"discount must be between 0 and {MAX_DISCOUNT}, got {discount}")
    discounted = Decimal(str(base)) * (Decimal(100) - Decimal(discount)) / Decimal(100)
    return max(int(discounted.quantize(Decimal(1), rounding=ROUND_HALF_UP)), 0)


def savings(base: float, discount: int) -> float:
    return base - offer_price(base, discount)


def time_remaining(end_date: datetime | None, now: datetime) -> str:
    """Human countdown for an offer. Rounds up so a deal never expires unannounced."""
    if end_date is None:
        return "No expiry"

    remaining = as_utc(end_date) - as_utc(now)
    if remaining <= timedelta(0):
        return "Expiring soon"

    if remaining < timedelta(days=1):
        hours = math.ceil(remaining.total_seconds() / 3600)
        if hours <= 1:
            return "1 hour left"
        return f"{hours} hours left"

    days = math.ceil(remaining.total_seconds() / 86400)
    if days == 1:
        return "1 day left"
    return f"{days} days left"


def quote(item: PricedItem, now: datetime) -> OfferQuote:
    """Price one item at `now`. Discounts outside 0..MAX_DISCOUNT are clamped; a negative price still raises."""
    valid = is_valid(item.offer, now)
    discount = min(max(item.offer.discount, 0), MAX_DISCOUNT) if valid else 0
    return OfferQuote(
        item=item,
        valid=valid,
        offer_price=offer_price(item.price, discount),
        savings=savings(item.price, discount),
        time_left=time_remaining(item.offer.end_date, now) if valid else "Expired",
    )
