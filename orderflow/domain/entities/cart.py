from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LineState(str, Enum):
    confirmed = "confirmed"
    optimistic_pending = "optimistic_pending"
    rolled_back = "rolled_back"


@dataclass(frozen=True)
class CartLine:
    id: str
    target_id: str  # product or service reference
    quantity: int
    price: float = 0.0


@dataclass(frozen=True)
class CartLineView:
    target_id: str
    quantity: int
    state: LineState = LineState.confirmed
    line_id: str | None = None
    error: str | None = None
