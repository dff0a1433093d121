from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from orderflow.application.exceptions import ActionError, LifecycleError, ValidationFailure
from orderflow.application.ports.cart_gateway import CartGatewayPort
from orderflow.domain.entities.cart import CartLine, CartLineView, LineState


@dataclass(frozen=True)
class CartMutationResult:
    outcome: str  # "applied", "removed", "added", "evicted", "ignored", "rejected", "rolled_back", "discarded"
    view: CartLineView | None = None
    error: ActionError | None = None


class CartQuantityController:
    """
    Optimistic quantity control for cart lines.

    One mutation per target at a time; extra taps while one is in flight are
    dropped. The displayed quantity moves first, the authoritative cart is
    re-read before mutating, and any failure puts back the value shown just
    before the tap.
    """

    def __init__(self, gateway: CartGatewayPort) -> None:
        self._gateway = gateway
        self._lines: dict[str, CartLine] = {}
        self._views: dict[str, CartLineView] = {}
        self._in_flight: set[str] = set()
        self._closed = False
        self._logger = logging.getLogger(__name__)

    @property
    def in_cart_ids(self) -> frozenset[str]:
        return frozenset(self._lines)

    def in_cart(self, target_id: str) -> bool:
        return target_id in self._lines

    def view(self, target_id: str) -> CartLineView | None:
        return self._views.get(target_id)

    def quantity_of(self, target_id: str) -> int:
        view = self._views.get(target_id)
        return view.quantity if view else 0

    def is_updating(self, target_id: str) -> bool:
        return target_id in self._in_flight

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def total_price(self) -> float:
        return sum(line.price * line.quantity for line in self._lines.values())

    def close(self) -> None:
        """Stop applying results; in-flight requests finish but are ignored."""
        self._closed = True

    async def sync(self) -> ActionError | None:
        try:
            lines = await self._gateway.fetch_lines()
        except LifecycleError as e:
            self._logger.warning("Cart sync failed", extra={"error": e.message})
            return ActionError.from_exception(e)
        if not self._closed:
            self._apply_lines(lines)
        return None

    async def add(self, target_id: str, quantity: int = 1) -> CartMutationResult:
        if self._closed or quantity < 1 or target_id in self._in_flight:
            return CartMutationResult("ignored", self.view(target_id))

        self._in_flight.add(target_id)
        try:
            await self._gateway.add(target_id, quantity)
            lines = await self._gateway.fetch_lines()
        except LifecycleError as e:
            self._logger.warning("Add to cart failed", extra={"target_id": target_id, "error": e.message})
            return CartMutationResult("rolled_back", self.view(target_id), ActionError.from_exception(e))
        finally:
            self._in_flight.discard(target_id)

        if self._closed:
            return CartMutationResult("discarded")
        self._apply_lines(lines)
        return CartMutationResult("added", self.view(target_id))

    async def set_quantity(
        self,
        target_id: str,
        new_quantity: int,
        max_quantity: int | None = None,
    ) -> CartMutationResult:
        if self._closed or new_quantity < 0 or target_id not in self._lines:
            return CartMutationResult("ignored", self.view(target_id))
        if target_id in self._in_flight:
            self._logger.debug("Quantity change dropped, update in flight", extra={"target_id": target_id})
            return CartMutationResult("ignored", self.view(target_id))

        previous = self._views[target_id]
        if new_quantity == previous.quantity:
            return CartMutationResult("ignored", previous)
        if max_quantity is not None and new_quantity > max_quantity:
            error = ValidationFailure(f"Only {max_quantity} items available in stock")
            return CartMutationResult("rejected", previous, ActionError.from_exception(error))

        self._in_flight.add(target_id)
        self._views[target_id] = CartLineView(
            target_id=target_id,
            quantity=new_quantity,
            state=LineState.optimistic_pending,
            line_id=previous.line_id,
        )

        refreshed: list[CartLine] | None = None
        try:
            current = await self._gateway.fetch_lines()
            line = next((c for c in current if c.target_id == target_id), None)
            if line is not None:
                if new_quantity == 0:
                    await self._gateway.remove(line.id)
                else:
                    await self._gateway.update_quantity(line.id, new_quantity)
                try:
                    refreshed = await self._gateway.fetch_lines()
                except LifecycleError as e:
                    self._logger.warning(
                        "Cart reload after update failed",
                        extra={"target_id": target_id, "error": e.message},
                    )
                    refreshed = None
        except LifecycleError as e:
            if self._closed:
                return CartMutationResult("discarded")
            if target_id not in self._lines:
                # a resync while in flight already dropped the line
                self._views.pop(target_id, None)
                self._logger.info(
                    "Cart line gone before rollback",
                    extra={"target_id": target_id, "error": e.message},
                )
                return CartMutationResult("evicted", None)
            rolled_back = CartLineView(
                target_id=target_id,
                quantity=previous.quantity,
                state=LineState.rolled_back,
                line_id=previous.line_id,
                error=e.message,
            )
            self._views[target_id] = rolled_back
            self._logger.warning(
                "Quantity update rolled back",
                extra={"target_id": target_id, "error": e.message},
            )
            return CartMutationResult("rolled_back", rolled_back, ActionError.from_exception(e))
        finally:
            self._in_flight.discard(target_id)

        if self._closed:
            return CartMutationResult("discarded")

        if line is None:
            # removed elsewhere: treat as zero and drop it from the cart
            self._apply_lines(current)
            self._logger.info("Cart line vanished server-side", extra={"target_id": target_id})
            return CartMutationResult("evicted", None)

        if refreshed is not None:
            self._apply_lines(refreshed)
        elif new_quantity == 0:
            self._lines.pop(target_id, None)
            self._views.pop(target_id, None)
        else:
            self._lines[target_id] = replace(line, quantity=new_quantity)
            self._views[target_id] = CartLineView(target_id=target_id, quantity=new_quantity, line_id=line.id)

        outcome = "removed" if new_quantity == 0 else "applied"
        return CartMutationResult(outcome, self.view(target_id))

    def _apply_lines(self, lines: list[CartLine]) -> None:
        """Replace the cart wholesale, leaving lines with a request in flight as displayed."""
        self._lines = {line.target_id: line for line in lines if line.quantity > 0}
        views: dict[str, CartLineView] = {}
        for target_id, line in self._lines.items():
            if target_id in self._in_flight and target_id in self._views:
                views[target_id] = self._views[target_id]
            else:
                views[target_id] = CartLineView(target_id=target_id, quantity=line.quantity, line_id=line.id)
        self._views = views
