from __future__ import annotations

import itertools
from dataclasses import replace

from orderflow.application.exceptions import StateConflict, ValidationFailure
from orderflow.application.ports.cart_gateway import CartGatewayPort
from orderflow.domain.entities.cart import CartLine


class MockCartGateway(CartGatewayPort):
    def __init__(self, lines: list[CartLine] | None = None) -> None:
        self._lines: dict[str, CartLine] = {line.id: line for line in lines or []}
        self._ids = itertools.count(1)
        self.calls: list[tuple[str, str, int | None]] = []

    async def fetch_lines(self) -> list[CartLine]:
        self.calls.append(("fetch", "", None))
        return list(self._lines.values())

    async def add(self, target_id: str, quantity: int = 1) -> None:
        self.calls.append(("add", target_id, quantity))
        for line in self._lines.values():
            if line.target_id == target_id:
                self._lines[line.id] = replace(line, quantity=line.quantity + quantity)
                return
        line_id = f"line_{next(self._ids)}"
        self._lines[line_id] = CartLine(id=line_id, target_id=target_id, quantity=quantity)

    async def update_quantity(self, line_id: str, quantity: int) -> None:
        self.calls.append(("update", line_id, quantity))
        if quantity < 1:
            raise ValidationFailure("Quantity must be at least 1")
        line = self._lines.get(line_id)
        if line is None:
            raise StateConflict("Cart item not found")
        self._lines[line_id] = replace(line, quantity=quantity)

    async def remove(self, line_id: str) -> None:
        self.calls.append(("remove", line_id, None))
        if self._lines.pop(line_id, None) is None:
            raise StateConflict("Cart item not found")

    def drop_target(self, target_id: str) -> None:
        """Simulate another session removing the line."""
        self._lines = {k: v for k, v in self._lines.items() if v.target_id != target_id}

    def mutations(self) -> list[tuple[str, str, int | None]]:
        return [c for c in self.calls if c[0] != "fetch"]
