from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.entities.cart import CartLine


class CartGatewayPort(ABC):
    @abstractmethod
    async def fetch_lines(self) -> list[CartLine]:
        raise NotImplementedError

    @abstractmethod
    async def add(self, target_id: str, quantity: int = 1) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update_quantity(self, line_id: str, quantity: int) -> None:
        raise NotImplementedError

    @abstractmethod
    async def remove(self, line_id: str) -> None:
        raise NotImplementedError
