from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.entities.booking import Booking


class BookingGatewayPort(ABC):
    @abstractmethod
    async def get_booking(self, booking_id: str) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def update_status(
        self,
        booking_id: str,
        status: str,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> Booking | None:
        """Admin status change. Returns the updated booking when the server sends it back."""
        raise NotImplementedError

    @abstractmethod
    async def cancel(self, booking_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def list_admin(self, status: str, limit: int = 50) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    async def list_mine(self, status: str | None = None) -> list[Booking]:
        raise NotImplementedError
