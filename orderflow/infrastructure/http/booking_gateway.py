from __future__ import annotations

from typing import Any

from orderflow.application.dto.api_payloads import BookingDTO
from orderflow.application.ports.booking_gateway import BookingGatewayPort
from orderflow.domain.entities.booking import Booking
from orderflow.infrastructure.http.api_client import ApiClient, parse_data


class HttpBookingGateway(BookingGatewayPort):
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def get_booking(self, booking_id: str) -> Booking:
        envelope = await self._api.request("GET", f"booking/{booking_id}")
        return parse_data(BookingDTO, envelope.data).to_entity()

    async def update_status(
        self,
        booking_id: str,
        status: str,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> Booking | None:
        payload: dict[str, Any] = {"status": status}
        if admin_notes:
            payload["adminNotes"] = admin_notes
        if rejection_reason:
            payload["rejectionReason"] = rejection_reason

        envelope = await self._api.request("PATCH", f"booking/{booking_id}/status", json=payload)
        if isinstance(envelope.data, dict) and ("_id" in envelope.data or "id" in envelope.data):
            return parse_data(BookingDTO, envelope.data).to_entity()
        return None

    async def cancel(self, booking_id: str) -> None:
        await self._api.request("PATCH", f"booking/{booking_id}/cancel")

    async def list_admin(self, status: str, limit: int = 50) -> list[Booking]:
        envelope = await self._api.request("GET", "booking/admin/all", params={"status": status, "limit": limit})
        return [parse_data(BookingDTO, item).to_entity() for item in envelope.data or []]

    async def list_mine(self, status: str | None = None) -> list[Booking]:
        params = {"status": status} if status else None
        envelope = await self._api.request("GET", "booking/my-bookings", params=params)
        return [parse_data(BookingDTO, item).to_entity() for item in envelope.data or []]
