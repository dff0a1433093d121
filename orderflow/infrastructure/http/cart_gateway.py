from __future__ import annotations

from orderflow.application.dto.api_payloads import CartDTO
from orderflow.application.ports.cart_gateway import CartGatewayPort
from orderflow.domain.entities.cart import CartLine
from orderflow.infrastructure.http.api_client import ApiClient, parse_data


class HttpCartGateway(CartGatewayPort):
    def __init__(self, api: ApiClient, target_field: str = "serviceId") -> None:
        self._api = api
        self._target_field = target_field

    async def fetch_lines(self) -> list[CartLine]:
        envelope = await self._api.request("GET", "cart")
        return parse_data(CartDTO, envelope.data or {}).to_lines()

    async def add(self, target_id: str, quantity: int = 1) -> None:
        await self._api.request("POST", "cart/add", json={self._target_field: target_id, "quantity": quantity})

    async def update_quantity(self, line_id: str, quantity: int) -> None:
        await self._api.request("PATCH", f"cart/{line_id}", json={"quantity": quantity})

    async def remove(self, line_id: str) -> None:
        await self._api.request("DELETE", f"cart/{line_id}")
