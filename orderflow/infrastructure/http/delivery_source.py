from __future__ import annotations

from orderflow.application.dto.api_payloads import DeliveryRequestDTO
from orderflow.application.ports.delivery_source import DeliverySourcePort
from orderflow.domain.entities.delivery import DeliveryRequest
from orderflow.infrastructure.http.api_client import ApiClient, parse_data


class HttpDeliverySource(DeliverySourcePort):
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def fetch_latest(self, order_id: str) -> DeliveryRequest | None:
        envelope = await self._api.request("GET", f"delivery/status/{order_id}")
        if not envelope.data:
            return None
        return parse_data(DeliveryRequestDTO, envelope.data).to_entity()
