from __future__ import annotations

from orderflow.application.dto.api_payloads import CatalogItemDTO
from orderflow.application.ports.catalog import OfferCatalogPort
from orderflow.domain.entities.offer import PricedItem
from orderflow.infrastructure.http.api_client import ApiClient, parse_data

_PATHS = {"product": "products", "service": "services"}


class HttpOfferCatalog(OfferCatalogPort):
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list_offers(self, kind: str, limit: int = 100) -> list[PricedItem]:
        params = {
            "limit": limit,
            "sortBy": "offerDiscount",
            "sortOrder": "desc",
            "offerActive": "true",
        }
        envelope = await self._api.request("GET", _PATHS[kind], params=params)
        return [parse_data(CatalogItemDTO, item).to_entity(kind) for item in envelope.data or []]
