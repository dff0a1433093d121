from __future__ import annotations

from orderflow.application.ports.catalog import OfferCatalogPort
from orderflow.domain.entities.offer import PricedItem


class MockOfferCatalog(OfferCatalogPort):
    def __init__(self, items: list[PricedItem] | None = None) -> None:
        self._items = list(items or [])

    async def list_offers(self, kind: str, limit: int = 100) -> list[PricedItem]:
        return [item for item in self._items if item.kind == kind and item.offer.active][:limit]
