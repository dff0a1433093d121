from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.entities.offer import PricedItem


class OfferCatalogPort(ABC):
    @abstractmethod
    async def list_offers(self, kind: str, limit: int = 100) -> list[PricedItem]:
        """Items of `kind` ("product" | "service") flagged with an active offer."""
        raise NotImplementedError
