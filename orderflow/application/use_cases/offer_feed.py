from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from orderflow.application.exceptions import ActionError, LifecycleError
from orderflow.application.ports.catalog import OfferCatalogPort
from orderflow.application.utils.clock import utc_now
from orderflow.application.utils.offer_pricing import MAX_DISCOUNT, is_valid, quote
from orderflow.domain.entities.offer import OfferQuote, PricedItem

KINDS = ("product", "service")


@dataclass(frozen=True)
class OfferFeedResult:
    quotes: list[OfferQuote] = field(default_factory=list)
    errors: list[ActionError] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.quotes)

    @property
    def product_count(self) -> int:
        return sum(1 for q in self.quotes if q.item.kind == "product")

    @property
    def service_count(self) -> int:
        return sum(1 for q in self.quotes if q.item.kind == "service")

    def filtered(self, tab: str = "all") -> list[OfferQuote]:
        if tab == "products":
            return [q for q in self.quotes if q.item.kind == "product"]
        if tab == "services":
            return [q for q in self.quotes if q.item.kind == "service"]
        return list(self.quotes)


class OfferFeed:
    def __init__(
        self,
        catalog: OfferCatalogPort,
        clock: Callable[[], datetime] = utc_now,
        limit: int = 100,
    ) -> None:
        self._catalog = catalog
        self._clock = clock
        self._limit = limit
        self._logger = logging.getLogger(__name__)

    async def load(self) -> OfferFeedResult:
        """Both catalogs in parallel; one failing still leaves the other's offers."""
        fetched = await asyncio.gather(*(self._fetch(kind) for kind in KINDS))

        now = self._clock()
        quotes: list[OfferQuote] = []
        errors: list[ActionError] = []
        for items, error in fetched:
            if error is not None:
                errors.append(error)
            for item in items:
                if not is_valid(item.offer, now):
                    continue
                if not 0 <= item.offer.discount <= MAX_DISCOUNT or item.price < 0:
                    self._logger.warning(
                        "Skipping offer with bad pricing",
                        extra={"target_id": item.id, "reason": f"discount={item.offer.discount}"},
                    )
                    continue
                quotes.append(quote(item, now))

        quotes.sort(key=lambda q: q.item.offer.discount, reverse=True)
        return OfferFeedResult(quotes=quotes, errors=errors)

    async def _fetch(self, kind: str) -> tuple[list[PricedItem], ActionError | None]:
        try:
            return await self._catalog.list_offers(kind, limit=self._limit), None
        except LifecycleError as e:
            self._logger.warning("Offer catalog fetch failed", extra={"reason": kind, "error": e.message})
            return [], ActionError.from_exception(e)
