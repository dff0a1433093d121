from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.entities.delivery import DeliveryRequest


class DeliverySourcePort(ABC):
    """Anything that can hand out the latest delivery snapshot for an order."""

    @abstractmethod
    async def fetch_latest(self, order_id: str) -> DeliveryRequest | None:
        """Latest snapshot, or None when no delivery has been assigned yet."""
        raise NotImplementedError
