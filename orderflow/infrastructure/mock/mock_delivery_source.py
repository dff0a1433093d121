from __future__ import annotations

from orderflow.application.exceptions import LifecycleError
from orderflow.application.ports.delivery_source import DeliverySourcePort
from orderflow.domain.entities.delivery import DeliveryRequest


class ScriptedDeliverySource(DeliverySourcePort):
    """Replays a fixed sequence of snapshots (or failures); the last entry repeats."""

    def __init__(self, script: list[DeliveryRequest | LifecycleError | None] | None = None) -> None:
        self._script = list(script or [None])
        self.calls = 0

    def push(self, entry: DeliveryRequest | LifecycleError | None) -> None:
        self._script.append(entry)

    async def fetch_latest(self, order_id: str) -> DeliveryRequest | None:
        index = min(self.calls, len(self._script) - 1)
        self.calls += 1
        entry = self._script[index]
        if isinstance(entry, LifecycleError):
            raise entry
        return entry
