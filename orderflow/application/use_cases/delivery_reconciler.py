from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Callable

from orderflow.application.exceptions import ActionError, LifecycleError
from orderflow.application.ports.delivery_source import DeliverySourcePort
from orderflow.application.utils.clock import utc_now
from orderflow.application.utils.delivery_progress import (
    ProgressStep,
    compute_progress,
    courier_expected,
    delivery_phase,
    shows_progress_bar,
)
from orderflow.domain.entities.delivery import Courier, DeliveryPricing, DeliveryRequest
from orderflow.domain.status_taxonomy import DELIVERY_DISPLAY_STEPS, StatusDisplay, delivery_display


@dataclass(frozen=True)
class TrackingView:
    order_id: str
    phase: str
    loaded: bool = False
    status: str | None = None
    display: StatusDisplay | None = None
    show_progress: bool = False
    steps: list[ProgressStep] = field(default_factory=list)
    courier: Courier | None = None
    pricing: DeliveryPricing | None = None
    tracking_url: str | None = None
    estimated_delivery_time: datetime | None = None
    provider_order_id: str | None = None
    pickup_address: str | None = None
    drop_address: str | None = None
    last_updated_at: datetime | None = None
    stale: bool = False
    error: ActionError | None = None


def build_tracking_view(
    order_id: str,
    snapshot: DeliveryRequest | None,
    loaded: bool = True,
    last_updated_at: datetime | None = None,
    error: ActionError | None = None,
) -> TrackingView:
    if snapshot is None:
        return TrackingView(
            order_id=order_id,
            phase=delivery_phase(None),
            loaded=loaded,
            steps=compute_progress(None, DELIVERY_DISPLAY_STEPS),
            last_updated_at=last_updated_at,
            stale=error is not None and loaded,
            error=error,
        )

    courier = snapshot.courier if snapshot.courier and snapshot.courier.name else None
    pricing = snapshot.pricing if snapshot.pricing and snapshot.pricing.final_price else None
    return TrackingView(
        order_id=order_id,
        phase=delivery_phase(snapshot),
        loaded=loaded,
        status=snapshot.status,
        display=delivery_display(snapshot.status),
        show_progress=shows_progress_bar(snapshot),
        steps=compute_progress(snapshot.status, DELIVERY_DISPLAY_STEPS),
        courier=courier,
        pricing=pricing,
        tracking_url=snapshot.tracking_url,
        estimated_delivery_time=snapshot.estimated_delivery_time,
        provider_order_id=snapshot.provider_order_id,
        pickup_address=snapshot.pickup_address,
        drop_address=snapshot.drop_address,
        last_updated_at=last_updated_at,
        stale=error is not None,
        error=error,
    )


class DeliveryReconciler:
    """
    Keeps one order's delivery snapshot in step with the provider by polling.

    Each successful poll replaces the snapshot wholesale and the view is
    rebuilt from it. A failed poll keeps the last snapshot and only flags the
    view as stale. Poll results that were overtaken by a newer poll, or that
    land after the tracker was deactivated, are dropped.
    """

    def __init__(
        self,
        order_id: str,
        source: DeliverySourcePort,
        interval_seconds: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
        on_update: Callable[[TrackingView], None] | None = None,
    ) -> None:
        self._order_id = order_id
        self._source = source
        self._interval = interval_seconds
        self._clock = clock
        self._on_update = on_update
        self._logger = logging.getLogger(__name__)

        self._snapshot: DeliveryRequest | None = None
        self._loaded = False
        self._last_success_at: datetime | None = None
        self._view = build_tracking_view(order_id, None, loaded=False)

        self._active = False
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self._issued = 0
        self._applied = 0

    @property
    def order_id(self) -> str:
        return self._order_id

    @property
    def snapshot(self) -> DeliveryRequest | None:
        return self._snapshot

    @property
    def view(self) -> TrackingView:
        return self._view

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def active(self) -> bool:
        return self._active

    async def poll(self) -> TrackingView:
        self._issued += 1
        seq = self._issued
        generation = self._generation

        try:
            snapshot = await self._source.fetch_latest(self._order_id)
        except LifecycleError as e:
            if self._superseded(seq, generation):
                return self._view
            self._applied = seq
            self._logger.warning(
                "Delivery poll failed",
                extra={"order_id": self._order_id, "error": e.message},
            )
            self._publish(
                build_tracking_view(
                    self._order_id,
                    self._snapshot,
                    loaded=self._loaded,
                    last_updated_at=self._last_success_at,
                    error=ActionError.from_exception(e),
                )
            )
            return self._view

        if self._superseded(seq, generation):
            return self._view

        self._applied = seq
        self._snapshot = snapshot
        self._loaded = True
        self._last_success_at = self._clock()
        if snapshot is not None and snapshot.courier is not None and not courier_expected(snapshot.status):
            self._logger.warning(
                "Courier present before assignment",
                extra={"order_id": self._order_id, "status": snapshot.status},
            )
        self._publish(
            build_tracking_view(self._order_id, snapshot, loaded=True, last_updated_at=self._last_success_at)
        )
        return self._view

    async def refresh(self) -> TrackingView:
        """Manual pull; the interval timer is left alone."""
        return await self.poll()

    async def activate(self) -> TrackingView:
        if self._active:
            return self._view
        self._active = True
        self._generation += 1
        self._task = asyncio.create_task(self._run(self._generation))
        self._logger.info("Delivery tracking started", extra={"order_id": self._order_id})
        try:
            return await self.poll()
        except BaseException:
            await self.deactivate()
            raise

    async def deactivate(self) -> None:
        if not self._active:
            return
        self._active = False
        self._generation += 1
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._logger.info("Delivery tracking stopped", extra={"order_id": self._order_id})

    @contextlib.asynccontextmanager
    async def tracking(self) -> AsyncIterator["DeliveryReconciler"]:
        try:
            await self.activate()
            yield self
        finally:
            await self.deactivate()

    async def _run(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if generation != self._generation:
                return
            try:
                await self.poll()
            except Exception:
                self._logger.exception("Delivery poll crashed", extra={"order_id": self._order_id})

    def _superseded(self, seq: int, generation: int) -> bool:
        return generation != self._generation or seq < self._applied

    def _publish(self, view: TrackingView) -> None:
        self._view = view
        if self._on_update is not None:
            self._on_update(view)
