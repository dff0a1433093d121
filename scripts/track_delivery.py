#!/usr/bin/env python3
"""
Interactive local delivery tracker (no HTTP server).

Usage:
  python3 scripts/track_delivery.py ORDER_ID
  python3 scripts/track_delivery.py --demo

What it does:
- Runs the same DeliveryReconciler the API uses, polling on its interval
- Prints every applied view (status, progress track, courier, stale flag)
- With --demo, replays a scripted delivery instead of calling the backend
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from orderflow.application.exceptions import TransientFailure
from orderflow.application.use_cases.delivery_reconciler import TrackingView
from orderflow.domain.entities.delivery import Courier, DeliveryPricing, DeliveryRequest
from orderflow.infrastructure.mock.mock_delivery_source import ScriptedDeliverySource
from orderflow.wiring.dependencies import make_delivery_reconciler

_MARKS = {"completed": "[x]", "active": "[>]", "pending": "[ ]"}


def _demo_source() -> ScriptedDeliverySource:
    courier = Courier(name="Ravi", phone="+919800000000")
    pricing = DeliveryPricing(distance=4.2, final_price=85)
    return ScriptedDeliverySource(
        [
            None,
            DeliveryRequest(status="pending_admin_approval"),
            DeliveryRequest(status="new", pricing=pricing),
            DeliveryRequest(status="courier_assigned", courier=courier, pricing=pricing),
            TransientFailure("Network error, please try again"),
            DeliveryRequest(status="picked_up", courier=courier, pricing=pricing),
            DeliveryRequest(status="delivered", courier=courier, pricing=pricing),
        ]
    )


def _print_view(view: TrackingView) -> None:
    print("\n--- Delivery ---")
    print(f"order: {view.order_id}  phase: {view.phase}  status: {view.status or '-'}")
    if view.display is not None:
        print(f"{view.display.label}: {view.display.message}")
    if view.show_progress:
        print("  ".join(f"{_MARKS[s.state]} {s.label}" for s in view.steps))
    if view.courier is not None:
        print(f"courier: {view.courier.name} ({view.courier.phone or 'no phone'})")
    if view.pricing is not None:
        print(f"delivery fee: {view.pricing.final_price}")
    if view.stale and view.error is not None:
        print(f"(stale) last poll failed: {view.error.message}")


def _print_header(order_id: str, interval: float) -> None:
    print("\nLocal Delivery Tracker")
    print("-" * 60)
    print(f"order_id: {order_id}  poll every {interval:g}s")
    print("Commands: /refresh, /quit, /help")
    print("-" * 60)


async def run(order_id: str, demo: bool, interval: float | None) -> None:
    reconciler = make_delivery_reconciler(
        order_id,
        source=_demo_source() if demo else None,
        interval_seconds=interval or (3.0 if demo else None),
        on_update=_print_view,
    )

    _print_header(order_id, reconciler.interval_seconds)
    async with reconciler.tracking():
        while True:
            try:
                cmd = (await asyncio.to_thread(input, "\n> ")).strip().lower()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return
            if cmd in ("/quit", "/exit"):
                print("Bye!")
                return
            if cmd == "/help":
                print("Commands:")
                print("  /refresh -> poll now (the timer keeps its schedule)")
                print("  /quit    -> stop tracking and exit")
                continue
            if cmd == "/refresh":
                await reconciler.refresh()


def main() -> None:
    parser = argparse.ArgumentParser(description="Track a delivery from the terminal")
    parser.add_argument("order_id", nargs="?", default="demo-order")
    parser.add_argument("--demo", action="store_true", help="replay a scripted delivery")
    parser.add_argument("--interval", type=float, default=None, help="poll interval in seconds")
    args = parser.parse_args()
    asyncio.run(run(args.order_id, args.demo, args.interval))


if __name__ == "__main__":
    main()
