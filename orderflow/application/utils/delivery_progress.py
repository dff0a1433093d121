from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from orderflow.domain.entities.delivery import DeliveryRequest
from orderflow.domain.status_taxonomy import (
    DELIVERY_HALTED,
    DELIVERY_PRE_FLIGHT,
    DELIVERY_PROGRESS_ORDER,
    DeliveryStatus,
    ProgressStepDef,
    progress_index,
)

COMPLETED = "completed"
ACTIVE = "active"
PENDING = "pending"


@dataclass(frozen=True)
class ProgressStep:
    key: str
    label: str
    state: str  # "completed" | "active" | "pending"


def compute_progress(
    status: str | None,
    steps: Iterable[ProgressStepDef] | None = None,
) -> list[ProgressStep]:
    """
    Derive the step track from a single status.
    Statuses outside the progress order map to -1, so every step is pending.
    Always computed from scratch; the server may skip statuses.
    """
    if steps is None:
        steps = [ProgressStepDef(key, key) for key in DELIVERY_PROGRESS_ORDER]

    order = progress_index(status)
    result: list[ProgressStep] = []
    for step in steps:
        step_index = progress_index(step.key)
        if order > step_index:
            state = COMPLETED
        elif order == step_index:
            state = ACTIVE
        else:
            state = PENDING
        result.append(ProgressStep(key=step.key, label=step.label, state=state))
    return result


def delivery_phase(snapshot: DeliveryRequest | None) -> str:
    if snapshot is None:
        return "not_assigned"
    status = snapshot.status
    if status in DELIVERY_PRE_FLIGHT:
        return "pre_flight"
    if status in DELIVERY_HALTED:
        return "halted"
    if status == DeliveryStatus.delivered.value:
        return "delivered"
    if progress_index(status) >= 0:
        return "in_transit"
    return "unknown"


def shows_progress_bar(snapshot: DeliveryRequest | None) -> bool:
    return delivery_phase(snapshot) in {"in_transit", "delivered"}


def courier_expected(status: str) -> bool:
    return progress_index(status) >= progress_index(DeliveryStatus.courier_assigned.value)
