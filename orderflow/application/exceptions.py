from __future__ import annotations

from dataclasses import dataclass


class LifecycleError(RuntimeError):
    """Base for failures surfaced by the lifecycle components."""

    kind = "error"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailure(LifecycleError):
    """Raised before any request is issued (missing reason, bad quantity)."""

    kind = "validation"


class StateConflict(LifecycleError):
    """Raised when a transition is not allowed or the server answers success=false."""

    kind = "conflict"


class TransientFailure(LifecycleError):
    """Raised on network/server failures (timeouts, 5xx, unreadable body)."""

    kind = "transient"
    retryable = True


@dataclass(frozen=True)
class ActionError:
    kind: str
    message: str
    retryable: bool = False

    @classmethod
    def from_exception(cls, exc: LifecycleError) -> "ActionError":
        return cls(kind=exc.kind, message=exc.message, retryable=exc.retryable)
