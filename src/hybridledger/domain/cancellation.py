"""Cooperative cancellation for long-running passes."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .errors import OperationCancelledError


@runtime_checkable
class CancellationSignal(Protocol):
    """Anything exposing ``is_set()``, typically a ``threading.Event``."""

    def is_set(self) -> bool: ...


def raise_if_cancelled(signal: CancellationSignal | None, *, during: str) -> None:
    if signal is not None and signal.is_set():
        raise OperationCancelledError(f"Cancelled before {during}")


__all__ = ["CancellationSignal", "raise_if_cancelled"]
