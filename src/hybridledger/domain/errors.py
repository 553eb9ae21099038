"""Error taxonomy shared by the reconciliation core and its adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class HybridLedgerError(RuntimeError):
    """Base class for all hybrid ledger failures."""


class TransportError(HybridLedgerError):
    """Raised when a source adapter cannot reach or authenticate against its backend."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class MappingError(HybridLedgerError):
    """Raised when a single source record cannot be mapped onto the domain model."""


class PersistenceError(HybridLedgerError):
    """Raised when a snapshot cannot be written to or read from the store."""


class DeletionError(HybridLedgerError):
    """Raised when deleting a single device from a target source fails."""

    def __init__(self, message: str, *, source: str, device_id: UUID | int) -> None:
        super().__init__(message)
        self.source = source
        self.device_id = device_id


class OperationCancelledError(HybridLedgerError):
    """Raised when a pass observes the external cancellation signal."""


__all__ = [
    "DeletionError",
    "HybridLedgerError",
    "MappingError",
    "OperationCancelledError",
    "PersistenceError",
    "TransportError",
]
