"""Ports for persisting reconciliation snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hybridledger.domain.model import Snapshot


@runtime_checkable
class SnapshotStore(Protocol):
    """Durable store for snapshots; ``save`` must be atomic from the caller's view."""

    def save(self, snapshot: Snapshot) -> None: ...

    def get_latest(self) -> Snapshot | None: ...
