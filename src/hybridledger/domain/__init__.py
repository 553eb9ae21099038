"""Reconciliation core: correlation, snapshots, cleanup policy and scheduling."""

from __future__ import annotations

from .model import DirectoryDevice, InventoryDevice, InventorySource, Snapshot, SnapshotMetrics

__all__ = [
    "DirectoryDevice",
    "InventoryDevice",
    "InventorySource",
    "Snapshot",
    "SnapshotMetrics",
]
