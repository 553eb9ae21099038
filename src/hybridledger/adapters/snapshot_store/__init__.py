"""Filesystem persistence for reconciliation snapshots."""

from __future__ import annotations

from .store import FileSnapshotStore

__all__ = ["FileSnapshotStore"]
