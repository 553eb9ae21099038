"""Device records and reconciliation snapshots (pure, dependency-light)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from enum import StrEnum
from uuid import UUID  # noqa: TC003


class InventorySource(StrEnum):
    ENTRA_ID = "EntraID"
    INTUNE = "Intune"


@dataclass(frozen=True, slots=True)
class DirectoryDevice:
    """Computer account from the on-premises directory of record."""

    object_id: UUID
    account_name: str
    distinguished_name: str
    dns_host_name: str | None = None
    operating_system: str | None = None
    operating_system_version: str | None = None
    last_logon: datetime | None = None
    when_changed: datetime | None = None
    cloud_device_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class InventoryDevice:
    """Device record from a cloud identity or endpoint-management inventory."""

    id: UUID
    display_name: str
    source: InventorySource
    cloud_device_id: UUID | None = None
    operating_system: str | None = None
    operating_system_version: str | None = None
    last_sync: datetime | None = None


@dataclass(frozen=True, slots=True)
class SnapshotMetrics:
    """Pre-computed counters for one reconciliation pass."""

    active_directory_count: int
    entra_count: int
    intune_count: int
    missing_in_entra_count: int
    missing_in_intune_count: int
    stale_devices_count: int


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable result of one reconciliation pass.

    Every device in ``missing_in_entra`` / ``missing_in_intune`` is also part of
    ``active_directory_devices``.
    """

    captured_at: datetime
    metrics: SnapshotMetrics
    active_directory_devices: tuple[DirectoryDevice, ...] = field(default_factory=tuple)
    entra_devices: tuple[InventoryDevice, ...] = field(default_factory=tuple)
    intune_devices: tuple[InventoryDevice, ...] = field(default_factory=tuple)
    missing_in_entra: tuple[DirectoryDevice, ...] = field(default_factory=tuple)
    missing_in_intune: tuple[DirectoryDevice, ...] = field(default_factory=tuple)

    def devices_for(self, source: InventorySource) -> tuple[InventoryDevice, ...]:
        if source is InventorySource.ENTRA_ID:
            return self.entra_devices
        return self.intune_devices

    def missing_for(self, source: InventorySource) -> tuple[DirectoryDevice, ...]:
        if source is InventorySource.ENTRA_ID:
            return self.missing_in_entra
        return self.missing_in_intune


__all__ = [
    "DirectoryDevice",
    "InventoryDevice",
    "InventorySource",
    "Snapshot",
    "SnapshotMetrics",
]
