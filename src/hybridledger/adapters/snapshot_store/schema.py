"""JSON document models for persisted snapshots."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hybridledger.domain.model import (
    DirectoryDevice,
    InventoryDevice,
    InventorySource,
    Snapshot,
    SnapshotMetrics,
)


class SnapshotDocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


class DirectoryDeviceDocument(SnapshotDocumentModel):
    object_id: UUID
    account_name: str
    distinguished_name: str
    dns_host_name: str | None = None
    operating_system: str | None = None
    operating_system_version: str | None = None
    last_logon: datetime | None = None
    when_changed: datetime | None = None
    cloud_device_id: UUID | None = None

    def to_domain(self) -> DirectoryDevice:
        return DirectoryDevice(
            object_id=self.object_id,
            account_name=self.account_name,
            distinguished_name=self.distinguished_name,
            dns_host_name=self.dns_host_name,
            operating_system=self.operating_system,
            operating_system_version=self.operating_system_version,
            last_logon=self.last_logon,
            when_changed=self.when_changed,
            cloud_device_id=self.cloud_device_id,
        )


class InventoryDeviceDocument(SnapshotDocumentModel):
    id: UUID
    display_name: str
    source: InventorySource
    cloud_device_id: UUID | None = None
    operating_system: str | None = None
    operating_system_version: str | None = None
    last_sync: datetime | None = None

    def to_domain(self) -> InventoryDevice:
        return InventoryDevice(
            id=self.id,
            display_name=self.display_name,
            source=self.source,
            cloud_device_id=self.cloud_device_id,
            operating_system=self.operating_system,
            operating_system_version=self.operating_system_version,
            last_sync=self.last_sync,
        )


class MetricsDocument(SnapshotDocumentModel):
    active_directory_count: int
    entra_count: int
    intune_count: int
    missing_in_entra_count: int
    missing_in_intune_count: int
    stale_devices_count: int

    def to_domain(self) -> SnapshotMetrics:
        return SnapshotMetrics(
            active_directory_count=self.active_directory_count,
            entra_count=self.entra_count,
            intune_count=self.intune_count,
            missing_in_entra_count=self.missing_in_entra_count,
            missing_in_intune_count=self.missing_in_intune_count,
            stale_devices_count=self.stale_devices_count,
        )


class SnapshotDocument(SnapshotDocumentModel):
    captured_at: datetime
    metrics: MetricsDocument
    active_directory_devices: list[DirectoryDeviceDocument] = Field(default_factory=list)
    entra_devices: list[InventoryDeviceDocument] = Field(default_factory=list)
    intune_devices: list[InventoryDeviceDocument] = Field(default_factory=list)
    missing_in_entra: list[DirectoryDeviceDocument] = Field(default_factory=list)
    missing_in_intune: list[DirectoryDeviceDocument] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, snapshot: Snapshot) -> SnapshotDocument:
        return cls.model_validate(snapshot, from_attributes=True)

    def to_domain(self) -> Snapshot:
        return Snapshot(
            captured_at=self.captured_at,
            metrics=self.metrics.to_domain(),
            active_directory_devices=tuple(d.to_domain() for d in self.active_directory_devices),
            entra_devices=tuple(d.to_domain() for d in self.entra_devices),
            intune_devices=tuple(d.to_domain() for d in self.intune_devices),
            missing_in_entra=tuple(d.to_domain() for d in self.missing_in_entra),
            missing_in_intune=tuple(d.to_domain() for d in self.missing_in_intune),
        )
