"""Deterministic correlation of directory devices with inventory records.

Matching uses a fixed precedence; identifier tiers always win over name tiers
so a renamed host that still carries its device id is never reported missing.

Tier 1 compares the directory object id against the inventory's *linked*
identifiers. Those are different identifier spaces (a directory GUID versus a
cloud device id); the check is kept as-is because some targets key their
records on the directory GUID, but it may hide a matching bug.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from .model import DirectoryDevice, InventoryDevice


class MatchTier(IntEnum):
    OBJECT_ID = 1
    CLOUD_DEVICE_ID = 2
    DNS_HOST_NAME = 3
    ACCOUNT_NAME = 4


@dataclass(frozen=True, slots=True)
class CorrelationIndex:
    """Lookup sets built from one source's devices for one reconciliation pass."""

    linked_ids: frozenset[UUID]
    display_names: frozenset[str]

    def has_id(self, value: UUID | None) -> bool:
        return value is not None and value in self.linked_ids

    def has_name(self, value: str | None) -> bool:
        key = _name_key(value)
        return key is not None and key in self.display_names


def _name_key(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.casefold()


def build_index(devices: Iterable[InventoryDevice]) -> CorrelationIndex:
    linked_ids: set[UUID] = set()
    display_names: set[str] = set()
    for device in devices:
        if device.cloud_device_id is not None:
            linked_ids.add(device.cloud_device_id)
        key = _name_key(device.display_name)
        if key is not None:
            display_names.add(key)
    return CorrelationIndex(
        linked_ids=frozenset(linked_ids),
        display_names=frozenset(display_names),
    )


def match_tier(device: DirectoryDevice, index: CorrelationIndex) -> MatchTier | None:
    """Return the first tier that places ``device`` in ``index``, if any."""

    if index.has_id(device.object_id):
        return MatchTier.OBJECT_ID
    if index.has_id(device.cloud_device_id):
        return MatchTier.CLOUD_DEVICE_ID
    if index.has_name(device.dns_host_name):
        return MatchTier.DNS_HOST_NAME
    if index.has_name(device.account_name):
        return MatchTier.ACCOUNT_NAME
    return None


def is_present(device: DirectoryDevice, index: CorrelationIndex) -> bool:
    return match_tier(device, index) is not None


def find_missing(
    devices: Iterable[DirectoryDevice],
    index: CorrelationIndex,
) -> tuple[DirectoryDevice, ...]:
    return tuple(device for device in devices if not is_present(device, index))


@dataclass(frozen=True, slots=True)
class DirectoryIndex:
    """Reverse lookup over active directory devices, used before any deletion."""

    object_ids: frozenset[UUID]
    cloud_device_ids: frozenset[UUID]
    dns_host_names: frozenset[str]
    account_names: frozenset[str]

    @classmethod
    def from_devices(cls, devices: Iterable[DirectoryDevice]) -> DirectoryIndex:
        object_ids: set[UUID] = set()
        cloud_device_ids: set[UUID] = set()
        dns_host_names: set[str] = set()
        account_names: set[str] = set()
        for device in devices:
            object_ids.add(device.object_id)
            if device.cloud_device_id is not None:
                cloud_device_ids.add(device.cloud_device_id)
            host_key = _name_key(device.dns_host_name)
            if host_key is not None:
                dns_host_names.add(host_key)
            account_key = _name_key(device.account_name)
            if account_key is not None:
                account_names.add(account_key)
        return cls(
            object_ids=frozenset(object_ids),
            cloud_device_ids=frozenset(cloud_device_ids),
            dns_host_names=frozenset(dns_host_names),
            account_names=frozenset(account_names),
        )

    def counterpart_tier(self, device: InventoryDevice) -> MatchTier | None:
        linked = device.cloud_device_id
        if linked is not None:
            if linked in self.object_ids:
                return MatchTier.OBJECT_ID
            if linked in self.cloud_device_ids:
                return MatchTier.CLOUD_DEVICE_ID
        name = _name_key(device.display_name)
        if name is not None:
            if name in self.dns_host_names:
                return MatchTier.DNS_HOST_NAME
            if name in self.account_names:
                return MatchTier.ACCOUNT_NAME
        return None

    def has_counterpart(self, device: InventoryDevice) -> bool:
        return self.counterpart_tier(device) is not None


def has_active_counterpart(
    device: InventoryDevice,
    active_devices: Iterable[DirectoryDevice],
) -> bool:
    return DirectoryIndex.from_devices(active_devices).has_counterpart(device)


__all__ = [
    "CorrelationIndex",
    "DirectoryIndex",
    "MatchTier",
    "build_index",
    "find_missing",
    "has_active_counterpart",
    "is_present",
    "match_tier",
]
