"""Ports for the inventory sources the reconciliation core talks to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from uuid import UUID

    from hybridledger.domain.model import DirectoryDevice, InventoryDevice


@runtime_checkable
class DirectorySource(Protocol):
    """Directory of record (on-premises computer accounts)."""

    def fetch_active(self) -> Sequence[DirectoryDevice]: ...


@runtime_checkable
class InventoryTarget(Protocol):
    """A downstream inventory that may be pruned by the cleanup policy."""

    def fetch(self) -> Sequence[InventoryDevice]: ...

    def delete(self, device_id: UUID) -> None: ...


@runtime_checkable
class CloudIdentitySource(InventoryTarget, Protocol):
    """Cloud identity directory devices."""


@runtime_checkable
class EndpointManagementSource(InventoryTarget, Protocol):
    """Endpoint-management (MDM) managed devices."""


@dataclass(frozen=True, slots=True)
class CmDevice:
    """Configuration-management client record."""

    resource_id: int
    name: str | None = None
    client_active_status: int = 0
    is_obsolete: int = 0
    last_online_time: str | None = None


@runtime_checkable
class ConfigManagementSource(Protocol):
    """Configuration-management service; not compared against the directory."""

    def fetch_where(self, odata_filter: str | None = None) -> Iterator[CmDevice]: ...

    def delete_by_resource_id(self, resource_id: int) -> bool: ...


__all__ = [
    "CloudIdentitySource",
    "CmDevice",
    "ConfigManagementSource",
    "DirectorySource",
    "EndpointManagementSource",
    "InventoryTarget",
]
