"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import SnapshotStore
from .sources import (
    CloudIdentitySource,
    CmDevice,
    ConfigManagementSource,
    DirectorySource,
    EndpointManagementSource,
    InventoryTarget,
)

__all__ = [
    "CloudIdentitySource",
    "CmDevice",
    "ConfigManagementSource",
    "DirectorySource",
    "EndpointManagementSource",
    "InventoryTarget",
    "SnapshotStore",
]
