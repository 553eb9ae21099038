"""Public interface for the Microsoft Graph adapter."""

from __future__ import annotations

from .client import GraphAPIError, GraphClient
from .sources import GraphInventorySource, entra_device_source, intune_device_source
from .translator import translate_device, translate_managed_device

__all__ = [
    "GraphAPIError",
    "GraphClient",
    "GraphInventorySource",
    "entra_device_source",
    "intune_device_source",
    "translate_device",
    "translate_managed_device",
]
