"""Translate Microsoft Graph payloads into inventory devices."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import ValidationError

from hybridledger.domain.errors import MappingError
from hybridledger.domain.model import InventoryDevice, InventorySource

from .schema import GraphDevice, GraphManagedDevice

if TYPE_CHECKING:
    from collections.abc import Mapping

# Intune reports "never synced" as 0001-01-01T00:00:00Z.
_EARLIEST_REAL_YEAR = 1901


def parse_guid(value: str | None) -> UUID | None:
    if value is None or not value.strip():
        return None
    try:
        return UUID(value.strip())
    except ValueError:
        return None


def _meaningful(value: datetime | None) -> datetime | None:
    """Drop placeholder dates; offset-less timestamps are read as UTC."""

    if value is None or value.year < _EARLIEST_REAL_YEAR:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def translate_device(payload: Mapping[str, object]) -> InventoryDevice:
    """Map a ``/devices`` entry; raises :class:`MappingError` for unusable records."""

    try:
        device = GraphDevice.model_validate(payload)
    except ValidationError as exc:
        raise MappingError(f"Invalid Entra ID device payload: {exc}") from exc
    device_id = parse_guid(device.id)
    if device_id is None:
        raise MappingError(f"Entra ID device id is not a GUID: {device.id!r}")
    return InventoryDevice(
        id=device_id,
        display_name=device.display_name or "",
        source=InventorySource.ENTRA_ID,
        cloud_device_id=parse_guid(device.device_id),
        operating_system=device.operating_system,
        operating_system_version=device.operating_system_version,
        last_sync=_meaningful(device.approximate_last_sign_in),
    )


def translate_managed_device(payload: Mapping[str, object]) -> InventoryDevice:
    """Map a ``/deviceManagement/managedDevices`` entry."""

    try:
        device = GraphManagedDevice.model_validate(payload)
    except ValidationError as exc:
        raise MappingError(f"Invalid Intune managed device payload: {exc}") from exc
    device_id = parse_guid(device.id)
    if device_id is None:
        raise MappingError(f"Intune managed device id is not a GUID: {device.id!r}")
    return InventoryDevice(
        id=device_id,
        display_name=device.device_name or "",
        source=InventorySource.INTUNE,
        cloud_device_id=parse_guid(device.azure_ad_device_id),
        operating_system=device.operating_system,
        operating_system_version=device.os_version,
        last_sync=_meaningful(device.last_sync),
    )
