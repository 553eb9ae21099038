"""Entra ID and Intune inventory sources backed by Microsoft Graph."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from hybridledger.domain.errors import DeletionError, MappingError

from .client import GraphAPIError, GraphClient
from .schema import DEVICE_SELECT, MANAGED_DEVICE_SELECT
from .translator import translate_device, translate_managed_device

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from uuid import UUID

    from hybridledger.domain.model import InventoryDevice

log = getLogger(__name__)

DEVICES_PATH = "devices"
MANAGED_DEVICES_PATH = "deviceManagement/managedDevices"


def _translate_all(
    entries: Sequence[Mapping[str, object]],
    translate: Callable[[Mapping[str, object]], InventoryDevice],
    *,
    label: str,
) -> list[InventoryDevice]:
    devices: list[InventoryDevice] = []
    for entry in entries:
        try:
            devices.append(translate(entry))
        except MappingError as exc:
            log.warning("Skipping %s record %s: %s", label, entry.get("id"), exc)
    return devices


@dataclass(slots=True)
class GraphInventorySource:
    client: GraphClient
    path: str
    select: tuple[str, ...]
    translate: Callable[[Mapping[str, object]], InventoryDevice]
    label: str

    def fetch(self) -> list[InventoryDevice]:
        entries = self.client.list_collection(self.path, select=self.select)
        devices = _translate_all(entries, self.translate, label=self.label)
        log.info("Fetched %s devices from %s", len(devices), self.label)
        return devices

    def delete(self, device_id: UUID) -> None:
        try:
            self.client.delete(f"{self.path}/{device_id}")
        except GraphAPIError as exc:
            raise DeletionError(
                f"Failed to delete {self.label} device {device_id}: {exc}",
                source=self.label,
                device_id=device_id,
            ) from exc
        log.info("Deleted %s device %s", self.label, device_id)


def entra_device_source(client: GraphClient) -> GraphInventorySource:
    return GraphInventorySource(
        client=client,
        path=DEVICES_PATH,
        select=DEVICE_SELECT,
        translate=translate_device,
        label="Entra ID",
    )


def intune_device_source(client: GraphClient) -> GraphInventorySource:
    return GraphInventorySource(
        client=client,
        path=MANAGED_DEVICES_PATH,
        select=MANAGED_DEVICE_SELECT,
        translate=translate_managed_device,
        label="Intune",
    )

