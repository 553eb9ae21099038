"""Reconciliation of the directory of record against downstream inventories."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .cancellation import raise_if_cancelled
from .correlation import build_index, find_missing
from .model import Snapshot, SnapshotMetrics
from .time_windows import LookbackWindow, is_within, utcnow

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from .cancellation import CancellationSignal
    from .model import DirectoryDevice
    from .ports import (
        CloudIdentitySource,
        DirectorySource,
        EndpointManagementSource,
        SnapshotStore,
    )
    from .time_windows import Clock

log = getLogger(__name__)


def filter_active(
    devices: Sequence[DirectoryDevice],
    cutoff: datetime,
) -> tuple[DirectoryDevice, ...]:
    """Keep devices whose last logon is on or after ``cutoff``."""

    return tuple(device for device in devices if is_within(device.last_logon, cutoff))


@dataclass(slots=True)
class Reconciler:
    """Fetch every source, correlate and persist one snapshot per call.

    Any adapter or store failure propagates; nothing is persisted for a failed
    pass.
    """

    directory: DirectorySource
    entra: CloudIdentitySource
    intune: EndpointManagementSource
    store: SnapshotStore
    activity_window: LookbackWindow = field(default_factory=lambda: LookbackWindow(days=30))
    clock: Clock = utcnow

    def reconcile(self, cancel: CancellationSignal | None = None) -> Snapshot:
        started = time.perf_counter()
        cutoff = self.activity_window.cutoff(clock=self.clock)
        log.info("Starting reconciliation using activity cutoff %s", cutoff.isoformat())

        raise_if_cancelled(cancel, during="directory fetch")
        directory_devices = list(self.directory.fetch_active())
        raise_if_cancelled(cancel, during="Entra ID fetch")
        entra_devices = tuple(self.entra.fetch())
        raise_if_cancelled(cancel, during="Intune fetch")
        intune_devices = tuple(self.intune.fetch())

        active = filter_active(directory_devices, cutoff)
        stale_count = len(directory_devices) - len(active)

        missing_in_entra = find_missing(active, build_index(entra_devices))
        missing_in_intune = find_missing(active, build_index(intune_devices))

        metrics = SnapshotMetrics(
            active_directory_count=len(active),
            entra_count=len(entra_devices),
            intune_count=len(intune_devices),
            missing_in_entra_count=len(missing_in_entra),
            missing_in_intune_count=len(missing_in_intune),
            stale_devices_count=stale_count,
        )
        snapshot = Snapshot(
            captured_at=self.clock(),
            metrics=metrics,
            active_directory_devices=active,
            entra_devices=entra_devices,
            intune_devices=intune_devices,
            missing_in_entra=missing_in_entra,
            missing_in_intune=missing_in_intune,
        )

        raise_if_cancelled(cancel, during="snapshot persistence")
        self.store.save(snapshot)

        elapsed_ms = (time.perf_counter() - started) * 1000
        log.info(
            "Reconciliation finished in %.0f ms. ActiveDirectory=%s, Entra=%s, Intune=%s, "
            "MissingEntra=%s, MissingIntune=%s, Stale=%s",
            elapsed_ms,
            metrics.active_directory_count,
            metrics.entra_count,
            metrics.intune_count,
            metrics.missing_in_entra_count,
            metrics.missing_in_intune_count,
            metrics.stale_devices_count,
        )
        return snapshot


__all__ = ["Reconciler", "filter_active"]
