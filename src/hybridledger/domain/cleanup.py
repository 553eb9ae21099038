"""Conservative cleanup of inventory records that lost their directory counterpart.

A record is only deleted when both signals agree it is orphaned:

- no active directory device matches it (same tiers as reconciliation), and
- the endpoint-management inventory shows no check-in inside the fresh window.

When the directory says "gone" but endpoint management says "fresh", the
deletion is suppressed and reported as an :class:`Inconsistency`.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .cancellation import raise_if_cancelled
from .correlation import DirectoryIndex
from .errors import HybridLedgerError
from .model import InventorySource
from .time_windows import LookbackWindow, is_within, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime
    from uuid import UUID

    from .cancellation import CancellationSignal
    from .model import InventoryDevice, Snapshot
    from .ports import InventoryTarget
    from .time_windows import Clock

log = getLogger(__name__)


class CleanupOutcome(StrEnum):
    SKIPPED_ACTIVE_COUNTERPART = "skipped_active_counterpart"
    SUPPRESSED_FRESH = "suppressed_fresh"
    WOULD_DELETE = "would_delete"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CleanupPolicyConfig:
    enabled: bool = False
    dry_run: bool = True
    delete_entra: bool = False
    delete_intune: bool = False
    fresh_window: LookbackWindow = field(default_factory=lambda: LookbackWindow(days=30))


@dataclass(frozen=True, slots=True)
class CleanupAction:
    source: InventorySource
    device_id: UUID
    display_name: str
    outcome: CleanupOutcome
    error: str | None = None


@dataclass(frozen=True, slots=True)
class Inconsistency:
    """Directory says stale or absent while endpoint management reports a fresh check-in."""

    source: InventorySource
    device_id: UUID
    display_name: str
    cloud_device_id: UUID | None
    last_check_in: datetime


@dataclass(slots=True)
class CleanupReport:
    dry_run: bool
    actions: list[CleanupAction] = field(default_factory=list["CleanupAction"])
    inconsistencies: list[Inconsistency] = field(default_factory=list["Inconsistency"])

    def count(self, outcome: CleanupOutcome, source: InventorySource | None = None) -> int:
        return sum(
            1
            for action in self.actions
            if action.outcome is outcome and (source is None or action.source is source)
        )

    def summary(self) -> dict[str, int]:
        counts = Counter(str(action.outcome) for action in self.actions)
        return {str(outcome): counts.get(str(outcome), 0) for outcome in CleanupOutcome}


def latest_check_ins(devices: Iterable[InventoryDevice]) -> dict[UUID, datetime]:
    """Map linked device id to the most recent endpoint-management check-in."""

    latest: dict[UUID, datetime] = {}
    for device in devices:
        if device.cloud_device_id is None or device.last_sync is None:
            continue
        current = latest.get(device.cloud_device_id)
        if current is None or device.last_sync > current:
            latest[device.cloud_device_id] = device.last_sync
    return latest


def _check_in_signal(
    device: InventoryDevice,
    check_ins: Mapping[UUID, datetime],
) -> datetime | None:
    candidates: list[datetime] = []
    if device.cloud_device_id is not None and device.cloud_device_id in check_ins:
        candidates.append(check_ins[device.cloud_device_id])
    if device.source is InventorySource.INTUNE and device.last_sync is not None:
        candidates.append(device.last_sync)
    return max(candidates) if candidates else None


@dataclass(slots=True)
class CleanupPolicy:
    """Decide and apply deletions for each enabled target, one record at a time."""

    config: CleanupPolicyConfig
    targets: Mapping[InventorySource, InventoryTarget]
    clock: Clock = utcnow

    def perform_cleanup(
        self,
        snapshot: Snapshot,
        cancel: CancellationSignal | None = None,
    ) -> CleanupReport:
        report = CleanupReport(dry_run=self.config.dry_run)
        if not self.config.enabled:
            log.info("Cleanup disabled. Skipping.")
            return report

        fresh_cutoff = self.config.fresh_window.cutoff(clock=self.clock)
        directory_index = DirectoryIndex.from_devices(snapshot.active_directory_devices)
        check_ins = latest_check_ins(snapshot.intune_devices)

        for source in self._enabled_sources():
            target = self.targets.get(source)
            if target is None:
                log.warning("Cleanup enabled for %s but no target adapter is configured", source)
                continue
            self._clean_source(
                source,
                target,
                snapshot.devices_for(source),
                report=report,
                directory_index=directory_index,
                check_ins=check_ins,
                fresh_cutoff=fresh_cutoff,
                cancel=cancel,
            )

        log.info("Cleanup finished (dry_run=%s): %s", report.dry_run, report.summary())
        return report

    def _enabled_sources(self) -> list[InventorySource]:
        sources: list[InventorySource] = []
        if self.config.delete_entra:
            sources.append(InventorySource.ENTRA_ID)
        if self.config.delete_intune:
            sources.append(InventorySource.INTUNE)
        return sources

    def _clean_source(  # noqa: PLR0913
        self,
        source: InventorySource,
        target: InventoryTarget,
        devices: Iterable[InventoryDevice],
        *,
        report: CleanupReport,
        directory_index: DirectoryIndex,
        check_ins: Mapping[UUID, datetime],
        fresh_cutoff: datetime,
        cancel: CancellationSignal | None,
    ) -> None:
        for device in devices:
            if directory_index.has_counterpart(device):
                report.actions.append(
                    _action(device, source, CleanupOutcome.SKIPPED_ACTIVE_COUNTERPART)
                )
                continue

            last_check_in = _check_in_signal(device, check_ins)
            if last_check_in is not None and is_within(last_check_in, fresh_cutoff):
                log.warning(
                    "Inconsistency: AD stale/missing but Intune fresh for %s device %s (%s, "
                    "cloud device %s, last check-in %s); deletion suppressed",
                    source,
                    device.display_name,
                    device.id,
                    device.cloud_device_id,
                    last_check_in.isoformat(),
                )
                report.inconsistencies.append(
                    Inconsistency(
                        source=source,
                        device_id=device.id,
                        display_name=device.display_name,
                        cloud_device_id=device.cloud_device_id,
                        last_check_in=last_check_in,
                    )
                )
                report.actions.append(_action(device, source, CleanupOutcome.SUPPRESSED_FRESH))
                continue

            if self.config.dry_run:
                log.info(
                    "Would delete %s device %s (%s) due to stale/missing AD and no fresh "
                    "Intune check-in",
                    source,
                    device.display_name,
                    device.id,
                )
                report.actions.append(_action(device, source, CleanupOutcome.WOULD_DELETE))
                continue

            raise_if_cancelled(cancel, during=f"deleting {source} device {device.id}")
            try:
                target.delete(device.id)
            except HybridLedgerError as exc:
                log.exception(
                    "Failed to delete %s device %s (%s)", source, device.display_name, device.id
                )
                report.actions.append(
                    _action(device, source, CleanupOutcome.FAILED, error=str(exc))
                )
                continue
            log.info(
                "Deleted %s device %s (%s) due to stale/missing AD and no fresh Intune check-in",
                source,
                device.display_name,
                device.id,
            )
            report.actions.append(_action(device, source, CleanupOutcome.DELETED))


def _action(
    device: InventoryDevice,
    source: InventorySource,
    outcome: CleanupOutcome,
    *,
    error: str | None = None,
) -> CleanupAction:
    return CleanupAction(
        source=source,
        device_id=device.id,
        display_name=device.display_name,
        outcome=outcome,
        error=error,
    )


__all__ = [
    "CleanupAction",
    "CleanupOutcome",
    "CleanupPolicy",
    "CleanupPolicyConfig",
    "CleanupReport",
    "Inconsistency",
    "latest_check_ins",
]
