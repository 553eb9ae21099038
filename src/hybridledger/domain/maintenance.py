"""Standalone maintenance sweeps over the configuration-management inventory."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .cancellation import raise_if_cancelled
from .errors import HybridLedgerError

if TYPE_CHECKING:
    from .cancellation import CancellationSignal
    from .ports import CmDevice, ConfigManagementSource

log = getLogger(__name__)

OBSOLETE_FILTER = "IsObsolete eq 1"
INACTIVE_FILTER = "ClientActiveStatus eq 0"


@dataclass(slots=True)
class SweepResult:
    """Outcome of one maintenance sweep."""

    label: str
    matched: int = 0
    deleted: int = 0
    not_found: int = 0
    would_delete: int = 0
    failed: int = 0
    failures: list[tuple[int, str]] = field(default_factory=list["tuple[int, str]"])


@dataclass(slots=True)
class ConfigManagerMaintenance:
    """Delete configuration-management records flagged obsolete or client-inactive.

    Every record the flag filter returns is deleted. No directory comparison or
    freshness guard applies: the flags come from the configuration-management
    service itself.
    """

    source: ConfigManagementSource
    dry_run: bool = True

    def cleanup_obsolete(self, cancel: CancellationSignal | None = None) -> SweepResult:
        return self._sweep("obsolete", OBSOLETE_FILTER, cancel)

    def cleanup_inactive(self, cancel: CancellationSignal | None = None) -> SweepResult:
        return self._sweep("inactive", INACTIVE_FILTER, cancel)

    def _sweep(
        self,
        label: str,
        odata_filter: str,
        cancel: CancellationSignal | None,
    ) -> SweepResult:
        result = SweepResult(label=label)
        raise_if_cancelled(cancel, during=f"{label} configuration-management fetch")
        for device in self.source.fetch_where(odata_filter):
            result.matched += 1
            if self.dry_run:
                result.would_delete += 1
                log.info(
                    "Would delete %s SCCM device %s (%s)", label, device.name, device.resource_id
                )
                continue
            raise_if_cancelled(cancel, during=f"deleting SCCM device {device.resource_id}")
            self._delete(device, label=label, result=result)

        log.info(
            "SCCM %s sweep finished: matched=%s, deleted=%s, not_found=%s, would_delete=%s, "
            "failed=%s",
            label,
            result.matched,
            result.deleted,
            result.not_found,
            result.would_delete,
            result.failed,
        )
        return result

    def _delete(self, device: CmDevice, *, label: str, result: SweepResult) -> None:
        try:
            found = self.source.delete_by_resource_id(device.resource_id)
        except HybridLedgerError as exc:
            result.failed += 1
            result.failures.append((device.resource_id, str(exc)))
            log.exception(
                "Failed to delete %s SCCM device %s (%s)", label, device.name, device.resource_id
            )
            return
        if found:
            result.deleted += 1
            log.info("Deleted %s SCCM device %s (%s)", label, device.name, device.resource_id)
        else:
            result.not_found += 1
            log.info("SCCM device %s (%s) was already gone", device.name, device.resource_id)


__all__ = [
    "INACTIVE_FILTER",
    "OBSOLETE_FILTER",
    "ConfigManagerMaintenance",
    "SweepResult",
]
