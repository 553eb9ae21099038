"""Periodic driver running one reconcile-and-cleanup pass at a time."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import OperationCancelledError

if TYPE_CHECKING:
    from .cleanup import CleanupPolicy, CleanupReport
    from .maintenance import ConfigManagerMaintenance, SweepResult
    from .model import Snapshot
    from .reconciliation import Reconciler

log = getLogger(__name__)

FALLBACK_INTERVAL = timedelta(minutes=30)


@dataclass(slots=True)
class PassResult:
    snapshot: Snapshot
    cleanup: CleanupReport
    sweeps: list[SweepResult] = field(default_factory=list["SweepResult"])


@dataclass(slots=True)
class LedgerScheduler:
    """Run passes sequentially; a failed pass is logged and the next one still runs.

    ``stop_event`` doubles as the cancellation signal handed to every pass, and
    waiting on it lets a stop request cut a sleep short.
    """

    reconciler: Reconciler
    cleanup: CleanupPolicy
    maintenance: ConfigManagerMaintenance | None = None
    interval: timedelta = timedelta(minutes=60)
    startup_delay: timedelta = timedelta(seconds=10)
    stop_event: threading.Event = field(default_factory=threading.Event)

    def run_pass(self) -> PassResult:
        snapshot = self.reconciler.reconcile(self.stop_event)
        log.info(
            "Ledger snapshot captured with AD=%s, Entra=%s, Intune=%s, MissingEntra=%s, "
            "MissingIntune=%s",
            snapshot.metrics.active_directory_count,
            snapshot.metrics.entra_count,
            snapshot.metrics.intune_count,
            snapshot.metrics.missing_in_entra_count,
            snapshot.metrics.missing_in_intune_count,
        )
        report = self.cleanup.perform_cleanup(snapshot, self.stop_event)
        result = PassResult(snapshot=snapshot, cleanup=report)
        if self.maintenance is not None:
            result.sweeps.append(self.maintenance.cleanup_obsolete(self.stop_event))
            result.sweeps.append(self.maintenance.cleanup_inactive(self.stop_event))
        return result

    def run_forever(self, *, max_passes: int | None = None) -> int:
        """Loop until stopped; returns the number of passes attempted."""

        delay = self.startup_delay.total_seconds()
        if delay > 0:
            log.info("Ledger worker delaying startup for %s", self.startup_delay)
            if self.stop_event.wait(delay):
                return 0

        interval = self.interval if self.interval > timedelta(0) else FALLBACK_INTERVAL
        passes = 0
        while not self.stop_event.is_set():
            passes += 1
            try:
                self.run_pass()
            except OperationCancelledError:
                log.info("Ledger pass cancelled")
                break
            except Exception:
                log.exception("Ledger reconciliation failed")

            if max_passes is not None and passes >= max_passes:
                break
            if self.stop_event.wait(interval.total_seconds()):
                break
        return passes

    def stop(self) -> None:
        self.stop_event.set()


__all__ = ["FALLBACK_INTERVAL", "LedgerScheduler", "PassResult"]
