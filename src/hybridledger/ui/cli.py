from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from hybridledger.adapters.snapshot_store import FileSnapshotStore
from hybridledger.app import (
    build_scheduler,
    latest_snapshot,
    run_cleanup,
    run_configmgr_sweep,
    run_reconciliation,
)
from hybridledger.config import ConfigurationError, configure_logging, get_snapshot_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from hybridledger.domain.model import Snapshot

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile directory computer accounts against cloud device inventories"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("reconcile", help="Run one reconciliation pass and store a snapshot")

    cleanup = subparsers.add_parser(
        "cleanup",
        help="Reconcile, then apply the cleanup policy to the new snapshot",
    )
    cleanup.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be deleted without deleting anything",
    )

    subparsers.add_parser("run", help="Run reconciliation on a schedule until interrupted")

    show = subparsers.add_parser("show", help="Summarise the latest stored snapshot")
    show.add_argument(
        "--history",
        action="store_true",
        help="Also list stored history files, newest first",
    )

    configmgr = subparsers.add_parser(
        "configmgr-cleanup",
        help="Run one Configuration Manager maintenance sweep",
    )
    configmgr.add_argument(
        "kind",
        choices=("obsolete", "inactive"),
        help="Which flagged records to remove",
    )

    return parser.parse_args(list(argv))


def _log_metrics(snapshot: Snapshot) -> None:
    metrics = snapshot.metrics
    log.info(
        "Snapshot %s: AD=%s, Entra=%s, Intune=%s, MissingEntra=%s, MissingIntune=%s, Stale=%s",
        snapshot.captured_at.isoformat(),
        metrics.active_directory_count,
        metrics.entra_count,
        metrics.intune_count,
        metrics.missing_in_entra_count,
        metrics.missing_in_intune_count,
        metrics.stale_devices_count,
    )


def _show(*, history: bool) -> None:
    snapshot = latest_snapshot()
    if snapshot is None:
        log.info("No snapshot data available yet")
        return
    _log_metrics(snapshot)
    for label, devices in (
        ("Entra ID", snapshot.missing_in_entra),
        ("Intune", snapshot.missing_in_intune),
    ):
        for device in devices:
            log.info(
                "Missing in %s: %s (%s)",
                label,
                device.dns_host_name or device.account_name,
                device.distinguished_name,
            )
    if history:
        for path in FileSnapshotStore(get_snapshot_config()).list_history():
            log.info("History: %s", path.name)


def _run_scheduler() -> None:
    scheduler = build_scheduler()

    def _terminate(_signal_received: int, _frame: FrameType | None) -> None:
        log.info("Stop requested")
        scheduler.stop()

    signal(SIGTERM, _terminate)
    passes = scheduler.run_forever()
    log.info("Ledger worker stopped after %s passes", passes)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "reconcile":
            _log_metrics(run_reconciliation())
        elif parsed_args.command == "cleanup":
            report = run_cleanup(dry_run=parsed_args.dry_run)
            log.info("Cleanup report (dry_run=%s): %s", report.dry_run, report.summary())
        elif parsed_args.command == "run":
            _run_scheduler()
        elif parsed_args.command == "show":
            _show(history=parsed_args.history)
        elif parsed_args.command == "configmgr-cleanup":
            result = run_configmgr_sweep(parsed_args.kind)
            log.info(
                "Configuration Manager %s sweep: matched=%s, deleted=%s, would_delete=%s, "
                "failed=%s",
                result.label,
                result.matched,
                result.deleted,
                result.would_delete,
                result.failed,
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
