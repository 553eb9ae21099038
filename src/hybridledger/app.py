"""Application orchestration entry points."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from hybridledger.adapters.configmgr import ConfigManagerClient
from hybridledger.adapters.graph import GraphClient, entra_device_source, intune_device_source
from hybridledger.adapters.ldap import LdapDirectorySource
from hybridledger.adapters.snapshot_store import FileSnapshotStore
from hybridledger.config import (
    ConfigurationError,
    get_cleanup_config,
    get_configmgr_config,
    get_directory_config,
    get_graph_config,
    get_scheduler_config,
    get_snapshot_config,
)
from hybridledger.domain.cleanup import CleanupPolicy, CleanupPolicyConfig, CleanupReport
from hybridledger.domain.maintenance import ConfigManagerMaintenance, SweepResult
from hybridledger.domain.model import InventorySource
from hybridledger.domain.reconciliation import Reconciler
from hybridledger.domain.scheduler import LedgerScheduler
from hybridledger.domain.time_windows import LookbackWindow

if TYPE_CHECKING:
    from hybridledger.config import CleanupConfig, ConfigManagerConfig
    from hybridledger.domain.cancellation import CancellationSignal
    from hybridledger.domain.model import Snapshot
    from hybridledger.domain.ports import (
        CloudIdentitySource,
        ConfigManagementSource,
        DirectorySource,
        EndpointManagementSource,
        SnapshotStore,
    )

SweepKind = Literal["obsolete", "inactive"]

log = getLogger(__name__)


@dataclass(slots=True)
class LedgerComponents:
    """Adapters for one process, shared by reconciliation and cleanup."""

    directory: DirectorySource
    entra: CloudIdentitySource
    intune: EndpointManagementSource
    store: SnapshotStore
    activity_window: LookbackWindow


def build_components() -> LedgerComponents:
    directory_config = get_directory_config()
    graph = GraphClient(config=get_graph_config())
    return LedgerComponents(
        directory=LdapDirectorySource(config=directory_config),
        entra=entra_device_source(graph),
        intune=intune_device_source(graph),
        store=FileSnapshotStore(get_snapshot_config()),
        activity_window=LookbackWindow(days=directory_config.activity_window_days),
    )


def build_reconciler(components: LedgerComponents) -> Reconciler:
    return Reconciler(
        directory=components.directory,
        entra=components.entra,
        intune=components.intune,
        store=components.store,
        activity_window=components.activity_window,
    )


def build_cleanup_policy(
    components: LedgerComponents,
    config: CleanupConfig | None = None,
    *,
    force_dry_run: bool = False,
) -> CleanupPolicy:
    settings = config or get_cleanup_config()
    return CleanupPolicy(
        config=CleanupPolicyConfig(
            enabled=settings.enabled,
            dry_run=settings.dry_run or force_dry_run,
            delete_entra=settings.delete_entra,
            delete_intune=settings.delete_intune,
            fresh_window=LookbackWindow(days=settings.fresh_window_days),
        ),
        targets={
            InventorySource.ENTRA_ID: components.entra,
            InventorySource.INTUNE: components.intune,
        },
    )


def build_maintenance(
    config: ConfigManagerConfig | None = None,
    *,
    dry_run: bool | None = None,
    source: ConfigManagementSource | None = None,
) -> ConfigManagerMaintenance | None:
    """Return ``None`` when configuration-management maintenance is disabled.

    Sweeps follow the cleanup dry-run switch unless ``dry_run`` is given.
    """

    settings = config or get_configmgr_config()
    if not settings.enabled:
        return None
    effective_dry_run = get_cleanup_config().dry_run if dry_run is None else dry_run
    return ConfigManagerMaintenance(
        source=source or ConfigManagerClient(config=settings),
        dry_run=effective_dry_run,
    )


def run_reconciliation(
    *,
    components: LedgerComponents | None = None,
    cancel: CancellationSignal | None = None,
) -> Snapshot:
    effective = components or build_components()
    return build_reconciler(effective).reconcile(cancel)


def run_cleanup(
    *,
    dry_run: bool = False,
    components: LedgerComponents | None = None,
    cancel: CancellationSignal | None = None,
) -> CleanupReport:
    """Reconcile, then apply the cleanup policy to the fresh snapshot."""

    effective = components or build_components()
    snapshot = build_reconciler(effective).reconcile(cancel)
    policy = build_cleanup_policy(effective, force_dry_run=dry_run)
    return policy.perform_cleanup(snapshot, cancel)


def build_scheduler(
    *,
    components: LedgerComponents | None = None,
    stop_event: threading.Event | None = None,
) -> LedgerScheduler:
    effective = components or build_components()
    scheduler_config = get_scheduler_config()
    return LedgerScheduler(
        reconciler=build_reconciler(effective),
        cleanup=build_cleanup_policy(effective),
        maintenance=build_maintenance(),
        interval=scheduler_config.interval,
        startup_delay=scheduler_config.startup_delay,
        stop_event=stop_event or threading.Event(),
    )


def latest_snapshot(store: SnapshotStore | None = None) -> Snapshot | None:
    effective = store or FileSnapshotStore(get_snapshot_config())
    return effective.get_latest()


def run_configmgr_sweep(
    kind: SweepKind,
    *,
    maintenance: ConfigManagerMaintenance | None = None,
    cancel: CancellationSignal | None = None,
) -> SweepResult:
    effective = maintenance or build_maintenance()
    if effective is None:
        raise ConfigurationError(
            "Configuration Manager maintenance is disabled (CONFIGMGR_ENABLED)"
        )
    log.info("Starting %s configuration-management sweep (dry_run=%s)", kind, effective.dry_run)
    if kind == "obsolete":
        return effective.cleanup_obsolete(cancel)
    return effective.cleanup_inactive(cancel)
