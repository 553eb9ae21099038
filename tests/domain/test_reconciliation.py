from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from hybridledger.domain.errors import OperationCancelledError, PersistenceError, TransportError
from hybridledger.domain.model import InventorySource
from hybridledger.domain.reconciliation import Reconciler, filter_active
from hybridledger.domain.time_windows import LookbackWindow
from tests.support.fakes import (
    NOW,
    FakeDirectorySource,
    FakeInventoryTarget,
    InMemorySnapshotStore,
    fixed_clock,
    make_directory_device,
    make_inventory_device,
    unreachable,
)


def _reconciler(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
    store: InMemorySnapshotStore,
) -> Reconciler:
    return Reconciler(
        directory=directory,
        entra=entra,
        intune=intune,
        store=store,
        activity_window=LookbackWindow(days=30),
        clock=fixed_clock(),
    )


def test_device_missing_in_entra_is_reported(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
    store: InMemorySnapshotStore,
) -> None:
    device = make_directory_device("PC-001", last_logon=NOW - timedelta(days=5))
    directory.devices = [device]

    snapshot = _reconciler(directory, entra, intune, store).reconcile()

    assert snapshot.missing_in_entra == (device,)
    assert snapshot.missing_in_intune == (device,)
    assert snapshot.metrics.active_directory_count == 1
    assert snapshot.metrics.missing_in_entra_count == 1
    assert snapshot.captured_at == NOW
    assert store.saved == [snapshot]


def test_device_correlated_through_linked_id_is_not_missing(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
    store: InMemorySnapshotStore,
) -> None:
    device = make_directory_device("PC-002", last_logon=NOW - timedelta(days=1))
    directory.devices = [device]
    entra.devices = [make_inventory_device("laptop-renamed", cloud_device_id=device.object_id)]

    snapshot = _reconciler(directory, entra, intune, store).reconcile()

    assert snapshot.missing_in_entra == ()
    assert snapshot.metrics.missing_in_entra_count == 0
    assert snapshot.metrics.entra_count == 1


def test_cutoff_is_inclusive_and_null_logons_are_stale() -> None:
    cutoff = NOW - timedelta(days=30)
    on_cutoff = make_directory_device("EDGE", last_logon=cutoff)
    before = make_directory_device("OLD", last_logon=cutoff - timedelta(seconds=1))
    never = make_directory_device("NEVER", last_logon=None)

    assert filter_active([on_cutoff, before, never], cutoff) == (on_cutoff,)


def test_metrics_account_for_stale_devices(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
    store: InMemorySnapshotStore,
) -> None:
    active = make_directory_device("ACTIVE", dns_host_name="active.corp.example")
    directory.devices = [
        active,
        make_directory_device("STALE", last_logon=NOW - timedelta(days=120)),
        make_directory_device("NEVER", last_logon=None),
    ]
    intune.devices = [
        make_inventory_device("ACTIVE.corp.example", source=InventorySource.INTUNE),
    ]

    snapshot = _reconciler(directory, entra, intune, store).reconcile()

    assert snapshot.active_directory_devices == (active,)
    assert snapshot.metrics.stale_devices_count == 2
    assert snapshot.metrics.missing_in_intune_count == 0
    assert snapshot.metrics.missing_in_entra_count == 1
    assert snapshot.metrics.intune_count == 1


def test_repeated_passes_produce_identical_metrics(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
    store: InMemorySnapshotStore,
) -> None:
    directory.devices = [make_directory_device(f"PC-{n}") for n in range(5)]
    entra.devices = [make_inventory_device("PC-1$"), make_inventory_device("PC-3$")]
    reconciler = _reconciler(directory, entra, intune, store)

    first = reconciler.reconcile()
    second = reconciler.reconcile()

    assert first.metrics == second.metrics
    assert first == second


def test_fetch_failure_propagates_without_saving(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
    store: InMemorySnapshotStore,
) -> None:
    directory.devices = [make_directory_device()]
    intune.fetch_error = unreachable()

    with pytest.raises(TransportError):
        _reconciler(directory, entra, intune, store).reconcile()

    assert store.saved == []


def test_store_failure_propagates(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
) -> None:
    failing_store = InMemorySnapshotStore(fail_with=PersistenceError("disk full"))

    with pytest.raises(PersistenceError):
        _reconciler(directory, entra, intune, failing_store).reconcile()


def test_cancelled_pass_fetches_nothing(
    directory: FakeDirectorySource,
    entra: FakeInventoryTarget,
    intune: FakeInventoryTarget,
    store: InMemorySnapshotStore,
) -> None:
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelledError):
        _reconciler(directory, entra, intune, store).reconcile(cancel)

    assert directory.calls == 0
    assert store.saved == []
