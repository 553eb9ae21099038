from __future__ import annotations

import json
import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from hybridledger.adapters.snapshot_store import FileSnapshotStore
from hybridledger.config.storage import SnapshotConfig
from hybridledger.domain.errors import PersistenceError
from hybridledger.domain.model import InventorySource, Snapshot, SnapshotMetrics
from tests.support.fakes import NOW, make_directory_device, make_inventory_device

if TYPE_CHECKING:
    from datetime import datetime


def _snapshot(captured_at: datetime = NOW) -> Snapshot:
    missing = make_directory_device("PC-1", dns_host_name="pc-1.corp.example")
    linked = make_directory_device("PC-2", last_logon=None)
    entra = make_inventory_device("PC-2", cloud_device_id=linked.object_id)
    intune = make_inventory_device(
        "PC-2", source=InventorySource.INTUNE, cloud_device_id=linked.object_id, last_sync=NOW
    )
    return Snapshot(
        captured_at=captured_at,
        metrics=SnapshotMetrics(2, 1, 1, 1, 1, 0),
        active_directory_devices=(missing, linked),
        entra_devices=(entra,),
        intune_devices=(intune,),
        missing_in_entra=(missing,),
        missing_in_intune=(missing,),
    )


@pytest.fixture
def config(tmp_path: Path) -> SnapshotConfig:
    return SnapshotConfig(root_path=tmp_path / "snapshots", history_size=3)


def test_save_then_load_round_trips(config: SnapshotConfig) -> None:
    store = FileSnapshotStore(config)
    snapshot = _snapshot()

    store.save(snapshot)

    assert store.get_latest() == snapshot


def test_document_uses_camel_case_keys(config: SnapshotConfig) -> None:
    FileSnapshotStore(config).save(_snapshot())

    document = json.loads(config.latest_path().read_text(encoding="utf-8"))

    assert "capturedAt" in document
    assert document["metrics"]["missingInEntraCount"] == 1
    assert "objectId" in document["activeDirectoryDevices"][0]


def test_missing_latest_file_returns_none(config: SnapshotConfig) -> None:
    assert FileSnapshotStore(config).get_latest() is None


def test_invalid_document_raises(config: SnapshotConfig) -> None:
    config.latest_path().write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        FileSnapshotStore(config).get_latest()


def test_history_is_pruned_to_most_recent(config: SnapshotConfig) -> None:
    store = FileSnapshotStore(config)

    for minutes in range(5):
        store.save(_snapshot(NOW + timedelta(minutes=minutes)))

    history = store.list_history()
    assert [path.name for path in history] == [
        "snapshot-20250601120400.json",
        "snapshot-20250601120300.json",
        "snapshot-20250601120200.json",
    ]


def test_pruning_keeps_most_recently_created_files(config: SnapshotConfig) -> None:
    store = FileSnapshotStore(config)

    for minutes in (1, 2, 3, 0):
        store.save(_snapshot(NOW + timedelta(minutes=minutes)))
        # Creation timestamps on Linux advance in scheduler ticks.
        time.sleep(0.05)

    names = {path.name for path in store.list_history()}
    assert names == {
        "snapshot-20250601120000.json",
        "snapshot-20250601120200.json",
        "snapshot-20250601120300.json",
    }


def test_failed_prune_is_logged_and_save_succeeds(
    config: SnapshotConfig,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    store = FileSnapshotStore(config)
    for minutes in range(3):
        store.save(_snapshot(NOW + timedelta(minutes=minutes)))

    original_unlink = Path.unlink

    def locked_unlink(self: Path, missing_ok: bool = False) -> None:  # noqa: FBT001, FBT002
        if self.name.startswith("snapshot-"):
            raise PermissionError(f"{self.name} is locked")
        original_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", locked_unlink)
    newest = _snapshot(NOW + timedelta(minutes=10))

    with caplog.at_level(logging.WARNING, logger="hybridledger.adapters.snapshot_store.store"):
        store.save(newest)

    assert store.get_latest() == newest
    assert len(store.list_history()) == 4
    assert list(config.resolve_root().glob("tmp-*.json")) == []
    assert any(
        record.levelno == logging.WARNING and "Failed to prune" in record.getMessage()
        for record in caplog.records
    )


def test_same_second_history_collision_raises(config: SnapshotConfig) -> None:
    store = FileSnapshotStore(config)
    store.save(_snapshot())

    with pytest.raises(PersistenceError, match="already exists"):
        store.save(_snapshot())


def test_temporary_files_are_removed(config: SnapshotConfig) -> None:
    store = FileSnapshotStore(config)
    store.save(_snapshot())

    assert list(config.resolve_root().glob("tmp-*.json")) == []


def test_non_positive_history_size_disables_pruning(tmp_path: Path) -> None:
    store = FileSnapshotStore(SnapshotConfig(root_path=tmp_path, history_size=0))

    for minutes in range(4):
        store.save(_snapshot(NOW + timedelta(minutes=minutes)))

    assert len(store.list_history()) == 4
