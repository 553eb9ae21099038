from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from hybridledger.domain.model import InventorySource
from tests.support.fakes import (
    FakeDirectorySource,
    FakeInventoryTarget,
    InMemorySnapshotStore,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

_CONFIG_PREFIXES = ("LDAP_", "GRAPH_", "SNAPSHOT_", "SCHEDULER_", "CLEANUP_", "CONFIGMGR_")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in list(os.environ):
        if name.startswith(_CONFIG_PREFIXES) or name == "LOG_LEVEL":
            monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def directory() -> FakeDirectorySource:
    return FakeDirectorySource()


@pytest.fixture
def entra() -> FakeInventoryTarget:
    return FakeInventoryTarget(label=str(InventorySource.ENTRA_ID))


@pytest.fixture
def intune() -> FakeInventoryTarget:
    return FakeInventoryTarget(label=str(InventorySource.INTUNE))


@pytest.fixture
def store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()

