from __future__ import annotations

from datetime import timedelta

from hybridledger.domain.maintenance import (
    INACTIVE_FILTER,
    OBSOLETE_FILTER,
    ConfigManagerMaintenance,
)
from hybridledger.domain.ports import CmDevice
from tests.support.fakes import NOW, FakeConfigManagementSource


def _maintenance(
    source: FakeConfigManagementSource,
    *,
    dry_run: bool = False,
) -> ConfigManagerMaintenance:
    return ConfigManagerMaintenance(source=source, dry_run=dry_run)


def test_obsolete_sweep_deletes_each_flagged_record() -> None:
    source = FakeConfigManagementSource(
        devices=[
            CmDevice(resource_id=1, name="PC-1", is_obsolete=1),
            CmDevice(resource_id=2, name="PC-2", is_obsolete=1),
        ]
    )

    result = _maintenance(source).cleanup_obsolete()

    assert source.filters == [OBSOLETE_FILTER]
    assert source.deleted == [1, 2]
    assert result.matched == 2
    assert result.deleted == 2


def test_inactive_sweep_uses_client_status_filter() -> None:
    source = FakeConfigManagementSource(devices=[CmDevice(resource_id=7, name="PC-7")])

    result = _maintenance(source).cleanup_inactive()

    assert source.filters == [INACTIVE_FILTER]
    assert result.label == "inactive"
    assert result.deleted == 1


def test_missing_record_counts_as_not_found() -> None:
    source = FakeConfigManagementSource(
        devices=[CmDevice(resource_id=3, is_obsolete=1)],
        missing={3},
    )

    result = _maintenance(source).cleanup_obsolete()

    assert result.not_found == 1
    assert result.deleted == 0


def test_failures_are_counted_and_sweep_continues() -> None:
    source = FakeConfigManagementSource(
        devices=[CmDevice(resource_id=4), CmDevice(resource_id=5)],
        failing={4},
    )

    result = _maintenance(source).cleanup_inactive()

    assert source.deleted == [5]
    assert result.failed == 1
    assert result.failures[0][0] == 4


def test_dry_run_deletes_nothing() -> None:
    source = FakeConfigManagementSource(devices=[CmDevice(resource_id=6, is_obsolete=1)])

    result = _maintenance(source, dry_run=True).cleanup_obsolete()

    assert source.deleted == []
    assert result.would_delete == 1


def test_flagged_record_online_yesterday_is_deleted() -> None:
    yesterday = (NOW - timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%SZ")
    obsolete_source = FakeConfigManagementSource(
        devices=[CmDevice(resource_id=9, is_obsolete=1, last_online_time=yesterday)]
    )
    inactive_source = FakeConfigManagementSource(
        devices=[CmDevice(resource_id=10, client_active_status=0, last_online_time=yesterday)]
    )

    obsolete = _maintenance(obsolete_source).cleanup_obsolete()
    inactive = _maintenance(inactive_source).cleanup_inactive()

    assert obsolete_source.deleted == [9]
    assert inactive_source.deleted == [10]
    assert obsolete.deleted == 1
    assert inactive.deleted == 1
