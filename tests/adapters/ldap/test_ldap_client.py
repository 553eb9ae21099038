from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from ldap3.core.exceptions import LDAPSocketOpenError

from hybridledger.adapters.ldap import LdapDirectorySource
from hybridledger.config.directory import DirectoryConfig
from hybridledger.domain.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


def _config() -> DirectoryConfig:
    return DirectoryConfig(
        server="dc01.corp.example",
        base_dn="DC=corp,DC=example",
        additional_attributes=("description",),
    )


def _raw(name: str) -> dict[str, list[bytes]]:
    return {
        "objectGUID": [uuid4().bytes_le],
        "sAMAccountName": [f"{name}$".encode()],
        "distinguishedName": [f"CN={name},DC=corp,DC=example".encode()],
    }


def test_fetch_active_maps_entries_and_drops_unusable_ones(
    caplog: pytest.LogCaptureFixture,
) -> None:
    seen_attributes: list[Sequence[str]] = []
    broken = _raw("BROKEN")
    broken["objectGUID"] = [b"bad"]

    def searcher(
        config: DirectoryConfig,
        attributes: Sequence[str],
    ) -> Iterable[tuple[str, Mapping[str, Sequence[bytes]]]]:
        seen_attributes.append(attributes)
        yield "CN=PC-1,DC=corp,DC=example", _raw("PC-1")
        yield "CN=BROKEN,DC=corp,DC=example", broken
        yield "CN=Group,DC=corp,DC=example", {"cn": [b"Group"]}
        yield "CN=PC-2,DC=corp,DC=example", _raw("PC-2")

    source = LdapDirectorySource(config=_config(), searcher=searcher)

    devices = source.fetch_active()

    assert [device.account_name for device in devices] == ["PC-1$", "PC-2$"]
    assert "description" in seen_attributes[0]
    assert "Failed to map LDAP entry" in caplog.text


def test_ldap_errors_become_transport_errors() -> None:
    def searcher(
        config: DirectoryConfig,
        attributes: Sequence[str],
    ) -> Iterable[tuple[str, Mapping[str, Sequence[bytes]]]]:
        raise LDAPSocketOpenError("unable to open socket")

    source = LdapDirectorySource(config=_config(), searcher=searcher)

    with pytest.raises(TransportError) as excinfo:
        source.fetch_active()

    assert excinfo.value.source == "ldap"
