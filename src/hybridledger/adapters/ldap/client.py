"""Paged LDAP search against the on-premises directory."""

from __future__ import annotations

import ssl
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from ldap3 import ANONYMOUS, SIMPLE, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPException

from hybridledger.domain.errors import MappingError, TransportError

from .translator import merge_attributes, translate_entry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from hybridledger.config.directory import DirectoryConfig
    from hybridledger.domain.model import DirectoryDevice

log = getLogger(__name__)

SearchEntry = tuple[str, "Mapping[str, Sequence[bytes]]"]


def open_connection(config: DirectoryConfig) -> Connection:
    tls = Tls(validate=ssl.CERT_NONE if config.allow_invalid_certificates else ssl.CERT_REQUIRED)
    server = Server(
        config.server,
        port=config.port,
        use_ssl=config.use_ssl,
        tls=tls,
        connect_timeout=config.timeout_seconds,
    )
    if config.username and config.password:
        return Connection(
            server,
            user=config.username,
            password=config.password,
            authentication=SIMPLE,
            auto_bind=True,
            auto_referrals=False,
            receive_timeout=config.timeout_seconds,
            read_only=True,
        )
    return Connection(
        server,
        authentication=ANONYMOUS,
        auto_bind=True,
        auto_referrals=False,
        receive_timeout=config.timeout_seconds,
        read_only=True,
    )


def paged_search(config: DirectoryConfig, attributes: Sequence[str]) -> Iterable[SearchEntry]:
    """Yield ``(dn, raw_attributes)`` for every entry, one page at a time."""

    connection = open_connection(config)
    try:
        log.debug(
            "Querying LDAP server %s:%s with page size %s",
            config.server,
            config.port,
            config.page_size,
        )
        results = connection.extend.standard.paged_search(
            search_base=config.base_dn,
            search_filter=config.search_filter,
            search_scope=SUBTREE,
            attributes=list(attributes),
            paged_size=config.page_size,
            generator=True,
        )
        for result in results:
            if result.get("type") != "searchResEntry":
                continue
            yield result.get("dn", ""), result.get("raw_attributes", {})
    finally:
        connection.unbind()


@dataclass(slots=True)
class LdapDirectorySource:
    """Directory source returning every computer account under the base DN.

    Entries that cannot be mapped are logged and dropped; the rest of the
    search continues.
    """

    config: DirectoryConfig
    searcher: Callable[[DirectoryConfig, Sequence[str]], Iterable[SearchEntry]] = field(
        default=paged_search
    )

    def fetch_active(self) -> list[DirectoryDevice]:
        attributes = merge_attributes(self.config.additional_attributes)
        devices: list[DirectoryDevice] = []
        skipped = 0
        try:
            for dn, raw_attributes in self.searcher(self.config, attributes):
                try:
                    device = translate_entry(dn, raw_attributes)
                except MappingError:
                    log.warning("Failed to map LDAP entry %s", dn, exc_info=True)
                    skipped += 1
                    continue
                if device is None:
                    skipped += 1
                    continue
                devices.append(device)
        except LDAPException as exc:
            raise TransportError(
                f"LDAP query against {self.config.server}:{self.config.port} failed: {exc}",
                source="ldap",
            ) from exc

        log.info("Fetched %s computer accounts from LDAP (%s skipped)", len(devices), skipped)
        return devices
