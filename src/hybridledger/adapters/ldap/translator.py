"""Translate raw LDAP search entries into directory devices."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from hybridledger.domain.errors import MappingError
from hybridledger.domain.model import DirectoryDevice

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=UTC)
# 0 and the largest signed 64-bit value both mean "never".
_FILETIME_NEVER = frozenset({0, 0x7FFFFFFFFFFFFFFF})

DEFAULT_ATTRIBUTES = (
    "objectGUID",
    "sAMAccountName",
    "distinguishedName",
    "dNSHostName",
    "operatingSystem",
    "operatingSystemVersion",
    "lastLogonTimestamp",
    "whenChanged",
    "msDS-DeviceId",
)


def merge_attributes(extra: Sequence[str]) -> list[str]:
    """Default attributes followed by extras, de-duplicated case-insensitively."""

    merged: list[str] = []
    seen: set[str] = set()
    for name in (*DEFAULT_ATTRIBUTES, *extra):
        key = name.casefold()
        if key in seen:
            continue
        seen.add(key)
        merged.append(name)
    return merged


def _first(attributes: Mapping[str, Sequence[bytes]], name: str) -> bytes | None:
    wanted = name.casefold()
    for key, values in attributes.items():
        if key.casefold() == wanted:
            return values[0] if values else None
    return None


def _text(attributes: Mapping[str, Sequence[bytes]], name: str) -> str | None:
    raw = _first(attributes, name)
    if raw is None:
        return None
    text = raw.decode("utf-8").strip()
    return text or None


def filetime_to_datetime(value: int) -> datetime | None:
    """Convert a Windows FILETIME (100ns ticks since 1601) to an aware UTC datetime."""

    if value in _FILETIME_NEVER or value < 0:
        return None
    return FILETIME_EPOCH + timedelta(microseconds=value // 10)


def parse_generalized_time(value: str) -> datetime | None:
    """Parse LDAP generalized time such as ``20240131120000.0Z``."""

    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1]
    base = normalized.split(".", 1)[0]
    try:
        parsed = datetime.strptime(base, "%Y%m%d%H%M%S")  # noqa: DTZ007
    except ValueError:
        return None
    return parsed.replace(tzinfo=UTC)


def parse_device_id(raw: bytes | None) -> UUID | None:
    """``msDS-DeviceId`` is an octet string; tolerate a textual GUID as well."""

    if raw is None:
        return None
    if len(raw) == 16:  # noqa: PLR2004
        return UUID(bytes_le=raw)
    try:
        return UUID(raw.decode("utf-8").strip())
    except (UnicodeDecodeError, ValueError):
        return None


def translate_entry(dn: str, attributes: Mapping[str, Sequence[bytes]]) -> DirectoryDevice | None:
    """Map one search entry.

    Returns ``None`` for entries that are not computer accounts we can key on
    (no ``objectGUID``, account name or DN). Raises :class:`MappingError` when
    an attribute is present but malformed.
    """

    guid_bytes = _first(attributes, "objectGUID")
    if guid_bytes is None:
        return None

    try:
        object_id = UUID(bytes_le=guid_bytes)
        account_name = _text(attributes, "sAMAccountName")
        distinguished_name = _text(attributes, "distinguishedName") or (dn or None)
        if account_name is None or distinguished_name is None:
            return None

        last_logon_raw = _text(attributes, "lastLogonTimestamp")
        last_logon = filetime_to_datetime(int(last_logon_raw)) if last_logon_raw else None
        when_changed_raw = _text(attributes, "whenChanged")
        when_changed = parse_generalized_time(when_changed_raw) if when_changed_raw else None

        return DirectoryDevice(
            object_id=object_id,
            account_name=account_name,
            distinguished_name=distinguished_name,
            dns_host_name=_text(attributes, "dNSHostName"),
            operating_system=_text(attributes, "operatingSystem"),
            operating_system_version=_text(attributes, "operatingSystemVersion"),
            last_logon=last_logon,
            when_changed=when_changed,
            cloud_device_id=parse_device_id(_first(attributes, "msDS-DeviceId")),
        )
    except (ValueError, UnicodeDecodeError, OverflowError) as exc:
        raise MappingError(f"Failed to map LDAP entry {dn}: {exc}") from exc
