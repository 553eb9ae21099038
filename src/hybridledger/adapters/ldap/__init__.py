"""Public interface for the LDAP directory adapter."""

from __future__ import annotations

from .client import LdapDirectorySource
from .translator import translate_entry

__all__ = ["LdapDirectorySource", "translate_entry"]
