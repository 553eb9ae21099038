"""Errors raised while reading hybridledger settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable, e.g. a negative day window or a non-boolean flag."""


class MissingConfigurationError(ConfigurationError):
    """One or more required settings (LDAP server, Graph credentials, ...) are unset or blank."""
