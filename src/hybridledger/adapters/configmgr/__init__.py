"""Public interface for the Configuration Manager adapter."""

from __future__ import annotations

from .client import ConfigManagerAPIError, ConfigManagerClient

__all__ = ["ConfigManagerAPIError", "ConfigManagerClient"]
