"""Application configuration helpers."""

from __future__ import annotations

from .directory import DirectoryConfig, get_directory_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .graph import GraphConfig, get_graph_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import SnapshotConfig, get_snapshot_config
from .sync import (
    CleanupConfig,
    ConfigManagerConfig,
    SchedulerConfig,
    get_cleanup_config,
    get_configmgr_config,
    get_scheduler_config,
)

__all__ = [
    "CleanupConfig",
    "ConfigManagerConfig",
    "ConfigurationError",
    "DirectoryConfig",
    "GraphConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SchedulerConfig",
    "SnapshotConfig",
    "configure_logging",
    "get_cleanup_config",
    "get_configmgr_config",
    "get_directory_config",
    "get_graph_config",
    "get_scheduler_config",
    "get_snapshot_config",
    "require_env_var",
    "require_env_vars",
]
