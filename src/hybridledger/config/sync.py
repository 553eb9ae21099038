"""Scheduling and cleanup defaults for the reconciliation worker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from .env import env_bool, env_float, env_int, optional_env
from .errors import MissingConfigurationError

DEFAULT_INTERVAL_MINUTES = 60.0
DEFAULT_STARTUP_DELAY_SECONDS = 10.0
DEFAULT_FRESH_WINDOW_DAYS = 30
DEFAULT_INACTIVE_DAYS = 90
DEFAULT_OBSOLETE_DAYS = 7
DEFAULT_CONFIGMGR_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class SchedulerConfig:
    interval: timedelta = timedelta(minutes=DEFAULT_INTERVAL_MINUTES)
    startup_delay: timedelta = timedelta(seconds=DEFAULT_STARTUP_DELAY_SECONDS)


@dataclass(frozen=True, slots=True)
class CleanupConfig:
    enabled: bool = False
    dry_run: bool = True
    delete_entra: bool = False
    delete_intune: bool = False
    fresh_window_days: int = DEFAULT_FRESH_WINDOW_DAYS


@dataclass(frozen=True, slots=True)
class ConfigManagerConfig:
    """Configuration Manager AdminService settings."""

    enabled: bool = False
    base_url: str | None = None
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    inactive_days_threshold: int = DEFAULT_INACTIVE_DAYS
    obsolete_days_threshold: int = DEFAULT_OBSOLETE_DAYS
    timeout_seconds: float = DEFAULT_CONFIGMGR_TIMEOUT_SECONDS

    @property
    def admin_service_url(self) -> str:
        if not self.base_url:
            raise MissingConfigurationError("Missing configuration for: CONFIGMGR_BASE_URL")
        return self.base_url.rstrip("/") + "/AdminService/v1.0/"


def get_scheduler_config() -> SchedulerConfig:
    return SchedulerConfig(
        interval=timedelta(
            minutes=env_float("SCHEDULER_INTERVAL_MINUTES", DEFAULT_INTERVAL_MINUTES)
        ),
        startup_delay=timedelta(
            seconds=env_float("SCHEDULER_STARTUP_DELAY_SECONDS", DEFAULT_STARTUP_DELAY_SECONDS)
        ),
    )


def get_cleanup_config() -> CleanupConfig:
    return CleanupConfig(
        enabled=env_bool("CLEANUP_ENABLED", False),
        dry_run=env_bool("CLEANUP_DRY_RUN", True),
        delete_entra=env_bool("CLEANUP_DELETE_ENTRA", False),
        delete_intune=env_bool("CLEANUP_DELETE_INTUNE", False),
        fresh_window_days=env_int(
            "CLEANUP_FRESH_WINDOW_DAYS", DEFAULT_FRESH_WINDOW_DAYS, minimum=0
        ),
    )


def get_configmgr_config() -> ConfigManagerConfig:
    enabled = env_bool("CONFIGMGR_ENABLED", False)
    base_url = optional_env("CONFIGMGR_BASE_URL")
    if enabled and base_url is None:
        raise MissingConfigurationError("Missing configuration for: CONFIGMGR_BASE_URL")
    return ConfigManagerConfig(
        enabled=enabled,
        base_url=base_url,
        username=optional_env("CONFIGMGR_USERNAME"),
        password=optional_env("CONFIGMGR_PASSWORD"),
        inactive_days_threshold=env_int(
            "CONFIGMGR_INACTIVE_DAYS", DEFAULT_INACTIVE_DAYS, minimum=0
        ),
        obsolete_days_threshold=env_int(
            "CONFIGMGR_OBSOLETE_DAYS", DEFAULT_OBSOLETE_DAYS, minimum=0
        ),
        timeout_seconds=env_float("CONFIGMGR_TIMEOUT_SECONDS", DEFAULT_CONFIGMGR_TIMEOUT_SECONDS),
    )
