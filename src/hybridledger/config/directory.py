"""On-premises directory (LDAP) configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_bool, env_int, env_list, env_str, optional_env, require_env_vars

DEFAULT_COMPUTER_FILTER = "(&(objectCategory=computer)(objectClass=computer))"
DEFAULT_LDAPS_PORT = 636
DEFAULT_PAGE_SIZE = 500
DEFAULT_ACTIVITY_WINDOW_DAYS = 30
LDAP_TIMEOUT_SECONDS = 30


@dataclass(frozen=True, slots=True)
class DirectoryConfig:
    """Connection and query settings for the directory of record."""

    server: str
    base_dn: str
    port: int = DEFAULT_LDAPS_PORT
    use_ssl: bool = True
    allow_invalid_certificates: bool = False
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    search_filter: str = DEFAULT_COMPUTER_FILTER
    page_size: int = DEFAULT_PAGE_SIZE
    activity_window_days: int = DEFAULT_ACTIVITY_WINDOW_DAYS
    additional_attributes: tuple[str, ...] = ()
    timeout_seconds: int = LDAP_TIMEOUT_SECONDS


def get_directory_config() -> DirectoryConfig:
    values = require_env_vars(("LDAP_SERVER", "LDAP_BASE_DN"))
    return DirectoryConfig(
        server=values["LDAP_SERVER"],
        base_dn=values["LDAP_BASE_DN"],
        port=env_int("LDAP_PORT", DEFAULT_LDAPS_PORT),
        use_ssl=env_bool("LDAP_USE_SSL", True),
        allow_invalid_certificates=env_bool("LDAP_ALLOW_INVALID_CERTIFICATES", False),
        username=optional_env("LDAP_USERNAME"),
        password=optional_env("LDAP_PASSWORD"),
        search_filter=env_str("LDAP_FILTER", DEFAULT_COMPUTER_FILTER),
        page_size=env_int("LDAP_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        activity_window_days=env_int(
            "LDAP_ACTIVITY_WINDOW_DAYS", DEFAULT_ACTIVITY_WINDOW_DAYS, minimum=0
        ),
        additional_attributes=env_list("LDAP_ADDITIONAL_ATTRIBUTES"),
    )
