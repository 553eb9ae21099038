"""Microsoft Graph configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_float, env_list, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0/"
GRAPH_LOGIN_URL = "https://login.microsoftonline.com"
DEFAULT_GRAPH_SCOPES = ("https://graph.microsoft.com/.default",)
GRAPH_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class GraphConfig:
    """Holds Microsoft Graph credentials and transport settings."""

    tenant_id: str
    client_id: str
    client_secret: str = field(repr=False)
    resilience: ResilienceConfig
    scopes: tuple[str, ...] = DEFAULT_GRAPH_SCOPES
    login_url: str = GRAPH_LOGIN_URL

    @property
    def token_url(self) -> str:
        return f"{self.login_url.rstrip('/')}/{self.tenant_id}/oauth2/v2.0/token"


def graph_resilience(*, timeout_seconds: float = GRAPH_TIMEOUT_SECONDS) -> ResilienceConfig:
    return ResilienceConfig(
        name="graph",
        base_url=GRAPH_BASE_URL,
        timeout_seconds=timeout_seconds,
        retry=RetryPolicy(total=4),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


def get_graph_config(*, resilience: ResilienceConfig | None = None) -> GraphConfig:
    values = require_env_vars(("GRAPH_TENANT_ID", "GRAPH_CLIENT_ID", "GRAPH_CLIENT_SECRET"))
    timeout = env_float("GRAPH_REQUEST_TIMEOUT_SECONDS", GRAPH_TIMEOUT_SECONDS)
    return GraphConfig(
        tenant_id=values["GRAPH_TENANT_ID"],
        client_id=values["GRAPH_CLIENT_ID"],
        client_secret=values["GRAPH_CLIENT_SECRET"],
        resilience=resilience or graph_resilience(timeout_seconds=timeout),
        scopes=env_list("GRAPH_SCOPES", DEFAULT_GRAPH_SCOPES),
    )
