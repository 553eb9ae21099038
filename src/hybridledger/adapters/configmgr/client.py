"""HTTP client for the Configuration Manager AdminService."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from hybridledger.adapters.http_resilience import ResilientClient
from hybridledger.config.http_resilience import ResilienceConfig
from hybridledger.domain.errors import DeletionError, TransportError
from hybridledger.domain.ports import CmDevice

from .schema import AdminServiceDevice, AdminServicePage

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from hybridledger.config.sync import ConfigManagerConfig

log = getLogger(__name__)

DEVICES_PATH = "Devices"
SOURCE = "configmgr"


class ConfigManagerAPIError(TransportError):
    """Raised when the AdminService rejects a request or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message, source=SOURCE)
        self.status_code = status_code


def configmgr_resilience(config: ConfigManagerConfig) -> ResilienceConfig:
    return ResilienceConfig(
        name="configmgr",
        base_url=config.admin_service_url,
        timeout_seconds=config.timeout_seconds,
        default_headers={"Accept": "application/json"},
    )


def _raw_records(payload: object) -> list[dict[str, object]]:
    if isinstance(payload, list):
        return [entry for entry in payload if isinstance(entry, dict)]
    try:
        return AdminServicePage.model_validate(payload).value
    except ValidationError as exc:
        raise ConfigManagerAPIError("Unexpected AdminService payload for Devices") from exc


def to_cm_device(raw: dict[str, object]) -> CmDevice:
    parsed = AdminServiceDevice.model_validate(raw)
    return CmDevice(
        resource_id=parsed.resource_id,
        name=parsed.name,
        client_active_status=parsed.client_active_status or 0,
        is_obsolete=parsed.is_obsolete or 0,
        last_online_time=parsed.last_online_time,
    )


class ConfigManagerClient:
    """Device queries and deletes against ``<base>/AdminService/v1.0/``.

    Credentials, when configured, are sent as HTTP basic auth.
    """

    def __init__(
        self,
        *,
        config: ConfigManagerConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = configmgr_resilience(config)
        self._client_factory = client_factory or ResilientClient
        self._auth = (
            httpx.BasicAuth(config.username, config.password or "")
            if config.username
            else None
        )

    def fetch_where(self, odata_filter: str | None = None) -> Iterator[CmDevice]:
        records = asyncio.run(self._fetch_async(odata_filter))
        for raw in records:
            try:
                yield to_cm_device(raw)
            except ValidationError as exc:
                log.warning("Skipping AdminService record %s: %s", raw.get("ResourceId"), exc)

    def delete_by_resource_id(self, resource_id: int) -> bool:
        """Return ``False`` when the device no longer exists."""

        return asyncio.run(self._delete_async(resource_id))

    async def _fetch_async(self, odata_filter: str | None) -> list[dict[str, object]]:
        params = {"$filter": odata_filter} if odata_filter and odata_filter.strip() else None
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.get(DEVICES_PATH, params=params, auth=self._auth)
            except httpx.HTTPError as exc:
                raise ConfigManagerAPIError(f"AdminService request failed: {exc}") from exc
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise ConfigManagerAPIError(
                "Unauthorized to Configuration Manager AdminService",
                status_code=response.status_code,
            )
        if response.is_error:
            raise ConfigManagerAPIError(
                f"AdminService GET Devices failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ConfigManagerAPIError("AdminService returned invalid JSON") from exc
        records = _raw_records(payload)
        log.debug("Fetched %s AdminService records (filter=%s)", len(records), odata_filter)
        return records

    async def _delete_async(self, resource_id: int) -> bool:
        path = f"wmi/Devices({resource_id})"
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.delete(path, auth=self._auth)
            except httpx.HTTPError as exc:
                raise DeletionError(
                    f"AdminService delete of {resource_id} failed: {exc}",
                    source=SOURCE,
                    device_id=resource_id,
                ) from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            return False
        if response.is_error:
            raise DeletionError(
                f"AdminService delete of {resource_id} failed with HTTP {response.status_code}",
                source=SOURCE,
                device_id=resource_id,
            )
        return True
