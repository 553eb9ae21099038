"""HTTP client for the Microsoft Graph device endpoints."""

from __future__ import annotations

import asyncio
import time
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from hybridledger.adapters.http_resilience import ResilientClient
from hybridledger.domain.errors import TransportError

from .schema import GraphErrorResponse, GraphPage, TokenResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from hybridledger.config.graph import GraphConfig
    from hybridledger.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

PAGE_SIZE = 999
_TOKEN_REFRESH_MARGIN_SECONDS = 120.0


class GraphAPIError(TransportError):
    """Raised when Microsoft Graph rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, source="graph")
        self.status_code = status_code
        self.code = code


def _error_from_response(response: httpx.Response, action: str) -> GraphAPIError:
    code: str | None = None
    detail = response.reason_phrase
    try:
        error = GraphErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        pass
    else:
        code = error.error.code
        detail = error.error.message or detail
    return GraphAPIError(
        f"Graph {action} failed with HTTP {response.status_code}: {detail}",
        status_code=response.status_code,
        code=code,
    )


class GraphClient:
    """Low-level client: client-credentials auth, paged collection reads, deletes.

    The public methods are synchronous; each call runs its own event loop and
    HTTP session. The bearer token is reused across calls until shortly before
    it expires.
    """

    def __init__(
        self,
        *,
        config: GraphConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._monotonic = monotonic
        self._token: str | None = None
        self._token_expires_at = 0.0

    def list_collection(self, path: str, *, select: Sequence[str]) -> list[dict[str, object]]:
        """Return every raw entry of ``path``, following ``@odata.nextLink``."""

        return asyncio.run(self._list_collection_async(path, select=select))

    def delete(self, path: str) -> None:
        asyncio.run(self._delete_async(path))

    async def _list_collection_async(
        self,
        path: str,
        *,
        select: Sequence[str],
    ) -> list[dict[str, object]]:
        entries: list[dict[str, object]] = []
        params: dict[str, str] | None = {"$top": str(PAGE_SIZE), "$select": ",".join(select)}
        url = path
        async with self._client_factory(self._resilience) as client:
            while True:
                headers = await self._auth_headers(client)
                try:
                    response = await client.get(url, params=params, headers=headers)
                except httpx.HTTPError as exc:
                    raise GraphAPIError(f"Graph request for {path} failed: {exc}") from exc
                if response.is_error:
                    raise _error_from_response(response, f"GET {path}")
                try:
                    page = GraphPage.model_validate(response.json())
                except (ValueError, ValidationError) as exc:
                    raise GraphAPIError(f"Unexpected Graph payload for {path}") from exc
                entries.extend(page.value)
                if not page.next_link:
                    break
                # nextLink already carries every query option
                url = page.next_link
                params = None
        log.debug("Fetched %s raw entries from %s", len(entries), path)
        return entries

    async def _delete_async(self, path: str) -> None:
        async with self._client_factory(self._resilience) as client:
            headers = await self._auth_headers(client)
            try:
                response = await client.delete(path, headers=headers)
            except httpx.HTTPError as exc:
                raise GraphAPIError(f"Graph delete of {path} failed: {exc}") from exc
            if response.is_error:
                raise _error_from_response(response, f"DELETE {path}")

    async def _auth_headers(self, client: ResilientClient) -> dict[str, str]:
        token = await self._access_token(client)
        return {"Authorization": f"Bearer {token}"}

    async def _access_token(self, client: ResilientClient) -> str:
        now = self._monotonic()
        if self._token is not None and now < self._token_expires_at:
            return self._token

        data = {
            "grant_type": "client_credentials",
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "scope": " ".join(self._config.scopes),
        }
        try:
            response = await client.post(self._config.token_url, data=data)
        except httpx.HTTPError as exc:
            raise GraphAPIError(f"Token request failed: {exc}") from exc
        if response.is_error:
            raise GraphAPIError(
                f"Token request rejected with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            token = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise GraphAPIError("Unexpected token endpoint payload") from exc

        self._token = token.access_token
        self._token_expires_at = now + max(
            token.expires_in - _TOKEN_REFRESH_MARGIN_SECONDS, 0.0
        )
        return self._token
