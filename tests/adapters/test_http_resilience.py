from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from hybridledger.adapters.http_resilience import build_retry, throttling_logger
from hybridledger.config.http_resilience import RetryPolicy


def _response(status: int, **headers: str) -> httpx.Response:
    request = httpx.Request("GET", "https://graph.microsoft.com/v1.0/devices")
    return httpx.Response(status, headers=headers, request=request)


def test_throttled_responses_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    hook = throttling_logger("graph")

    asyncio.run(hook(_response(429, **{"Retry-After": "7"})))

    assert "graph throttled GET /v1.0/devices (HTTP 429, Retry-After=7)" in caplog.text


def test_successful_responses_are_not_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    asyncio.run(throttling_logger("graph")(_response(200)))

    assert caplog.records == []


def test_delete_is_never_retried() -> None:
    retry = build_retry(RetryPolicy())

    assert retry.is_retryable_method("GET")
    assert not retry.is_retryable_method("DELETE")
