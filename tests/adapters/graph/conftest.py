"""Shared fixtures for Microsoft Graph adapter tests."""

from __future__ import annotations

import pytest

from hybridledger.config.graph import GraphConfig, graph_resilience


@pytest.fixture
def graph_config() -> GraphConfig:
    return GraphConfig(
        tenant_id="tenant-1",
        client_id="client-1",
        client_secret="secret",  # noqa: S106
        resilience=graph_resilience(timeout_seconds=5),
    )
