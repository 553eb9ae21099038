from __future__ import annotations

import base64

import httpx
import pytest

from hybridledger.adapters.configmgr import ConfigManagerAPIError, ConfigManagerClient
from hybridledger.config.sync import ConfigManagerConfig
from hybridledger.domain.errors import DeletionError
from hybridledger.domain.ports import CmDevice
from tests.support.http import make_client_factory


def _config(**overrides: object) -> ConfigManagerConfig:
    values: dict[str, object] = {
        "enabled": True,
        "base_url": "https://sccm.corp.example/",
        "username": "CORP\\svc-ledger",
        "password": "hunter2",
    }
    values.update(overrides)
    return ConfigManagerConfig(**values)  # type: ignore[arg-type]


def test_fetch_where_sends_filter_and_maps_records() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "value": [
                    {
                        "ResourceId": 16777220,
                        "Name": "PC-1",
                        "IsObsolete": 1,
                        "ClientActiveStatus": None,
                        "LastOnlineTime": "2025-01-02T03:04:05Z",
                    },
                    {"Name": "no id"},
                ]
            },
        )

    client = ConfigManagerClient(config=_config(), client_factory=make_client_factory(handler))

    devices = list(client.fetch_where("IsObsolete eq 1"))

    assert devices == [
        CmDevice(
            resource_id=16777220,
            name="PC-1",
            client_active_status=0,
            is_obsolete=1,
            last_online_time="2025-01-02T03:04:05Z",
        )
    ]
    (request,) = requests
    assert request.url.path == "/AdminService/v1.0/Devices"
    assert request.url.params["$filter"] == "IsObsolete eq 1"
    expected = base64.b64encode(b"CORP\\svc-ledger:hunter2").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


def test_fetch_where_accepts_bare_array() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"ResourceId": 1}, {"ResourceId": 2}])

    client = ConfigManagerClient(
        config=_config(username=None, password=None),
        client_factory=make_client_factory(handler),
    )

    assert [device.resource_id for device in client.fetch_where()] == [1, 2]


def test_unauthorized_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401)

    client = ConfigManagerClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(ConfigManagerAPIError, match="Unauthorized") as excinfo:
        list(client.fetch_where("ClientActiveStatus eq 0"))

    assert excinfo.value.status_code == 401
    assert excinfo.value.source == "configmgr"


def test_delete_by_resource_id() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        status = 404 if "(2)" in request.url.path else 200
        return httpx.Response(status)

    client = ConfigManagerClient(config=_config(), client_factory=make_client_factory(handler))

    assert client.delete_by_resource_id(1) is True
    assert client.delete_by_resource_id(2) is False
    assert paths == [
        "/AdminService/v1.0/wmi/Devices(1)",
        "/AdminService/v1.0/wmi/Devices(2)",
    ]


def test_delete_server_error_raises_deletion_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    client = ConfigManagerClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(DeletionError) as excinfo:
        client.delete_by_resource_id(3)

    assert excinfo.value.device_id == 3
