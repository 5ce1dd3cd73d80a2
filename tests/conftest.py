"""共通テストフィクスチャ"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from cinder_exporter.client import CloudClient
from cinder_exporter.collectors import new_cinder_exporter
from cinder_exporter.endpoints import EndpointOptions
from cinder_exporter.exporter import BaseOpenStackExporter
from cinder_exporter.sink import SampleSink


def json_response(body: dict[str, Any]) -> MagicMock:
    """json() が body を返すモックレスポンス"""
    response = MagicMock()
    response.json.return_value = body
    return response


@pytest.fixture
def mock_client() -> MagicMock:
    """モックCloudClient"""
    return MagicMock(spec=CloudClient)


@pytest.fixture
def sink() -> SampleSink:
    return SampleSink()


@pytest.fixture
def endpoint_options() -> dict[str, EndpointOptions]:
    return {
        "identity": EndpointOptions(interface="internal", region_name="RegionOne"),
        "cinder": EndpointOptions(interface="public", region_name="RegionOne"),
    }


@pytest.fixture
def exporter(mock_client: MagicMock, endpoint_options: dict[str, EndpointOptions]) -> BaseOpenStackExporter:
    """モッククライアントを注入したCinderエクスポーター"""
    return new_cinder_exporter(mock_client, endpoint_options=endpoint_options)


@pytest.fixture
def sample_volume_pages() -> list[dict[str, Any]]:
    """サンプルボリューム一覧ページ（2ページ）"""
    return [
        {
            "volumes": [
                {
                    "id": "vol-1",
                    "name": "db-data",
                    "status": "available",
                    "bootable": "false",
                    "size": 100,
                    "volume_type": "ssd",
                    "os-vol-tenant-attr:tenant_id": "tenant-a",
                },
                {
                    "id": "vol-2",
                    "name": "web-root",
                    "status": "error",
                    "bootable": "true",
                    "size": 20,
                    "volume_type": "hdd",
                    "os-vol-tenant-attr:tenant_id": "tenant-b",
                },
            ],
        },
        {
            "volumes": [
                {
                    "id": "vol-3",
                    "name": None,
                    "status": "unknown-status",
                    "bootable": "false",
                    "size": 5,
                    "volume_type": None,
                    "os-vol-tenant-attr:tenant_id": "tenant-a",
                },
            ],
        },
    ]


@pytest.fixture
def sample_service_pages() -> list[dict[str, Any]]:
    """サンプルCinderサービス一覧ページ"""
    return [
        {
            "services": [
                {
                    "binary": "cinder-volume",
                    "host": "storage-1@lvm",
                    "zone": "nova",
                    "status": "enabled",
                    "state": "up",
                },
                {
                    "binary": "cinder-scheduler",
                    "host": "ctl-1",
                    "zone": "nova",
                    "status": "disabled",
                    "state": "down",
                },
                {
                    "binary": "cinder-backup",
                    "host": "ctl-2",
                    "zone": "az-2",
                    "status": "enabled",
                    "state": "Up",
                },
            ],
        },
    ]
