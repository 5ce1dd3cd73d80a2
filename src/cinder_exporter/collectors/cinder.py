"""Cinder (Block Storage) コレクター

ボリューム・スナップショット・サービス状態・プロジェクト別クォータを収集します。
各コレクター関数は最初に発生したエラーをそのまま伝播させ、
そのメトリクスの以降のサンプルは出力しません。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import structlog

from cinder_exporter.client import CloudClient
from cinder_exporter.endpoints import CINDER_SERVICE, IDENTITY_SERVICE, EndpointOptions, resolve_endpoint_options
from cinder_exporter.exporter import BaseOpenStackExporter
from cinder_exporter.models import MetricKind
from cinder_exporter.resources import (
    extract_projects,
    extract_quota_set,
    extract_quota_usage,
    extract_services,
    extract_snapshots,
    extract_volumes,
)
from cinder_exporter.sink import SampleSink
from cinder_exporter.status import volume_status_ordinal

logger = structlog.get_logger()

EXPORTER_NAME = "cinder"
IDENTITY_SERVICE_TYPE = "identity"
IDENTITY_API_VERSION = "3"


def list_volumes(exporter: BaseOpenStackExporter, sink: SampleSink) -> None:
    """全テナントのボリューム数と、ボリュームごとのステータス序数を出力"""
    log = logger.bind(collector="volumes")
    log.debug("ボリューム一覧取得開始")

    pages = exporter.client.list("/volumes/detail", "volumes", all_tenants=True).all_pages()
    volumes = extract_volumes(pages)

    sink.emit(exporter.metrics["volumes"], MetricKind.GAUGE, len(volumes))

    if exporter.is_enabled("volume_status"):
        volume_status = exporter.metrics["volume_status"]
        for volume in volumes:
            sink.emit(
                volume_status,
                MetricKind.GAUGE,
                volume_status_ordinal(volume.status),
                volume.id,
                volume.name,
                volume.status,
                volume.bootable,
                volume.tenant_id,
                str(volume.size),
                volume.volume_type,
            )
    log.info("データ収集完了", count=len(volumes))


def list_snapshots(exporter: BaseOpenStackExporter, sink: SampleSink) -> None:
    """全テナントのスナップショット数を出力"""
    pages = exporter.client.list("/snapshots/detail", "snapshots", all_tenants=True).all_pages()
    snapshots = extract_snapshots(pages)

    sink.emit(exporter.metrics["snapshots"], MetricKind.GAUGE, len(snapshots))
    logger.info("データ収集完了", collector="snapshots", count=len(snapshots))


def list_agent_state(exporter: BaseOpenStackExporter, sink: SampleSink) -> None:
    """Cinderサービスごとに稼働状態 (state == "up" なら1) を出力"""
    pages = exporter.client.list("/os-services", "services").all_pages()
    services = extract_services(pages)

    agent_state = exporter.metrics["agent_state"]
    for service in services:
        state = 1 if service.state == "up" else 0
        sink.emit(
            agent_state,
            MetricKind.COUNTER,
            state,
            service.host,
            service.binary,
            service.status,
            service.zone,
        )
    logger.info("データ収集完了", collector="agent_state", count=len(services))


def list_limits(exporter: BaseOpenStackExporter, sink: SampleSink) -> None:
    """プロジェクトごとのストレージクォータ上限と使用量 (GB) を出力

    プロジェクト一覧はIdentity APIから取得するため、同じセッションで
    Identityクライアントを作成します。途中のプロジェクトで失敗した場合は
    以降のプロジェクトを処理せずにエラーを伝播します。

    Raises:
        EndpointResolutionError: Identityクライアント用の接続オプションがない場合
    """
    log = logger.bind(collector="limits")
    options = resolve_endpoint_options(exporter.endpoint_options, IDENTITY_SERVICE, CINDER_SERVICE)
    identity = exporter.client.for_service(IDENTITY_SERVICE_TYPE, options, version=IDENTITY_API_VERSION)

    projects = extract_projects(identity.list("/projects", "projects").all_pages())
    log.debug("プロジェクト一覧取得完了", count=len(projects))

    limits_max = exporter.metrics["limits_max"]
    limits_used = exporter.metrics["limits_used"]
    emit_used = exporter.is_enabled("limits_used")
    for project in projects:
        quota = extract_quota_set(exporter.client.get(f"/os-quota-sets/{project.id}"))
        usage = extract_quota_usage(exporter.client.get(f"/os-quota-sets/{project.id}", usage=True))

        sink.emit(limits_max, MetricKind.GAUGE, quota.gigabytes, project.name)
        if emit_used:
            sink.emit(limits_used, MetricKind.GAUGE, usage.gigabytes.in_use, project.name)
    log.info("データ収集完了", count=len(projects))


DEFAULT_CINDER_METRICS = [
    ("volumes", list_volumes, (), "Number of volumes across all tenants"),
    ("snapshots", list_snapshots, (), "Number of snapshots across all tenants"),
    (
        "agent_state",
        list_agent_state,
        ("hostname", "service", "adminState", "zone"),
        "Cinder service state (1 = up), exposed as a counter with the _total suffix",
    ),
    (
        "volume_status",
        None,
        ("id", "name", "status", "bootable", "tenant_id", "size", "volume_type"),
        "Volume status as an ordinal of the known lifecycle statuses (-1 = unknown)",
    ),
    ("limits_max", list_limits, ("tenant",), "Block storage quota limit per tenant in GB"),
    ("limits_used", None, ("tenant",), "Block storage quota usage per tenant in GB"),
]


def new_cinder_exporter(
    client: CloudClient,
    prefix: str = "openstack",
    disabled_metrics: Iterable[str] = (),
    endpoint_options: Mapping[str, EndpointOptions] | None = None,
    max_workers: int = 4,
) -> BaseOpenStackExporter:
    """Cinderのメトリクス宣言を登録したエクスポーターを作成"""
    exporter = BaseOpenStackExporter(
        name=EXPORTER_NAME,
        prefix=prefix,
        client=client,
        disabled_metrics=disabled_metrics,
        endpoint_options=endpoint_options,
        max_workers=max_workers,
    )
    for name, fn, labels, description in DEFAULT_CINDER_METRICS:
        exporter.add_metric(name, fn, labels, description)
    return exporter
