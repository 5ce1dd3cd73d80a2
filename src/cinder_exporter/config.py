"""設定管理

OpenStack接続設定とエクスポーター設定を管理します。
環境変数とDocker Secretsに対応しています。設定はエクスポーター作成時に
一度だけ読み込み、スクレイプ中は再読み込みしません。
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from cinder_exporter.endpoints import CINDER_SERVICE, IDENTITY_SERVICE, EndpointOptions


def get_env_or_file(name: str, default: str = "") -> str:
    """環境変数または _FILE で指定されたファイルから値を取得"""
    file_path = os.getenv(f"{name}_FILE")
    if file_path and Path(file_path).exists():
        return Path(file_path).read_text().strip()
    return os.getenv(name, default)


def parse_metric_list(value: str) -> frozenset[str]:
    """カンマ区切りのメトリクス名を集合に変換"""
    return frozenset(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class OpenStackConfig:
    """OpenStack接続設定

    認証情報そのものは clouds.yaml / OS_* 環境変数から openstacksdk が読み込みます。
    """

    cloud: str = "openstack"
    interface: str = "public"
    region_name: str | None = None
    # 設定した場合のみIdentity専用の接続オプションを作る
    identity_interface: str | None = None

    @classmethod
    def from_env(cls) -> OpenStackConfig:
        """環境変数から設定を読み込む"""
        return cls(
            cloud=get_env_or_file("OS_CLOUD", "openstack"),
            interface=os.getenv("OS_INTERFACE", "public"),
            region_name=os.getenv("OS_REGION_NAME") or None,
            identity_interface=os.getenv("CINDER_EXPORTER_IDENTITY_INTERFACE") or None,
        )

    def endpoint_options(self) -> dict[str, EndpointOptions]:
        """論理サービス名 -> 接続オプションのマップを作成"""
        options = {CINDER_SERVICE: EndpointOptions(interface=self.interface, region_name=self.region_name)}
        if self.identity_interface:
            options[IDENTITY_SERVICE] = EndpointOptions(
                interface=self.identity_interface,
                region_name=self.region_name,
            )
        return options


@dataclass(frozen=True)
class ExporterConfig:
    """エクスポーター設定"""

    prefix: str = "openstack"
    disabled_metrics: frozenset[str] = frozenset()
    max_workers: int = 4

    @classmethod
    def from_env(cls) -> ExporterConfig:
        """環境変数から設定を読み込む"""

        def get_int(key: str, default: int) -> int:
            value = os.getenv(key)
            if value:
                try:
                    parsed = int(value)
                except ValueError:
                    return default
                return parsed if parsed > 0 else default
            return default

        return cls(
            prefix=os.getenv("CINDER_EXPORTER_PREFIX", "openstack"),
            disabled_metrics=parse_metric_list(os.getenv("CINDER_EXPORTER_DISABLED_METRICS", "")),
            max_workers=get_int("CINDER_EXPORTER_MAX_WORKERS", 4),
        )


@dataclass
class AppConfig:
    """アプリケーション全体の設定"""

    openstack: OpenStackConfig
    exporter: ExporterConfig

    @classmethod
    def from_env(cls) -> AppConfig:
        """環境変数からすべての設定を読み込む"""
        return cls(
            openstack=OpenStackConfig.from_env(),
            exporter=ExporterConfig.from_env(),
        )
