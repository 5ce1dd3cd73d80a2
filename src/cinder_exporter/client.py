"""OpenStack APIクライアント

keystoneauth1のAdapterを薄くラップし、ページングされた一覧APIを
最後のページまで辿るイテレーターを提供します。認証・リトライは
keystoneauth1のセッション側に任せます。
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import openstack
import structlog
from keystoneauth1.adapter import Adapter

from cinder_exporter.config import OpenStackConfig
from cinder_exporter.endpoints import EndpointOptions
from cinder_exporter.exceptions import CloudConnectionError, ExtractionError

logger = structlog.get_logger()

BLOCK_STORAGE_SERVICE_TYPE = "block-storage"


def _next_page_url(body: dict[str, Any], resource_key: str) -> str | None:
    """ページ本文から次ページのURLを取り出す

    Cinder形式 (``<resource>_links`` の rel=next) と
    Keystone形式 (``links.next``) の両方に対応します。
    """
    for link in body.get(f"{resource_key}_links") or []:
        if link.get("rel") == "next":
            return link.get("href")
    links = body.get("links")
    if isinstance(links, dict):
        return links.get("next")
    return None


class PageIterator:
    """一覧APIのページイテレーター

    1ページにつき1回のHTTPリクエストを発行し、次ページのリンクが
    なくなるまで辿ります。転送エラーはそのまま呼び出し元へ伝播します。
    """

    def __init__(self, adapter: Adapter, path: str, resource_key: str, params: dict[str, Any]) -> None:
        self.adapter = adapter
        self.path = path
        self.resource_key = resource_key
        self.params = params

    def __iter__(self) -> Iterator[dict[str, Any]]:
        url: str | None = self.path
        params: dict[str, Any] | None = self.params
        seen: set[str] = set()
        while url:
            if url in seen:
                raise ExtractionError(f"pagination loop detected for {self.resource_key}: {url}")
            seen.add(url)
            body = self.adapter.get(url, params=params).json()
            yield body
            url = _next_page_url(body, self.resource_key)
            # 次ページURLにはクエリが含まれる
            params = None

    def all_pages(self) -> list[dict[str, Any]]:
        """すべてのページを取得してリストで返す"""
        pages = list(self)
        logger.debug("ページ取得完了", resource=self.resource_key, pages=len(pages))
        return pages


class CloudClient:
    """サービス単位のAPIクライアント"""

    def __init__(self, adapter: Adapter) -> None:
        self.adapter = adapter

    def list(self, path: str, resource_key: str, **filters: Any) -> PageIterator:
        """一覧APIのページイテレーターを作成（リクエストはまだ発行しない）"""
        return PageIterator(self.adapter, path, resource_key, dict(filters))

    def get(self, path: str, **params: Any) -> dict[str, Any]:
        """単一リソースを取得してJSON本文を返す"""
        return self.adapter.get(path, params=params or None).json()

    def for_service(
        self, service_type: str, options: EndpointOptions, version: str | None = None
    ) -> CloudClient:
        """同じ認証セッションを共有する別サービスのクライアントを作成

        再認証せずにトークンを使い回します。version を指定すると、カタログの
        エンドポイントにバージョンが含まれない場合もバージョン探索で解決します。
        """
        adapter = Adapter(
            session=self.adapter.session,
            service_type=service_type,
            interface=options.interface,
            region_name=options.region_name,
            version=version,
        )
        return CloudClient(adapter)


def connect(config: OpenStackConfig) -> CloudClient:
    """clouds.yaml / OS_* 環境変数から認証し、Block Storageクライアントを返す

    Raises:
        CloudConnectionError: 認証設定の読み込みまたはセッション確立に失敗した場合
    """
    log = logger.bind(cloud=config.cloud, interface=config.interface, region=config.region_name)
    try:
        conn = openstack.connect(cloud=config.cloud, region_name=config.region_name)
    except Exception as e:
        log.error("OpenStack接続エラー", error=str(e))
        raise CloudConnectionError(f"接続失敗: {e}") from e

    log.info("OpenStack接続完了")
    adapter = Adapter(
        session=conn.session,
        service_type=BLOCK_STORAGE_SERVICE_TYPE,
        interface=config.interface,
        region_name=config.region_name,
    )
    return CloudClient(adapter)
