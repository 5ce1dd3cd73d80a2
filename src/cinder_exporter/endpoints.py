"""エンドポイント解決

論理サービス名ごとの接続オプションから、セカンダリクライアント
（プロジェクト一覧取得用のIdentityクライアント）に使うオプションを選びます。
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog
from pydantic import BaseModel, ConfigDict

from cinder_exporter.exceptions import EndpointResolutionError

logger = structlog.get_logger()

IDENTITY_SERVICE = "identity"
CINDER_SERVICE = "cinder"


class EndpointOptions(BaseModel):
    """サービスカタログからエンドポイントを選ぶための接続オプション"""

    model_config = ConfigDict(frozen=True)

    interface: str = "public"
    region_name: str | None = None


def resolve_endpoint_options(
    endpoint_options: Mapping[str, EndpointOptions],
    preferred: str = IDENTITY_SERVICE,
    fallback: str = CINDER_SERVICE,
) -> EndpointOptions:
    """優先サービス、フォールバックサービスの順に接続オプションを選択

    Args:
        endpoint_options: 論理サービス名 -> 接続オプション
        preferred: 優先して使うサービス名
        fallback: 優先サービスがない場合に使うサービス名

    Returns:
        選択された接続オプション

    Raises:
        EndpointResolutionError: どちらのキーも存在しない場合
    """
    if preferred in endpoint_options:
        return endpoint_options[preferred]
    if fallback in endpoint_options:
        logger.debug("フォールバックの接続オプションを使用", preferred=preferred, fallback=fallback)
        return endpoint_options[fallback]
    raise EndpointResolutionError(f"no connection options available to build the {preferred} client")
