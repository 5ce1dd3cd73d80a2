"""カスタム例外クラス

エンドポイント解決・レスポンス展開・サンプル出力・接続時のエラーを分類します。
コレクター関数内の転送エラーはkeystoneauth1の例外のまま伝播します。
"""

from __future__ import annotations


class ExporterError(Exception):
    """エクスポーター関連エラーの基底クラス"""


class EndpointResolutionError(ExporterError):
    """エンドポイント解決エラー

    セカンダリクライアントを作るための接続オプションが見つからない場合に発生します。
    """


class ExtractionError(ExporterError):
    """レスポンス展開エラー

    APIレスポンスのページから型付きレコードを取り出せなかった場合に発生します。
    """


class SinkClosedError(ExporterError):
    """クローズ済みのサンプルシンクへ書き込もうとした場合に発生します。"""


class CloudConnectionError(ExporterError):
    """OpenStack接続エラー

    認証設定の読み込みまたはセッションの確立に失敗した場合に発生します。
    """
