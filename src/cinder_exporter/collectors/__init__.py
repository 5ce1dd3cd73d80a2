"""OpenStackサービス別コレクター

各コレクター関数は (exporter, sink) を受け取り、APIから取得したレコードを
サンプルとしてシンクへ書き込みます。
"""

from cinder_exporter.collectors.cinder import (
    DEFAULT_CINDER_METRICS,
    list_agent_state,
    list_limits,
    list_snapshots,
    list_volumes,
    new_cinder_exporter,
)

__all__ = [
    "DEFAULT_CINDER_METRICS",
    "new_cinder_exporter",
    # Cinder collectors
    "list_volumes",
    "list_snapshots",
    "list_agent_state",
    "list_limits",
]
