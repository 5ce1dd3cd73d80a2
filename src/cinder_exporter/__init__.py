"""OpenStack Cinder メトリクスエクスポーター

Block Storage APIからボリューム・スナップショット・サービス状態・
プロジェクト別クォータを収集し、Prometheus形式のサンプルとして出力します。

Usage:
    uv run python -m cinder_exporter collect
    uv run python -m cinder_exporter metrics --disable-metric volume_status
"""

from cinder_exporter.exporter import BaseOpenStackExporter
from cinder_exporter.models import MetricDeclaration, MetricKind, Sample

__all__ = ["BaseOpenStackExporter", "MetricDeclaration", "MetricKind", "Sample"]
__version__ = "0.1.0"
