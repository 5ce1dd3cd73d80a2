"""データモデル

メトリクス宣言とサンプルを定義します。
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cinder_exporter.exporter import BaseOpenStackExporter
    from cinder_exporter.sink import SampleSink

MetricFn = Callable[["BaseOpenStackExporter", "SampleSink"], None]


class MetricKind(enum.Enum):
    """サンプルの値の種類"""

    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDeclaration:
    """エクスポーター内で一意な名前を持つメトリクス宣言

    fn が None の宣言は、同じエクスポーターの別のコレクター関数が値を出力します
    （例: limits_used は limits_max のコレクターが出力）。
    """

    name: str
    labels: tuple[str, ...] = ()
    fn: MetricFn | None = None
    description: str = ""

    @property
    def has_collector(self) -> bool:
        return self.fn is not None


@dataclass(frozen=True)
class Sample:
    """1つのデータポイント（ラベル値は宣言のラベル順）"""

    metric: MetricDeclaration
    kind: MetricKind
    value: float
    label_values: tuple[str, ...] = ()

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.metric.labels, self.label_values))
