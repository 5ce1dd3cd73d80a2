"""メトリクスレジストリ / ベースエクスポーター

メトリクス宣言を保持し、無効化されたメトリクスを除外したうえで、
スクレイプごとに各コレクター関数を実行します。1つのメトリクスの失敗は
他のメトリクスの収集を止めません。
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import structlog

from cinder_exporter.client import CloudClient
from cinder_exporter.endpoints import EndpointOptions
from cinder_exporter.models import MetricDeclaration, MetricFn
from cinder_exporter.sink import SampleSink

logger = structlog.get_logger()


@dataclass(frozen=True)
class MetricOutcome:
    """1メトリクス分のスクレイプ結果"""

    name: str
    duration_seconds: float
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class ScrapeReport:
    """スクレイプ全体の結果"""

    outcomes: dict[str, MetricOutcome] = field(default_factory=dict)

    @property
    def failed(self) -> list[str]:
        return [name for name, outcome in self.outcomes.items() if outcome.failed]

    @property
    def ok(self) -> bool:
        return not self.failed


class BaseOpenStackExporter:
    """OpenStackサービス単位のエクスポーター基底クラス

    Args:
        name: サービス名（メトリクス名の一部になる。例: cinder）
        prefix: メトリクス名のプレフィックス（例: openstack）
        client: 注入されたプライマリAPIクライアント
        disabled_metrics: 収集しないメトリクス名
        endpoint_options: 論理サービス名 -> 接続オプション
        max_workers: 同時に実行するコレクター関数の最大数
    """

    def __init__(
        self,
        name: str,
        prefix: str,
        client: CloudClient,
        disabled_metrics: Iterable[str] = (),
        endpoint_options: Mapping[str, EndpointOptions] | None = None,
        max_workers: int = 4,
    ) -> None:
        self.name = name
        self.prefix = prefix
        self.client = client
        self.disabled_metrics = frozenset(disabled_metrics)
        self.endpoint_options: Mapping[str, EndpointOptions] = dict(endpoint_options or {})
        self.max_workers = max(1, max_workers)
        self._metrics: dict[str, MetricDeclaration] = {}

    def add_metric(
        self,
        name: str,
        fn: MetricFn | None = None,
        labels: Iterable[str] = (),
        description: str = "",
    ) -> MetricDeclaration:
        """メトリクス宣言を登録

        Raises:
            ValueError: 同じ名前が既に登録されている場合
        """
        if name in self._metrics:
            raise ValueError(f"metric {name} is already registered in {self.name} exporter")
        declaration = MetricDeclaration(name=name, labels=tuple(labels), fn=fn, description=description)
        self._metrics[name] = declaration
        return declaration

    @property
    def metrics(self) -> dict[str, MetricDeclaration]:
        return dict(self._metrics)

    @property
    def enabled_metrics(self) -> list[MetricDeclaration]:
        return [m for m in self._metrics.values() if m.name not in self.disabled_metrics]

    def is_enabled(self, name: str) -> bool:
        return name in self._metrics and name not in self.disabled_metrics

    def full_name(self, name: str) -> str:
        """公開用のメトリクス名 ({prefix}_{service}_{name})"""
        return f"{self.prefix}_{self.name}_{name}"

    def _run_metric(self, metric: MetricDeclaration, sink: SampleSink) -> MetricOutcome:
        log = logger.bind(exporter=self.name, metric=metric.name)
        log.debug("メトリクス収集開始")
        started = time.monotonic()
        try:
            metric.fn(self, sink)
        except Exception as e:
            duration = time.monotonic() - started
            log.warning("メトリクス収集エラー（続行）", error=str(e), error_type=type(e).__name__)
            return MetricOutcome(name=metric.name, duration_seconds=duration, error=e)
        duration = time.monotonic() - started
        log.debug("メトリクス収集完了", duration_seconds=round(duration, 3))
        return MetricOutcome(name=metric.name, duration_seconds=duration)

    def scrape(self, sink: SampleSink) -> ScrapeReport:
        """有効なメトリクスのコレクター関数をすべて実行

        メトリクスごとに1タスクとして並行実行し、全タスクが戻った後に
        シンクをクローズします。

        Returns:
            メトリクスごとの実行結果
        """
        collectable = [m for m in self.enabled_metrics if m.has_collector]
        report = ScrapeReport()
        try:
            with ThreadPoolExecutor(
                max_workers=min(self.max_workers, max(1, len(collectable))),
                thread_name_prefix=f"{self.name}-collector",
            ) as executor:
                futures = [executor.submit(self._run_metric, m, sink) for m in collectable]
                for future in futures:
                    outcome = future.result()
                    report.outcomes[outcome.name] = outcome
        finally:
            sink.close()

        logger.info(
            "スクレイプ完了",
            exporter=self.name,
            collected=len(collectable),
            failed=report.failed,
        )
        return report
