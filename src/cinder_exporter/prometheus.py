"""Prometheus出力アダプター

エクスポーターのスクレイプ結果を prometheus_client のメトリクスファミリーに
変換します。失敗したメトリクスは scrape_failed ゲージで示します。

カウンター種別のメトリクスは prometheus_client の規約で `_total` が付きます
（agent_state は openstack_cinder_agent_state_total として公開）。
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog
from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from cinder_exporter.exporter import BaseOpenStackExporter
from cinder_exporter.models import MetricKind, Sample
from cinder_exporter.sink import SampleSink

logger = structlog.get_logger()


class ExporterCollector(Collector):
    """prometheus_client のカスタムコレクター

    collect() が呼ばれるたびに1回スクレイプを実行します。
    """

    def __init__(self, exporter: BaseOpenStackExporter) -> None:
        self.exporter = exporter

    def describe(self) -> list[Metric]:
        # 登録時にスクレイプが走らないよう空を返す
        return []

    def _family(self, samples: list[Sample]) -> Metric:
        declaration = samples[0].metric
        name = self.exporter.full_name(declaration.name)
        documentation = declaration.description or declaration.name
        if samples[0].kind is MetricKind.COUNTER:
            family: Metric = CounterMetricFamily(name, documentation, labels=declaration.labels)
        else:
            family = GaugeMetricFamily(name, documentation, labels=declaration.labels)
        for sample in samples:
            family.add_metric(list(sample.label_values), sample.value)
        return family

    def collect(self) -> Iterator[Metric]:
        sink = SampleSink()
        report = self.exporter.scrape(sink)

        grouped: dict[str, list[Sample]] = {}
        for sample in sink.drain():
            grouped.setdefault(sample.metric.name, []).append(sample)

        for declaration in self.exporter.enabled_metrics:
            samples = grouped.get(declaration.name)
            if samples:
                yield self._family(samples)

        up = GaugeMetricFamily(
            self.exporter.full_name("up"),
            f"Whether every enabled {self.exporter.name} metric was collected successfully",
        )
        up.add_metric([], 1.0 if report.ok else 0.0)
        yield up

        failed = GaugeMetricFamily(
            self.exporter.full_name("scrape_failed"),
            "Whether the last collection of the metric failed",
            labels=["metric"],
        )
        for name, outcome in report.outcomes.items():
            failed.add_metric([name], 1.0 if outcome.failed else 0.0)
        yield failed


def render_exposition(exporter: BaseOpenStackExporter) -> bytes:
    """1回スクレイプしてPrometheusテキスト形式で返す"""
    registry = CollectorRegistry(auto_describe=False)
    registry.register(ExporterCollector(exporter))
    return generate_latest(registry)
