"""サンプルシンク

コレクター関数とレスポンス組み立て側の間のFIFOキューです。
複数スレッドから同時に書き込めます。
"""

from __future__ import annotations

import queue
import threading

from cinder_exporter.exceptions import SinkClosedError
from cinder_exporter.models import MetricDeclaration, MetricKind, Sample


class SampleSink:
    """上限なしのスレッドセーフなサンプルキュー

    emit はブロックしません。クローズはスクレイプ全体の
    コレクター関数がすべて戻った後にフレームワーク側が行います。
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Sample] = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, metric: MetricDeclaration, kind: MetricKind, value: float, *label_values: str) -> None:
        """サンプルを1件書き込む

        Raises:
            ValueError: ラベル値の数が宣言のラベル数と一致しない場合
            SinkClosedError: クローズ済みの場合
        """
        if len(label_values) != len(metric.labels):
            raise ValueError(
                f"metric {metric.name} expects {len(metric.labels)} label values, got {len(label_values)}"
            )
        sample = Sample(metric=metric, kind=kind, value=float(value), label_values=tuple(label_values))
        with self._lock:
            if self._closed:
                raise SinkClosedError(f"sink is closed, dropped sample for {metric.name}")
            self._queue.put_nowait(sample)

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def drain(self) -> list[Sample]:
        """キュー内のサンプルを書き込み順に取り出す"""
        samples: list[Sample] = []
        while True:
            try:
                samples.append(self._queue.get_nowait())
            except queue.Empty:
                return samples
