"""CLIコマンド処理

collect, metrics, validate コマンドを提供します。
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

import structlog

from cinder_exporter.client import connect
from cinder_exporter.collectors import DEFAULT_CINDER_METRICS, new_cinder_exporter
from cinder_exporter.collectors.cinder import EXPORTER_NAME
from cinder_exporter.config import AppConfig
from cinder_exporter.exceptions import ExporterError
from cinder_exporter.exporter import BaseOpenStackExporter
from cinder_exporter.prometheus import render_exposition

logger = structlog.get_logger()


def configure_logging(verbose: bool = False) -> None:
    """structlogの設定（stdoutはメトリクス出力に使うためstderrへ出力）"""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if verbose else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def load_config(args: argparse.Namespace) -> AppConfig:
    """環境変数の設定にCLI引数を重ねる"""
    config = AppConfig.from_env()
    exporter_config = config.exporter
    if getattr(args, "prefix", None):
        exporter_config = replace(exporter_config, prefix=args.prefix)
    if getattr(args, "disable_metric", None):
        exporter_config = replace(
            exporter_config,
            disabled_metrics=exporter_config.disabled_metrics | frozenset(args.disable_metric),
        )
    return AppConfig(openstack=config.openstack, exporter=exporter_config)


def build_exporter(config: AppConfig) -> BaseOpenStackExporter:
    """OpenStackへ接続してCinderエクスポーターを作成"""
    client = connect(config.openstack)
    return new_cinder_exporter(
        client,
        prefix=config.exporter.prefix,
        disabled_metrics=config.exporter.disabled_metrics,
        endpoint_options=config.openstack.endpoint_options(),
        max_workers=config.exporter.max_workers,
    )


def cmd_collect(args: argparse.Namespace) -> int:
    """collectコマンドを実行（1回スクレイプしてテキスト形式で出力）"""
    configure_logging(args.verbose)
    try:
        exporter = build_exporter(load_config(args))
        output = render_exposition(exporter)
    except ExporterError as e:
        print(f"エラー: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(output.decode("utf-8"))
    return 0


def cmd_metrics(args: argparse.Namespace) -> int:
    """metricsコマンドを実行（宣言済みメトリクスと有効状態を表示）"""
    config = load_config(args)
    disabled = config.exporter.disabled_metrics
    declared = [name for name, _fn, _labels, _description in DEFAULT_CINDER_METRICS]
    for name, _fn, labels, _description in DEFAULT_CINDER_METRICS:
        state = "disabled" if name in disabled else "enabled"
        print(f"{config.exporter.prefix}_{EXPORTER_NAME}_{name}\t{state}\t{','.join(labels) or '-'}")

    unknown = sorted(disabled - set(declared))
    if unknown:
        print(f"警告: 未知のメトリクス名: {', '.join(unknown)}", file=sys.stderr)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """validateコマンドを実行（OpenStack接続テスト）"""
    configure_logging(args.verbose)
    config = load_config(args)

    print(f"OpenStack接続テスト: cloud={config.openstack.cloud} interface={config.openstack.interface}")
    try:
        client = connect(config.openstack)
        body = client.get("/volumes", limit=1)
    except Exception as e:
        print(f"❌ 接続失敗: {e}", file=sys.stderr)
        return 1

    print(f"✅ 接続成功 (volumes: {len(body.get('volumes', []))}件取得)")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """CLIパーサーを作成"""
    parser = argparse.ArgumentParser(
        prog="cinder-exporter",
        description="OpenStack Cinder メトリクスエクスポーター - ボリューム・クォータ・サービス状態を収集",
    )
    subparsers = parser.add_subparsers(dest="command", help="利用可能なコマンド")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--prefix",
            default=None,
            help="メトリクス名のプレフィックス（デフォルト: openstack）",
        )
        sub.add_argument(
            "--disable-metric",
            action="append",
            default=[],
            metavar="NAME",
            help="収集しないメトリクス名（複数指定可）",
        )
        sub.add_argument(
            "--verbose",
            action="store_true",
            help="詳細出力を有効化",
        )

    # collect コマンド
    collect_parser = subparsers.add_parser(
        "collect",
        help="1回スクレイプしてPrometheusテキスト形式で出力",
    )
    add_common(collect_parser)

    # metrics コマンド
    metrics_parser = subparsers.add_parser(
        "metrics",
        help="宣言済みメトリクスの一覧を表示",
    )
    add_common(metrics_parser)

    # validate コマンド
    validate_parser = subparsers.add_parser(
        "validate",
        help="OpenStack接続をテスト",
    )
    add_common(validate_parser)

    return parser
