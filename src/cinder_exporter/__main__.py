#!/usr/bin/env python3
"""Cinder メトリクスエクスポーター メインエントリーポイント

Usage:
    uv run python -m cinder_exporter collect
    uv run python -m cinder_exporter collect --disable-metric limits_max --verbose
    uv run python -m cinder_exporter metrics
    uv run python -m cinder_exporter validate
"""

from __future__ import annotations

import sys

from cinder_exporter.cli import cmd_collect, cmd_metrics, cmd_validate, create_parser


def main() -> int:
    """メインエントリーポイント"""
    parser = create_parser()
    args = parser.parse_args()

    if args.command == "collect":
        return cmd_collect(args)
    elif args.command == "metrics":
        return cmd_metrics(args)
    elif args.command == "validate":
        return cmd_validate(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
