"""cli.py のテスト"""

from __future__ import annotations

import os
from unittest.mock import MagicMock, patch

import pytest

from cinder_exporter.cli import cmd_collect, cmd_metrics, cmd_validate, create_parser, load_config
from cinder_exporter.exceptions import CloudConnectionError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ.keys()):
        if key.startswith("CINDER_EXPORTER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def no_logging_config():
    """テスト中はstructlogの設定を変更しない"""
    with patch("cinder_exporter.cli.configure_logging"):
        yield


class TestParser:
    """create_parser関数のテスト"""

    def test_disable_metric_is_repeatable(self) -> None:
        args = create_parser().parse_args(
            ["collect", "--disable-metric", "limits_max", "--disable-metric", "volume_status", "--prefix", "cloud"]
        )

        assert args.command == "collect"
        assert args.disable_metric == ["limits_max", "volume_status"]
        assert args.prefix == "cloud"
        assert args.verbose is False

    def test_cli_args_extend_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """CLI引数の無効化メトリクスは環境変数に追加される"""
        monkeypatch.setenv("CINDER_EXPORTER_DISABLED_METRICS", "snapshots")
        args = create_parser().parse_args(["metrics", "--disable-metric", "limits_max"])

        config = load_config(args)

        assert config.exporter.disabled_metrics == frozenset({"snapshots", "limits_max"})
        assert config.exporter.prefix == "openstack"


class TestCmdMetrics:
    """metricsコマンドのテスト"""

    def test_lists_declarations(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = create_parser().parse_args(["metrics", "--disable-metric", "limits_used", "--disable-metric", "bogus"])

        assert cmd_metrics(args) == 0

        out, err = capsys.readouterr()
        lines = out.splitlines()
        assert len(lines) == 6
        assert lines[0] == "openstack_cinder_volumes\tenabled\t-"
        assert "openstack_cinder_limits_used\tdisabled\ttenant" in lines
        assert "bogus" in err


class TestCmdCollect:
    """collectコマンドのテスト"""

    def test_writes_exposition(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = create_parser().parse_args(["collect"])

        with patch("cinder_exporter.cli.connect") as connect_fn, patch(
            "cinder_exporter.cli.render_exposition", return_value=b"openstack_cinder_up 1.0\n"
        ) as render:
            assert cmd_collect(args) == 0

        connect_fn.assert_called_once()
        exporter = render.call_args.args[0]
        assert exporter.name == "cinder"
        assert "cinder" in exporter.endpoint_options
        assert capsys.readouterr().out == "openstack_cinder_up 1.0\n"

    def test_connection_error_returns_1(self, capsys: pytest.CaptureFixture[str]) -> None:
        """接続エラー時は終了コード1"""
        args = create_parser().parse_args(["collect"])

        with patch("cinder_exporter.cli.connect", side_effect=CloudConnectionError("接続失敗: auth")):
            assert cmd_collect(args) == 1

        assert "接続失敗" in capsys.readouterr().err


class TestCmdValidate:
    """validateコマンドのテスト"""

    def test_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        client = MagicMock()
        client.get.return_value = {"volumes": [{"id": "vol-1"}]}
        args = create_parser().parse_args(["validate"])

        with patch("cinder_exporter.cli.connect", return_value=client):
            assert cmd_validate(args) == 0

        client.get.assert_called_once_with("/volumes", limit=1)
        assert "接続成功" in capsys.readouterr().out

    def test_failure(self) -> None:
        args = create_parser().parse_args(["validate"])

        with patch("cinder_exporter.cli.connect", side_effect=CloudConnectionError("boom")):
            assert cmd_validate(args) == 1
