"""Tests for zenhance.cli — entry point and app resolution."""

import argparse
import sys
import types

import pytest

from zenhance.app import App
from zenhance.cli import main
from zenhance.cli._resolve import resolve_app
from zenhance.cli._run import load_app


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_run_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--help"])
        assert exc_info.value.code == 0

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "zenhance" in capsys.readouterr().out


@pytest.fixture
def fake_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    module = types.ModuleType("zenhance_fake_site")
    module.app = App()
    module.factory = lambda: module.app
    module.not_an_app = 42
    monkeypatch.setitem(sys.modules, "zenhance_fake_site", module)
    return module


class TestResolveApp:
    def test_default_attribute(self, fake_module) -> None:
        assert resolve_app("zenhance_fake_site") is fake_module.app

    def test_factory(self, fake_module) -> None:
        assert resolve_app("zenhance_fake_site:factory") is fake_module.app

    def test_not_an_app(self, fake_module) -> None:
        with pytest.raises(TypeError, match="not a zenhance.App"):
            resolve_app("zenhance_fake_site:not_an_app")

    def test_load_app_exits_on_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = argparse.Namespace(app="zenhance_no_such_module:app", root=".")
        with pytest.raises(SystemExit) as exc_info:
            load_app(args)
        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_load_app_from_root(self, tmp_path) -> None:
        app = load_app(argparse.Namespace(app=None, root=str(tmp_path)))
        assert app.config.root_path == tmp_path.resolve()
