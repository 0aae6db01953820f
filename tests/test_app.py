"""Tests for the iconsync and iconsyncd command surfaces."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from iconsync import __version__
from iconsync.app import build_sync_parser, run_daemon, run_sync
from iconsync.config.settings import AppSettings


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("iconsync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def settings(qapp, tmp_path):
    return AppSettings(tmp_path / "iconsync.ini")


class TestSyncCommand:
    def test_version(self, settings, capsys):
        with pytest.raises(SystemExit) as info:
            run_sync(["--version"], settings=settings)
        assert info.value.code == 0
        assert f"iconsync version {__version__}" in capsys.readouterr().out

    def test_targets_required(self, settings):
        with pytest.raises(SystemExit) as info:
            run_sync([], settings=settings)
        assert info.value.code == 2

    def test_applies_theme(self, settings, shim, theme_dir):
        finder = Path("/Applications/Finder.app")
        code = run_sync(["-t", str(theme_dir), str(finder)], settings=settings, shim=shim)
        assert code == 0
        assert shim.calls == [(finder, "image:Finder.icns")]

    def test_reset_flag(self, settings, shim, theme_dir):
        finder = Path("/Applications/Finder.app")
        run_sync(["-t", str(theme_dir), str(finder)], settings=settings, shim=shim)
        code = run_sync(["--reset", str(finder)], settings=settings, shim=shim)
        assert code == 0
        assert shim.calls[-1] == (finder, None)

    def test_invalid_theme_fails(self, settings, shim, tmp_path):
        code = run_sync(["-t", str(tmp_path / "missing"), "/Applications/Finder.app"],
                        settings=settings, shim=shim)
        assert code == 1
        assert shim.calls == []

    def test_theme_defaults_to_configured(self, settings, shim, theme_dir):
        settings.theme_path = str(theme_dir)
        code = run_sync(["/Applications/Safari.app"], settings=settings, shim=shim)
        assert code == 0
        assert shim.calls == [(Path("/Applications/Safari.app"), "image:Safari.png")]

    def test_recursive_flag(self, settings, shim, theme_dir, tmp_path, app_factory):
        root = tmp_path / "Applications"
        app_factory(root / "Finder.app")
        app_factory(root / "Utilities" / "Safari.app")

        run_sync(["-t", str(theme_dir), str(root)], settings=settings, shim=shim)
        assert [p.name for p, _ in shim.calls] == ["Finder.app"]

        shim.calls.clear()
        run_sync(["-r", "-t", str(theme_dir), str(root)], settings=settings, shim=shim)
        assert sorted(p.name for p, _ in shim.calls) == ["Finder.app", "Safari.app"]

    def test_parser_default_theme(self):
        parser = build_sync_parser("~/.theme")
        args = parser.parse_args(["x.app"])
        assert args.theme == "~/.theme"
        assert args.recursive is False
        assert args.reset is False


class TestDaemonCommand:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            run_daemon(["-v"])
        assert info.value.code == 0
        assert f"iconsyncd version {__version__}" in capsys.readouterr().out

    def test_unavailable_configuration_exits(self, settings, shim, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        monkeypatch.setattr(settings, "is_available", lambda: False)
        assert run_daemon([], settings=settings, shim=shim) == 1
        assert (tmp_path / "cfg" / "iconsync" / "logs" / "iconsyncd.log").exists()
