"""Tests for iconsync.core.syncer and iconsync.core.target."""

import logging
from pathlib import Path

from iconsync.core.syncer import SyncItem, SyncReport, sync_all, sync_target
from iconsync.core.target import ApplicationTarget, is_application_bundle
from iconsync.core.theme import DirectoryIconTheme
from iconsync.errors import ERROR_MESSAGES, ErrorCode

FINDER = Path("/Applications/Finder.app")


class TestApplicationTarget:
    def test_name_strips_extension(self, shim):
        target = ApplicationTarget("/Applications/Visual Studio Code.app", shim)
        assert target.name == "Visual Studio Code"
        assert target.path == Path("/Applications/Visual Studio Code.app")

    def test_apply_and_reset_delegate_to_shim(self, shim):
        target = ApplicationTarget(FINDER, shim)
        assert target.apply_icon("img") is True
        assert target.reset_icon() is True
        assert shim.calls == [(FINDER, "img"), (FINDER, None)]

    def test_is_application_bundle(self):
        assert is_application_bundle("/Applications/Finder.app")
        assert not is_application_bundle("/Applications/Finder.App")
        assert not is_application_bundle("/Applications/Utilities")


class TestSyncTarget:
    def test_applies_theme_icon(self, theme_dir, shim):
        theme = DirectoryIconTheme(theme_dir)
        assert sync_target(ApplicationTarget(FINDER, shim), theme, shim) is True
        assert shim.loaded == [theme_dir / "Finder.icns"]
        assert shim.calls == [(FINDER, "image:Finder.icns")]

    def test_no_theme_resets(self, theme_dir, shim):
        theme = DirectoryIconTheme(theme_dir)
        sync_target(ApplicationTarget(FINDER, shim), theme, shim)

        assert sync_target(ApplicationTarget(FINDER, shim), None, shim) is True
        assert shim.calls[-1] == (FINDER, None)

    def test_unknown_app_resets(self, theme_dir, shim):
        theme = DirectoryIconTheme(theme_dir)
        target = ApplicationTarget("/Applications/Xcode.app", shim)
        sync_target(target, theme, shim)
        assert shim.calls == [(target.path, None)]
        assert shim.loaded == []

    def test_empty_theme_only_resets(self, tmp_path, make_shim):
        theme = DirectoryIconTheme(tmp_path)
        for result in (True, False):
            shim = make_shim(set_result=result)
            shim.icons[FINDER] = "old"
            changed = sync_target(ApplicationTarget(FINDER, shim), theme, shim)
            assert changed is result
            assert shim.calls == [(FINDER, None)]

    def test_is_idempotent(self, theme_dir, shim):
        theme = DirectoryIconTheme(theme_dir)
        first = sync_target(ApplicationTarget(FINDER, shim), theme, shim)
        second = sync_target(ApplicationTarget(FINDER, shim), theme, shim)
        third = sync_target(ApplicationTarget(FINDER, shim), theme, shim)
        assert (first, second, third) == (True, False, False)

    def test_unreadable_image_is_no_change(self, theme_dir, make_shim):
        shim = make_shim(unreadable=("Finder.icns",))
        theme = DirectoryIconTheme(theme_dir)
        assert sync_target(ApplicationTarget(FINDER, shim), theme, shim) is False
        assert shim.calls == []

    def test_unreadable_image_is_logged(self, theme_dir, make_shim, caplog):
        shim = make_shim(unreadable=("Finder.icns",))
        theme = DirectoryIconTheme(theme_dir)
        with caplog.at_level(logging.ERROR, logger="iconsync.syncer"):
            sync_target(ApplicationTarget(FINDER, shim), theme, shim)
        assert ERROR_MESSAGES[ErrorCode.ASSET_UNREADABLE] in caplog.text
        assert str(theme_dir / "Finder.icns") in caplog.text

    def test_shim_failure_reported(self, theme_dir, make_shim):
        shim = make_shim(set_result=False)
        theme = DirectoryIconTheme(theme_dir)
        assert sync_target(ApplicationTarget(FINDER, shim), theme, shim) is False


class TestSyncAll:
    def test_report(self, theme_dir, make_shim):
        shim = make_shim(unreadable=("Safari.png",))
        theme = DirectoryIconTheme(theme_dir)
        paths = [FINDER, Path("/Applications/Safari.app"), Path("/Applications/Xcode.app")]

        report = sync_all(paths, theme, shim)

        assert [item.action for item in report.items] == ["applied", "failed", "reset"]
        assert report.total == 3
        assert report.changed == 1
        assert report.unchanged == 2

    def test_report_counts(self):
        report = SyncReport(items=[
            SyncItem(path=Path("a.app"), action="applied", changed=True),
            SyncItem(path=Path("b.app"), action="reset", changed=False),
        ])
        assert report.total == 2
        assert report.changed == 1
        assert report.unchanged == 1
