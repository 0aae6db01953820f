"""Application settings via QSettings."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QFileSystemWatcher, QObject, QSettings, Signal

logger = logging.getLogger("iconsync.settings")

DEFAULT_THEME_LOCATION = "~/.theme"


def _clean_str_list(raw: object) -> list[str]:
    # INI files hand back a bare string for single-element lists.
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw] if raw else []
    if not isinstance(raw, (list, tuple)):
        return []
    return [item for item in raw if isinstance(item, str) and item.strip()]


class AppSettings(QObject):
    """Wraps QSettings for the theme and watch path configuration.

    ``theme_changed`` and ``watch_paths_changed`` fire whenever the stored
    value differs from the last one seen, whether it was changed through
    this object or, once :meth:`watch_external_changes` is enabled, by
    another process rewriting the backing file.
    """

    theme_changed = Signal(object)      # str | None
    watch_paths_changed = Signal(list)  # list[str]

    def __init__(self, path: str | Path | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        if path is None:
            self._qs = QSettings("iconsync", "iconsync")
        else:
            self._qs = QSettings(str(path), QSettings.Format.IniFormat)
        self._watcher: QFileSystemWatcher | None = None
        self._last_theme = self.theme_path
        self._last_paths = self.watch_paths

    def is_available(self) -> bool:
        return self._qs.status() == QSettings.Status.NoError

    @property
    def file_name(self) -> str:
        return self._qs.fileName()

    # -- theme --

    @property
    def theme_path(self) -> str | None:
        raw = self._qs.value("theme", "", type=str)
        value = (raw or "").strip()
        return value or None

    @theme_path.setter
    def theme_path(self, value: str | None) -> None:
        cleaned = (value or "").strip()
        if cleaned:
            self._qs.setValue("theme", cleaned)
        else:
            self._qs.remove("theme")
        self._notify()

    @property
    def theme_extensions(self) -> list[str]:
        cleaned = _clean_str_list(self._qs.value("theme/extensions"))
        return [ext.strip().lstrip(".") for ext in cleaned] or ["icns", "png"]

    @theme_extensions.setter
    def theme_extensions(self, value: list[str]) -> None:
        self._qs.setValue("theme/extensions", _clean_str_list(value))

    # -- watched paths --

    @property
    def watch_paths(self) -> list[str]:
        return [item.strip() for item in _clean_str_list(self._qs.value("paths"))]

    @watch_paths.setter
    def watch_paths(self, value: list[str]) -> None:
        self._qs.setValue("paths", _clean_str_list(value))
        self._notify()

    # -- daemon --

    @property
    def daemon_latency(self) -> float:
        value = self._qs.value("daemon/latency", 5.0, type=float)
        return value if value >= 0 else 5.0

    @daemon_latency.setter
    def daemon_latency(self, value: float) -> None:
        self._qs.setValue("daemon/latency", float(value))

    @property
    def daemon_recursive(self) -> bool:
        return self._qs.value("daemon/recursive", True, type=bool)

    @daemon_recursive.setter
    def daemon_recursive(self, value: bool) -> None:
        self._qs.setValue("daemon/recursive", bool(value))

    # -- observers --

    def observe_theme(self, callback: Callable[[str | None], None]) -> None:
        """Call ``callback`` now with the current theme and on every change."""
        self.theme_changed.connect(callback)
        callback(self.theme_path)

    def observe_watch_paths(self, callback: Callable[[list[str]], None]) -> None:
        """Call ``callback`` now with the current paths and on every change."""
        self.watch_paths_changed.connect(callback)
        callback(self.watch_paths)

    def watch_external_changes(self) -> None:
        """Re-read the backing store when another process modifies it."""
        if self._watcher is None:
            self._watcher = QFileSystemWatcher(self)
            self._watcher.fileChanged.connect(self._on_backing_store_changed)
            self._watcher.directoryChanged.connect(self._on_backing_store_changed)
        self._attach_watch()

    def reload(self) -> None:
        """Re-read the backing store and notify observers of differences."""
        self._qs.sync()
        self._notify()

    def sync(self) -> None:
        self._qs.sync()

    def _notify(self) -> None:
        theme = self.theme_path
        if theme != self._last_theme:
            self._last_theme = theme
            self.theme_changed.emit(theme)

        paths = self.watch_paths
        if paths != self._last_paths:
            self._last_paths = paths
            self.watch_paths_changed.emit(paths)

    def _attach_watch(self) -> None:
        # Editors and cfprefsd replace the file, which drops the watch.
        if self._watcher is None:
            return
        backing = Path(self.file_name)
        if backing.exists():
            if str(backing) not in self._watcher.files():
                self._watcher.addPath(str(backing))
        elif backing.parent.exists() and str(backing.parent) not in self._watcher.directories():
            self._watcher.addPath(str(backing.parent))

    def _on_backing_store_changed(self, path: str) -> None:
        logger.debug("Configuration store changed on disk: %s", path)
        self._attach_watch()
        self.reload()

    # -- helpers --

    @property
    def app_data_dir(self) -> Path:
        path = self._app_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def log_dir(self) -> Path:
        path = self.app_data_dir / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _app_data_dir() -> Path:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / "iconsync"
