"""Coalesced filesystem change notifications for a set of root paths."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable

from PySide6.QtCore import QFileSystemWatcher, QObject, QTimer

from iconsync.core.scanner import is_directory
from iconsync.core.target import is_application_bundle
from iconsync.errors import ErrorCode, IconSyncError, classify_exception

logger = logging.getLogger("iconsync.fsevents")

DEFAULT_LATENCY = 5.0


class FileSystemEventStream(QObject):
    """Reports paths that changed below a set of roots after ``start()``.

    Directory change notifications are collected for ``latency`` seconds and
    then delivered as individual paths: the changed directory itself and
    every entry in it that was added or modified since the last snapshot.
    Application bundles are watched at their top level only. Changes made
    by this process are hidden by calling :meth:`acknowledge` afterwards.
    """

    def __init__(
        self,
        paths: Iterable[str | Path],
        handler: Callable[[Path], None],
        latency: float = DEFAULT_LATENCY,
        is_leaf: Callable[[Path], bool] = is_application_bundle,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._paths = [Path(p) for p in paths]
        self._handler = handler
        self._is_leaf = is_leaf
        self._watcher: QFileSystemWatcher | None = None
        self._snapshots: dict[Path, dict[str, int]] = {}
        self._pending: set[Path] = set()
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(latency * 1000)))
        self._timer.timeout.connect(self.flush)

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    @property
    def is_active(self) -> bool:
        return self._watcher is not None

    def watched_directories(self) -> list[Path]:
        return sorted(self._snapshots)

    def start(self) -> None:
        if self._watcher is not None:
            return
        self._watcher = QFileSystemWatcher(self)
        self._watcher.directoryChanged.connect(self._on_directory_changed)
        for root in self._paths:
            self._watch_tree(root)

        if not self._snapshots:
            self.stop()
            raise IconSyncError(
                ErrorCode.WATCH_FAILED,
                details={"paths": ", ".join(str(p) for p in self._paths)},
            )
        logger.info(
            "Watching %d directories below %s",
            len(self._snapshots),
            ", ".join(str(p) for p in self._paths),
        )

    def stop(self) -> None:
        self._timer.stop()
        self._pending.clear()
        self._snapshots.clear()
        watcher, self._watcher = self._watcher, None
        if watcher is None:
            return
        directories = watcher.directories()
        if directories:
            watcher.removePaths(directories)
        watcher.directoryChanged.disconnect(self._on_directory_changed)
        watcher.deleteLater()

    def flush(self) -> None:
        """Deliver the changes collected since the last flush."""
        pending = sorted(self._pending)
        self._pending.clear()
        if self._watcher is None:
            return

        changed: set[Path] = set()
        for directory in pending:
            previous = self._snapshots.get(directory, {})
            current = self._snapshot(directory) if is_directory(directory) else None
            if current is None:
                self._forget(directory)
                continue
            self._snapshots[directory] = current
            if current != previous:
                changed.add(directory)
            if self._is_leaf(directory):
                continue

            for name in previous.keys() - current.keys():
                self._forget(directory / name)
            for name, mtime in current.items():
                if previous.get(name) == mtime:
                    continue
                child = directory / name
                changed.add(child)
                if is_directory(child, follow_symlinks=False):
                    self._watch_tree(child)

        for path in sorted(changed):
            if self._watcher is None:
                break
            self._handler(path)

    def acknowledge(self, path: str | Path) -> None:
        """Record ``path`` as up to date so our own writes are not reported."""
        if self._watcher is None:
            return
        path = Path(path)
        if path in self._snapshots:
            snapshot = self._snapshot(path)
            if snapshot is not None:
                self._snapshots[path] = snapshot
        parent = self._snapshots.get(path.parent)
        if parent is not None:
            try:
                parent[path.name] = path.lstat().st_mtime_ns
            except OSError:
                parent.pop(path.name, None)

    def _on_directory_changed(self, path: str) -> None:
        if self._watcher is None:
            return
        self._pending.add(Path(path))
        if not self._timer.isActive():
            self._timer.start()

    def _watch_tree(self, root: Path) -> None:
        stack = [root]
        while stack:
            directory = stack.pop()
            if directory in self._snapshots or not is_directory(directory):
                continue
            snapshot = self._snapshot(directory)
            if snapshot is None:
                continue
            if not self._watcher.addPath(str(directory)):
                logger.warning("Unable to watch %s", directory)
                continue
            self._snapshots[directory] = snapshot
            if self._is_leaf(directory):
                continue
            for name in snapshot:
                child = directory / name
                if is_directory(child, follow_symlinks=False):
                    stack.append(child)

    def _forget(self, path: Path) -> None:
        for directory in [d for d in self._snapshots if d == path or path in d.parents]:
            del self._snapshots[directory]

    @staticmethod
    def _snapshot(directory: Path) -> dict[str, int] | None:
        entries: dict[str, int] = {}
        try:
            with os.scandir(directory) as it:
                for entry in it:
                    try:
                        entries[entry.name] = entry.stat(follow_symlinks=False).st_mtime_ns
                    except OSError:
                        continue
        except OSError as exc:
            logger.warning("Failed to snapshot directory: %s", classify_exception(exc, directory))
            return None
        return entries
