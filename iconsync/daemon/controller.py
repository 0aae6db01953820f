"""Daemon that resyncs icons when applications or the configuration change."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Protocol

from iconsync.core.scanner import expand
from iconsync.core.syncer import SyncReport, sync_all
from iconsync.core.target import IconShim, is_application_bundle
from iconsync.core.theme import DEFAULT_EXTENSIONS, IconTheme, open_theme
from iconsync.daemon.fsevents import DEFAULT_LATENCY, FileSystemEventStream
from iconsync.errors import IconSyncError

if TYPE_CHECKING:
    from iconsync.config.settings import AppSettings

logger = logging.getLogger("iconsync.daemon")


@dataclass(frozen=True)
class DaemonConfig:
    """Tunables for the daemon, resolved once at startup."""
    latency: float = DEFAULT_LATENCY
    recursive: bool = True
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    is_leaf: Callable[[Path], bool] = is_application_bundle

    @classmethod
    def from_settings(cls, settings: AppSettings) -> DaemonConfig:
        return cls(
            latency=settings.daemon_latency,
            recursive=settings.daemon_recursive,
            extensions=tuple(settings.theme_extensions),
        )


class EventStream(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...

    def acknowledge(self, path: Path) -> None:
        ...


StreamFactory = Callable[[list[Path], Callable[[Path], None], DaemonConfig], EventStream]


def create_event_stream(
    paths: list[Path], handler: Callable[[Path], None], config: DaemonConfig
) -> EventStream:
    return FileSystemEventStream(paths, handler, latency=config.latency, is_leaf=config.is_leaf)


class IconSyncDaemon:
    """Keeps the icons below the watched paths in sync with the theme.

    Settings changes and filesystem events are delivered on the Qt event
    loop, so handlers never run concurrently.
    """

    def __init__(
        self,
        settings: AppSettings,
        shim: IconShim,
        config: DaemonConfig | None = None,
        stream_factory: StreamFactory = create_event_stream,
    ) -> None:
        self._settings = settings
        self._shim = shim
        self._config = config or DaemonConfig.from_settings(settings)
        self._stream_factory = stream_factory
        self._theme: IconTheme | None = None
        self._paths: frozenset[Path] = frozenset()
        self._stream: EventStream | None = None
        self._observing = False

    @property
    def theme(self) -> IconTheme | None:
        return self._theme

    @property
    def paths(self) -> frozenset[Path]:
        return self._paths

    @property
    def stream(self) -> EventStream | None:
        return self._stream

    @property
    def state(self) -> str:
        return "watching" if self._stream is not None else "idle"

    def start(self) -> None:
        """Subscribe to the settings; both observers fire immediately."""
        if self._observing:
            return
        self._observing = True
        self._settings.observe_theme(self.on_theme_changed)
        self._settings.observe_watch_paths(self.on_watch_paths_changed)

    def stop(self) -> None:
        if self._observing:
            self._settings.theme_changed.disconnect(self.on_theme_changed)
            self._settings.watch_paths_changed.disconnect(self.on_watch_paths_changed)
            self._observing = False
        self._replace_stream(frozenset())

    def on_theme_changed(self, theme_path: str | None) -> None:
        logger.info("Theme set to %s", theme_path)
        theme = None
        if theme_path:
            theme = open_theme(theme_path, self._config.extensions)
        self._theme = theme
        self.flush_all(theme, self._paths)

    def on_watch_paths_changed(self, raw_paths: Iterable[str]) -> None:
        paths = frozenset(Path(p).expanduser() for p in raw_paths)
        old_paths = self._paths
        removed = old_paths - paths
        added = paths - old_paths
        logger.info(
            "Watched paths have changed from %s to %s",
            sorted(str(p) for p in old_paths),
            sorted(str(p) for p in paths),
        )

        self.flush_all(None, removed)
        self.flush_all(self._theme, added)

        self._paths = paths
        self._replace_stream(paths)

    def on_path_changed(self, path: str | Path) -> None:
        path = Path(path)
        if not self._config.is_leaf(path):
            return
        self.flush_single(self._theme, path)

    def reload(self) -> None:
        """Re-index the active theme and resync every watched target."""
        logger.info("Reloading theme %s", self._theme.name if self._theme else None)
        if self._theme is not None:
            self._theme.refresh()
        self.flush_all(self._theme, self._paths)

    def flush_all(self, theme: IconTheme | None, paths: Iterable[Path]) -> SyncReport:
        roots = sorted(paths)
        if not roots:
            return SyncReport()
        logger.info("Flushing all icons below %s", ", ".join(str(p) for p in roots))
        targets = expand(roots, recursive=self._config.recursive, is_leaf=self._config.is_leaf)
        return self._sync(targets, theme)

    def flush_single(self, theme: IconTheme | None, path: Path) -> bool:
        return self._sync([path], theme).changed > 0

    def _sync(self, targets: Iterable[Path], theme: IconTheme | None) -> SyncReport:
        report = sync_all(targets, theme, self._shim)
        if self._stream is not None:
            for item in report.items:
                self._stream.acknowledge(item.path)
        return report

    def _replace_stream(self, paths: frozenset[Path]) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream = None
        if not paths:
            return

        stream = self._stream_factory(sorted(paths), self.on_path_changed, self._config)
        try:
            stream.start()
        except IconSyncError as exc:
            logger.error("Failed to create event stream: %s", exc)
            return
        self._stream = stream
