"""Command-line and daemon bootstrap."""

from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
import signal
import sys
from pathlib import Path
from typing import Sequence

from PySide6.QtCore import QCoreApplication, QTimer

from iconsync import __version__
from iconsync.config.settings import DEFAULT_THEME_LOCATION, AppSettings
from iconsync.core.scanner import expand
from iconsync.core.shim import default_shim
from iconsync.core.syncer import sync_all
from iconsync.core.target import IconShim
from iconsync.core.theme import open_theme
from iconsync.daemon.controller import IconSyncDaemon
from iconsync.errors import ErrorCode, IconSyncError

_LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _configure_cli_logger() -> logging.Logger:
    logger = logging.getLogger("iconsync")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def _configure_daemon_logger(settings: AppSettings) -> logging.Logger:
    logger = logging.getLogger("iconsync")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    handler = RotatingFileHandler(
        settings.log_dir / "iconsyncd.log",
        maxBytes=512_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(console)
    logger.propagate = False
    return logger


def build_sync_parser(default_theme: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iconsync",
        description="Apply an icon theme to applications.",
    )
    parser.add_argument(
        "-v", "--version", action="version",
        version=f"%(prog)s version {__version__}",
        help="Show the version of this program",
    )
    parser.add_argument(
        "-r", "--recursive", action="store_true",
        help="Recursively iterate the targets",
    )
    parser.add_argument(
        "-t", "--theme", default=default_theme,
        help="The icon theme to apply (default: %(default)s)",
    )
    parser.add_argument(
        "-n", "--reset", action="store_true",
        help="Restore the default icons instead of applying a theme",
    )
    parser.add_argument(
        "targets", nargs="+", metavar="target",
        help="The file(s) to sync the icon theme for",
    )
    return parser


def run_sync(
    argv: Sequence[str] | None = None,
    *,
    settings: AppSettings | None = None,
    shim: IconShim | None = None,
) -> int:
    """Sync the icon theme once for the given targets."""
    logger = _configure_cli_logger()
    settings = settings or AppSettings()
    configured_theme = settings.theme_path if settings.is_available() else None
    parser = build_sync_parser(configured_theme or DEFAULT_THEME_LOCATION)
    args = parser.parse_args(argv)

    theme = None
    if not args.reset:
        theme = open_theme(args.theme, settings.theme_extensions)
        if theme is None:
            logger.error("error: failed to initialize theme %s", args.theme)
            return 1

    try:
        shim = shim or default_shim()
    except IconSyncError as exc:
        logger.error("error: %s", exc)
        return 1

    targets = [Path(t).expanduser() for t in args.targets]
    report = sync_all(expand(targets, recursive=args.recursive), theme, shim)
    logger.info("Synced %d targets (%d changed)", report.total, report.changed)
    return 0


def _install_signal_handlers(app: QCoreApplication, daemon: IconSyncDaemon) -> QTimer:
    # Handlers are deferred onto the event loop so they never interleave
    # with a running sync.
    signal.signal(signal.SIGINT, lambda *_: QTimer.singleShot(0, app.quit))
    signal.signal(signal.SIGTERM, lambda *_: QTimer.singleShot(0, app.quit))
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, lambda *_: QTimer.singleShot(0, daemon.reload))

    # Python only runs signal handlers when control returns to the interpreter.
    wakeup = QTimer(app)
    wakeup.timeout.connect(lambda: None)
    wakeup.start(500)
    return wakeup


def run_daemon(
    argv: Sequence[str] | None = None,
    *,
    settings: AppSettings | None = None,
    shim: IconShim | None = None,
) -> int:
    """Run the icon sync daemon until the process is interrupted."""
    parser = argparse.ArgumentParser(
        prog="iconsyncd",
        description="Keep application icons in sync with the configured icon theme.",
    )
    parser.add_argument(
        "-v", "--version", action="version",
        version=f"%(prog)s version {__version__}",
        help="Show the version of this program",
    )
    parser.parse_args(argv)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("iconsyncd")
    app.setOrganizationName("iconsync")

    settings = settings or AppSettings()
    logger = _configure_daemon_logger(settings)
    if not settings.is_available():
        error = IconSyncError(ErrorCode.CONFIG_UNAVAILABLE, details={"store": settings.file_name})
        logger.critical("%s", error)
        return 1

    try:
        shim = shim or default_shim()
    except IconSyncError as exc:
        logger.critical("%s", exc)
        return 1

    daemon = IconSyncDaemon(settings, shim)
    settings.watch_external_changes()
    _install_signal_handlers(app, daemon)
    logger.info("iconsyncd %s starting with configuration %s", __version__, settings.file_name)
    daemon.start()

    exit_code = app.exec()
    daemon.stop()
    logger.info("iconsyncd stopped")
    return exit_code
