"""Apply or reset icons for targets against the active theme."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from iconsync.core.target import ApplicationTarget, IconShim, Target
from iconsync.core.theme import IconTheme
from iconsync.errors import ErrorCode, IconSyncError

logger = logging.getLogger("iconsync.syncer")


@dataclass
class SyncItem:
    """The outcome of syncing a single target."""
    path: Path
    action: str  # applied, reset, failed
    changed: bool


@dataclass
class SyncReport:
    """The outcome of syncing a batch of targets."""
    items: list[SyncItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def changed(self) -> int:
        return sum(1 for i in self.items if i.changed)

    @property
    def unchanged(self) -> int:
        return sum(1 for i in self.items if not i.changed)


def _sync(target: Target, theme: IconTheme | None, shim: IconShim) -> tuple[str, bool]:
    icons = theme.resolve(target.name) if theme is not None else []
    if not icons:
        return "reset", target.reset_icon()

    icon = icons[0]
    image = shim.load_image(icon.path)
    if image is None:
        logger.error(
            "Failed to obtain image for %s: %s",
            target.name,
            IconSyncError(ErrorCode.ASSET_UNREADABLE, path=icon.path),
        )
        return "failed", False
    return "applied", target.apply_icon(image)


def sync_target(target: Target, theme: IconTheme | None, shim: IconShim) -> bool:
    """Apply the theme's icon to ``target``, or reset it when there is none.

    Returns True if the icon of the target changed.
    """
    return _sync(target, theme, shim)[1]


def sync_all(paths: Iterable[Path], theme: IconTheme | None, shim: IconShim) -> SyncReport:
    """Sync every target path and log one line per target."""
    report = SyncReport()
    for path in paths:
        action, changed = _sync(ApplicationTarget(path, shim), theme, shim)
        logger.info("Updating: %s [%s]", path, changed)
        report.items.append(SyncItem(path=Path(path), action=action, changed=changed))
    return report
