"""Theme resolution, target expansion and icon syncing."""

from iconsync.core.scanner import expand
from iconsync.core.syncer import SyncItem, SyncReport, sync_all, sync_target
from iconsync.core.target import ApplicationTarget, IconShim, Target, is_application_bundle
from iconsync.core.theme import DirectoryIconTheme, Icon, IconTheme, open_theme

__all__ = [
    "ApplicationTarget",
    "DirectoryIconTheme",
    "Icon",
    "IconShim",
    "IconTheme",
    "SyncItem",
    "SyncReport",
    "Target",
    "expand",
    "is_application_bundle",
    "open_theme",
    "sync_all",
    "sync_target",
]
