"""macOS icon shim backed by AppKit (pyobjc)."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from iconsync.errors import ErrorCode, IconSyncError

logger = logging.getLogger("iconsync.shim")


class CocoaIconShim:
    """Loads images with NSImage and sets icons through NSWorkspace."""

    def __init__(self) -> None:
        import Cocoa

        self._cocoa = Cocoa
        self._workspace = Cocoa.NSWorkspace.sharedWorkspace()

    def load_image(self, path: Path) -> Any | None:
        image = self._cocoa.NSImage.alloc().initWithContentsOfFile_(str(path))
        if image is None:
            logger.error("Failed to obtain image for icon %s", path)
        return image

    def set_icon(self, path: Path, image: Any | None) -> bool:
        return bool(self._workspace.setIcon_forFile_options_(image, str(path), 0))


def default_shim() -> CocoaIconShim:
    """Return the icon shim for the running platform."""
    if sys.platform != "darwin":
        raise IconSyncError(ErrorCode.PLATFORM_UNSUPPORTED, details={"platform": sys.platform})
    return CocoaIconShim()
