"""Targets whose icon can be set or reset."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

BUNDLE_EXTENSION = ".app"


def is_application_bundle(path: str | Path) -> bool:
    """Return True when the path names an application bundle."""
    return Path(path).suffix == BUNDLE_EXTENSION


class IconShim(Protocol):
    """Platform hooks for loading images and changing file icons.

    Neither method raises: failures are reported as ``None`` or ``False``.
    """

    def load_image(self, path: Path) -> Any | None:
        ...

    def set_icon(self, path: Path, image: Any | None) -> bool:
        ...


class Target(Protocol):
    """An entity to which a custom icon can be applied."""

    @property
    def name(self) -> str:
        ...

    @property
    def path(self) -> Path:
        ...

    def apply_icon(self, image: Any) -> bool:
        ...

    def reset_icon(self) -> bool:
        ...


class ApplicationTarget:
    """An application bundle on disk."""

    def __init__(self, path: str | Path, shim: IconShim) -> None:
        self._path = Path(path)
        self._shim = shim

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._path.stem

    def apply_icon(self, image: Any) -> bool:
        """Set the custom icon; True if the icon was updated."""
        return self._shim.set_icon(self._path, image)

    def reset_icon(self) -> bool:
        """Restore the default icon; True if the icon was reset."""
        return self._shim.set_icon(self._path, None)

    def __repr__(self) -> str:
        return f"ApplicationTarget({str(self._path)!r})"
