"""Shared fixtures for the iconsync tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication


class FakeShim:
    """Records icon changes; ``set_icon`` reports whether the icon differs."""

    def __init__(self, set_result: bool = True, unreadable: tuple[str, ...] = ()) -> None:
        self.set_result = set_result
        self.unreadable = set(unreadable)
        self.icons: dict[Path, object] = {}
        self.calls: list[tuple[Path, object]] = []
        self.loaded: list[Path] = []

    def load_image(self, path: Path) -> object | None:
        path = Path(path)
        self.loaded.append(path)
        if path.name in self.unreadable:
            return None
        return f"image:{path.name}"

    def set_icon(self, path: Path, image: object | None) -> bool:
        path = Path(path)
        self.calls.append((path, image))
        if not self.set_result:
            return False
        changed = self.icons.get(path) != image
        if image is None:
            self.icons.pop(path, None)
        else:
            self.icons[path] = image
        return changed

    def calls_for(self, path: Path) -> list[object]:
        return [image for p, image in self.calls if p == Path(path)]


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def shim():
    return FakeShim()


@pytest.fixture
def make_shim():
    return FakeShim


@pytest.fixture
def theme_dir(tmp_path):
    """A theme directory with icons for Finder and Safari."""
    root = tmp_path / "theme"
    root.mkdir()
    (root / "Finder.icns").write_bytes(b"icns")
    (root / "Safari.png").write_bytes(b"png")
    (root / "notes.txt").write_text("not an icon")
    return root


def make_app(path: Path) -> Path:
    """Create a minimal application bundle directory."""
    (path / "Contents").mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def app_factory():
    return make_app
