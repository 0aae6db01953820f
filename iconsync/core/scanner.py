"""Expand watch roots into application targets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator

from iconsync.core.target import is_application_bundle
from iconsync.errors import classify_exception

logger = logging.getLogger("iconsync.scanner")


def is_directory(path: Path, follow_symlinks: bool = True) -> bool:
    """Return True if ``path`` is a directory, logging stat failures.

    With ``follow_symlinks`` unset, a symlink to a directory is not one.
    """
    try:
        if not follow_symlinks and path.is_symlink():
            return False
        return path.is_dir()
    except OSError as exc:
        logger.error("Failed to inspect path: %s", classify_exception(exc, path))
        return False


def _list_dir(path: Path) -> list[Path]:
    try:
        return sorted(path.iterdir())
    except OSError as exc:
        logger.error("Failed to list contents of directory: %s", classify_exception(exc, path))
        return []


def expand(
    roots: Iterable[str | Path],
    recursive: bool = False,
    is_leaf: Callable[[Path], bool] = is_application_bundle,
) -> Iterator[Path]:
    """Yield the application targets reachable from ``roots``.

    Root directories are always listed one level. Deeper directories are
    only entered when ``recursive`` is set, and a leaf (an application
    bundle) is never descended into. Symlinked directories below a root
    are not followed.
    """
    queue: list[Path] = []
    for root in roots:
        root = Path(root)
        if not is_leaf(root) and is_directory(root):
            queue.extend(_list_dir(root))
        else:
            queue.append(root)

    while queue:
        entry = queue.pop()
        if is_leaf(entry):
            yield entry
        elif recursive and is_directory(entry, follow_symlinks=False):
            queue.extend(_list_dir(entry))
