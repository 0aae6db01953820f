"""Icon themes: map application names to custom icon assets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Mapping, Protocol

import yaml

from iconsync.errors import ErrorCode, IconSyncError, classify_exception

logger = logging.getLogger("iconsync.theme")

DEFAULT_EXTENSIONS: tuple[str, ...] = ("icns", "png")
THEME_CONFIG_SUFFIXES = {".yaml", ".yml"}

_MAX_CONFIG_BYTES = 32 * 1024


@dataclass(frozen=True, slots=True)
class Icon:
    """A custom icon asset for an application."""

    name: str
    path: Path
    description: str | None = None


class IconTheme(Protocol):
    """Maps an application name to its custom icons."""

    @property
    def name(self) -> str:
        ...

    def resolve(self, name: str) -> list[Icon]:
        ...

    def contains(self, name: str) -> bool:
        ...

    def refresh(self) -> bool:
        ...


class DirectoryIconTheme:
    """An icon theme backed by a flat directory of icon files.

    ``Finder.icns`` in the directory themes ``Finder.app``. When several
    files share a base name, the extension listed first in ``extensions``
    wins.
    """

    def __init__(self, path: str | Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        path = Path(path)
        if not path.is_dir():
            raise IconSyncError(ErrorCode.THEME_NOT_DIRECTORY, path=path)
        self._path = path
        self._extensions = tuple(dict.fromkeys(extensions))
        self._index: dict[str, Icon] = {}
        self.refresh()

    @classmethod
    def from_config(cls, config: Mapping[str, object], base_dir: Path | None = None) -> DirectoryIconTheme:
        """Construct the theme from a configuration mapping."""
        raw_path = config.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise IconSyncError(
                ErrorCode.THEME_CONFIG_INVALID,
                message="Directory theme configuration requires a 'path' string",
            )
        path = Path(raw_path.strip()).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path

        raw_extensions = config.get("extensions", list(DEFAULT_EXTENSIONS))
        if not isinstance(raw_extensions, list) or not all(
            isinstance(ext, str) and ext for ext in raw_extensions
        ):
            raise IconSyncError(
                ErrorCode.THEME_CONFIG_INVALID,
                message="Directory theme 'extensions' must be a list of non-empty strings",
                path=path,
            )
        return cls(path, extensions=[ext.lstrip(".") for ext in raw_extensions])

    @property
    def name(self) -> str:
        return str(self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def extensions(self) -> tuple[str, ...]:
        return self._extensions

    def refresh(self) -> bool:
        """Rebuild the icon index from the directory contents.

        The previous index stays in place when the directory cannot be
        listed.
        """
        priority = {ext: rank for rank, ext in enumerate(self._extensions)}
        index: dict[str, Icon] = {}
        ranks: dict[str, int] = {}
        try:
            entries = sorted(self._path.iterdir())
        except OSError as exc:
            logger.error("Failed to list contents of theme directory: %s", classify_exception(exc, self._path))
            return False

        for entry in entries:
            rank = priority.get(entry.suffix[1:])
            if rank is None:
                continue
            name = entry.stem
            if name in ranks and ranks[name] <= rank:
                continue
            index[name] = Icon(name=name, path=entry)
            ranks[name] = rank

        self._index = index
        logger.info("Indexed %d icons in theme %s", len(index), self.name)
        return True

    def resolve(self, name: str) -> list[Icon]:
        icon = self._index.get(name)
        return [icon] if icon is not None else []

    def contains(self, name: str) -> bool:
        return name in self._index

    def names(self) -> list[str]:
        return sorted(self._index)

    def __getitem__(self, name: str) -> list[Icon]:
        return self.resolve(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"DirectoryIconTheme({self.name!r})"


THEME_KINDS: dict[str, Callable[..., IconTheme]] = {
    "directory": DirectoryIconTheme.from_config,
}


def load_theme_config(path: Path) -> IconTheme:
    """Build a theme from a YAML theme configuration file."""
    try:
        size = path.stat().st_size
        if size > _MAX_CONFIG_BYTES:
            raise IconSyncError(
                ErrorCode.THEME_CONFIG_INVALID,
                message=f"Theme configuration exceeds max size ({_MAX_CONFIG_BYTES} bytes)",
                path=path,
            )
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise IconSyncError(
            ErrorCode.THEME_CONFIG_INVALID,
            message=f"Unable to read theme configuration: {exc}",
            path=path,
        ) from exc
    except yaml.YAMLError as exc:
        raise IconSyncError(
            ErrorCode.THEME_CONFIG_INVALID,
            message=f"Invalid YAML in theme configuration: {exc}",
            path=path,
        ) from exc

    if not isinstance(data, dict):
        raise IconSyncError(
            ErrorCode.THEME_CONFIG_INVALID,
            message="Expected a mapping in theme configuration",
            path=path,
        )

    kind = data.get("type", "directory")
    factory = THEME_KINDS.get(kind) if isinstance(kind, str) else None
    if factory is None:
        raise IconSyncError(
            ErrorCode.THEME_CONFIG_INVALID,
            message=f"Unknown theme type {kind!r}",
            path=path,
        )
    return factory(data, base_dir=path.parent)


def open_theme(path: str | Path, extensions: Iterable[str] | None = None) -> IconTheme | None:
    """Open the theme at ``path`` or return None if it cannot be used."""
    path = Path(path).expanduser()
    try:
        if path.suffix in THEME_CONFIG_SUFFIXES and path.is_file():
            return load_theme_config(path)
        return DirectoryIconTheme(path, extensions=extensions or DEFAULT_EXTENSIONS)
    except IconSyncError as exc:
        logger.warning("Failed to initialize theme %s: %s", path, exc)
        return None
