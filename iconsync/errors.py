"""Error codes and error handling utilities for iconsync."""

from __future__ import annotations

import errno
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for iconsync operations."""

    # File system errors
    PATH_NOT_FOUND = auto()
    ACCESS_DENIED = auto()
    SCAN_FAILED = auto()

    # Asset errors
    ASSET_UNREADABLE = auto()

    # Platform errors
    PLATFORM_UNSUPPORTED = auto()

    # Watch errors
    WATCH_FAILED = auto()

    # Configuration errors
    THEME_NOT_DIRECTORY = auto()
    THEME_CONFIG_INVALID = auto()
    CONFIG_UNAVAILABLE = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.PATH_NOT_FOUND: "The path was not found. It may have been moved or deleted.",
    ErrorCode.ACCESS_DENIED: "Access denied. Check the permissions of the path.",
    ErrorCode.SCAN_FAILED: "Failed to list the contents of the directory.",

    ErrorCode.ASSET_UNREADABLE: "The icon image could not be loaded. It may be corrupt.",

    ErrorCode.PLATFORM_UNSUPPORTED: "Setting custom icons is only supported on macOS.",

    ErrorCode.WATCH_FAILED: "None of the paths could be watched for changes.",

    ErrorCode.THEME_NOT_DIRECTORY: "The icon theme path is not a directory.",
    ErrorCode.THEME_CONFIG_INVALID: "The icon theme configuration is invalid.",
    ErrorCode.CONFIG_UNAVAILABLE: "The iconsync configuration store is not available.",
}


@dataclass
class IconSyncError(Exception):
    """Base exception for iconsync with error code and context."""

    code: ErrorCode
    message: str = ""
    path: Path | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f" ({self.path})")
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f" [{details_str}]")
        return "".join(parts)


def classify_exception(exc: Exception, path: Path | None = None) -> IconSyncError:
    """Classify a generic exception into an IconSyncError with appropriate code."""
    if isinstance(exc, IconSyncError):
        return exc

    exc_str = str(exc)
    if isinstance(exc, FileNotFoundError):
        return IconSyncError(ErrorCode.PATH_NOT_FOUND, path=path, details={"original": exc_str})
    if isinstance(exc, PermissionError):
        return IconSyncError(ErrorCode.ACCESS_DENIED, path=path, details={"original": exc_str})
    if isinstance(exc, NotADirectoryError):
        return IconSyncError(ErrorCode.SCAN_FAILED, path=path, details={"original": exc_str})
    if isinstance(exc, OSError):
        if exc.errno == errno.ENOENT:
            return IconSyncError(ErrorCode.PATH_NOT_FOUND, path=path, details={"original": exc_str})
        if exc.errno in (errno.EACCES, errno.EPERM):
            return IconSyncError(ErrorCode.ACCESS_DENIED, path=path, details={"original": exc_str})
        return IconSyncError(ErrorCode.SCAN_FAILED, path=path, details={"original": exc_str})

    exc_name = type(exc).__name__
    return IconSyncError(
        ErrorCode.SCAN_FAILED,
        message=f"{exc_name}: {exc}",
        path=path,
        details={"original": exc_str},
    )
