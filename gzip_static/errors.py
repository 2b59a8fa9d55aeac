"""Exception taxonomy for gzip-static-generate.

Every failure the tool reports derives from ``GzipStaticError`` so the CLI can
turn any of them into a one-line message and a non-zero exit status.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class GzipStaticError(Exception):
    """Base class for all fatal errors raised by the tool."""


class ConfigError(GzipStaticError):
    """Invalid root directory or configuration value."""


class NoCompressorFound(GzipStaticError):
    def __init__(self, candidates: Iterable[object]) -> None:
        self.candidates = tuple(str(candidate) for candidate in candidates)
        if self.candidates:
            tried = ", ".join(repr(candidate) for candidate in self.candidates)
            message = f"No usable compressor found (tried: {tried})"
        else:
            message = "No usable compressor found (no candidate commands configured)"
        super().__init__(message)


class TraversalError(GzipStaticError):
    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        detail = cause.strerror or str(cause)
        super().__init__(f"Cannot traverse {path}: {detail}")


class CompressionFailed(GzipStaticError):
    """Compressor exited non-zero, could not start, or the stale sibling stuck around.

    ``exit_status`` is ``None`` whenever no process exit status is available.
    """

    def __init__(self, path: Path, exit_status: int | None, reason: str | None = None) -> None:
        self.path = path
        self.exit_status = exit_status
        self.reason = reason
        if exit_status is not None:
            message = f"Compressing {path} failed with exit status {exit_status}"
        else:
            message = f"Compressing {path} failed: {reason or 'unknown error'}"
        super().__init__(message)


class TimestampAlignmentError(GzipStaticError):
    """Raised instead of a warning when strict timestamp alignment is enabled."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        detail = cause.strerror or str(cause)
        super().__init__(f"Cannot set modification time of {path}: {detail}")


__all__ = [
    "GzipStaticError",
    "ConfigError",
    "NoCompressorFound",
    "TraversalError",
    "CompressionFailed",
    "TimestampAlignmentError",
]
