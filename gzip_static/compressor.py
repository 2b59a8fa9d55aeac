"""Freshness check and compressor invocation for one source file.

A compressed sibling is fresh when it exists and is not older than its
source. Stale or missing siblings are regenerated by the compressor, then
stamped with the source's times so the next run can skip them.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .commands import ResolvedCommand
from .errors import CompressionFailed, TimestampAlignmentError

logger = logging.getLogger(__name__)

COMPRESSED_SUFFIX = ".gz"


@dataclass(frozen=True)
class FilePair:
    source: Path
    compressed: Path

    @classmethod
    def for_source(cls, source: Path) -> FilePair:
        return cls(source=source, compressed=source.with_name(source.name + COMPRESSED_SUFFIX))


def _mtime_ns(path: Path) -> int | None:
    """Return ``st_mtime_ns`` for ``path`` or ``None`` on stat failure."""
    try:
        return int(path.stat().st_mtime_ns)
    except OSError:
        return None


def is_fresh(pair: FilePair) -> bool:
    """Return whether ``pair.compressed`` exists and is not older than the source.

    A sibling that cannot be stat-ed (dangling or looping symlink, permission
    error) counts as stale.
    """
    compressed_mtime = _mtime_ns(pair.compressed)
    if compressed_mtime is None:
        return False
    source_mtime = _mtime_ns(pair.source)
    if source_mtime is None:
        return False
    return compressed_mtime >= source_mtime


class Compressor(Protocol):
    def compress(self, source: Path) -> None:
        """Write ``source + ".gz"`` or raise ``CompressionFailed``."""


class ExternalProcessCompressor:
    """Runs the resolved command with the source path appended.

    The command is trusted to write ``<source>.gz`` and leave the source in
    place (``gzip -k``, ``zopfli``). Blocks until the process exits.
    """

    def __init__(self, command: ResolvedCommand) -> None:
        self.command = command

    def compress(self, source: Path) -> None:
        argv = self.command.argv_for(source)
        logger.debug("running %s", " ".join(argv))
        try:
            proc = subprocess.run(argv, check=False)
        except OSError as exc:
            raise CompressionFailed(source, None, f"cannot run {argv[0]}: {exc}") from exc
        if proc.returncode != 0:
            raise CompressionFailed(source, proc.returncode)


def align_timestamps(pair: FilePair) -> None:
    """Copy the source's access and modification times onto the compressed file."""
    info = pair.source.stat()
    os.utime(pair.compressed, ns=(info.st_atime_ns, info.st_mtime_ns))


def process_file(path: Path, compressor: Compressor, *, strict_timestamps: bool = False) -> bool:
    """Regenerate ``path``'s compressed sibling unless it is fresh.

    Returns ``True`` when the compressor ran. A failed timestamp update is
    logged as a warning, or raised as ``TimestampAlignmentError`` when
    ``strict_timestamps`` is set.
    """
    pair = FilePair.for_source(path)
    if is_fresh(pair):
        logger.debug("up to date: %s", pair.compressed)
        return False

    try:
        pair.compressed.unlink(missing_ok=True)
    except OSError as exc:
        raise CompressionFailed(path, None, f"cannot remove stale {pair.compressed}: {exc}") from exc

    compressor.compress(path)
    logger.info("%s", pair.compressed)

    try:
        align_timestamps(pair)
    except OSError as exc:
        if strict_timestamps:
            raise TimestampAlignmentError(pair.compressed, exc) from exc
        logger.warning("Cannot set modification time of %s: %s", pair.compressed, exc.strerror or exc)
    return True


__all__ = [
    "COMPRESSED_SUFFIX",
    "FilePair",
    "is_fresh",
    "Compressor",
    "ExternalProcessCompressor",
    "align_timestamps",
    "process_file",
]
