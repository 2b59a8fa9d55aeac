"""Lazy traversal yielding the regular files eligible for compression."""

from __future__ import annotations

import errno
import os
import stat
from collections.abc import Iterator
from pathlib import Path

from .errors import TraversalError
from .patterns import TypeMatcher


def _raise_traversal_error(exc: OSError) -> None:
    raise TraversalError(Path(exc.filename) if exc.filename else Path("."), exc)


def is_eligible(
    name: str,
    size: int,
    include: TypeMatcher | None = None,
    exclude: TypeMatcher | None = None,
    min_length: int | None = None,
) -> bool:
    """Apply the inclusion, exclusion and size constraints together."""
    if include is not None and not include.matches(name):
        return False
    if exclude is not None and exclude.matches(name):
        return False
    if min_length is not None and size <= min_length:
        return False
    return True


def select_files(
    root: Path,
    include: TypeMatcher | None = None,
    exclude: TypeMatcher | None = None,
    min_length: int | None = None,
) -> Iterator[Path]:
    """Yield eligible regular files under ``root``.

    Each call walks the tree afresh. Symlinks are neither followed nor
    yielded. Names are visited in sorted order per directory so a given tree
    always produces the same sequence. Yielded paths are joined onto
    ``root`` as given, so a relative root yields relative paths.

    Raises ``TraversalError`` when any directory cannot be listed, including
    the root itself.
    """
    try:
        root_info = os.stat(root)
    except OSError as exc:
        raise TraversalError(Path(root), exc) from exc
    if not stat.S_ISDIR(root_info.st_mode):
        raise TraversalError(Path(root), NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(root)))

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_traversal_error, followlinks=False):
        dirnames.sort()
        base = Path(dirpath)
        for filename in sorted(filenames):
            path = base / filename
            try:
                info = path.lstat()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise TraversalError(path, exc) from exc
            if not stat.S_ISREG(info.st_mode):
                continue
            if is_eligible(filename, info.st_size, include, exclude, min_length):
                yield path


__all__ = ["is_eligible", "select_files"]
