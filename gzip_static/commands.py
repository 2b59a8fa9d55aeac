"""Compressor command resolution.

Picks the first candidate command line whose program exists, either as a
direct path or as a file in one of the search-path directories. The search
path is passed in explicitly so resolution never reads the environment.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError, NoCompressorFound


@dataclass(frozen=True)
class CommandLine:
    """One candidate: program reference plus fixed arguments."""

    program: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> CommandLine:
        """Tokenize ``text`` with shell quoting rules."""
        try:
            tokens = shlex.split(text)
        except ValueError as exc:
            raise ConfigError(f"invalid command line {text!r}: {exc}") from exc
        if not tokens:
            raise ConfigError(f"invalid empty command line: {text!r}")
        return cls(program=tokens[0], args=tuple(tokens[1:]))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ResolvedCommand:
    """Command chosen for the whole run.

    ``executable`` is the file that satisfied the availability probe; the
    program token as written is still what gets spawned.
    """

    candidate: CommandLine
    executable: Path

    def argv_for(self, path: Path) -> list[str]:
        return [*self.candidate.argv, str(path)]

    def __str__(self) -> str:
        return str(self.candidate)


def is_direct_path(program: str) -> bool:
    """Return whether ``program`` names a path rather than a bare command."""
    return "/" in program or os.sep in program or program.startswith(".")


def _usable_file(path: Path, require_executable: bool) -> bool:
    try:
        if not path.is_file():
            return False
    except OSError:
        return False
    if require_executable and not os.access(path, os.X_OK):
        return False
    return True


def program_available(
    program: str,
    search_path: Sequence[Path],
    require_executable: bool = True,
) -> Path | None:
    """Return the file that makes ``program`` available, else ``None``.

    Direct paths are checked as-is. Bare names are looked up in each
    ``search_path`` directory in order.
    """
    if is_direct_path(program):
        candidate = Path(program)
        return candidate if _usable_file(candidate, require_executable) else None

    for directory in search_path:
        candidate = directory / program
        if _usable_file(candidate, require_executable):
            return candidate
    return None


def resolve_command(
    candidates: Iterable[CommandLine],
    search_path: Sequence[Path],
    require_executable: bool = True,
) -> ResolvedCommand:
    """Return the first available candidate; later ones are never probed.

    Raises ``NoCompressorFound`` listing every tried candidate when none of
    them resolves, including when ``candidates`` is empty.
    """
    tried: list[CommandLine] = []
    for candidate in candidates:
        tried.append(candidate)
        executable = program_available(candidate.program, search_path, require_executable)
        if executable is not None:
            return ResolvedCommand(candidate=candidate, executable=executable)
    raise NoCompressorFound(tried)


__all__ = [
    "CommandLine",
    "ResolvedCommand",
    "is_direct_path",
    "program_available",
    "resolve_command",
]
