"""One traversal-and-convert pass over a configured directory tree."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .commands import ResolvedCommand, resolve_command
from .compressor import Compressor, ExternalProcessCompressor, process_file
from .config import Configuration, validate_root
from .selector import select_files

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    selected: int = 0
    compressed: int = 0

    @property
    def skipped(self) -> int:
        return self.selected - self.compressed


def run(
    config: Configuration,
    *,
    compressor_factory: Callable[[ResolvedCommand], Compressor] = ExternalProcessCompressor,
) -> RunSummary:
    """Compress every eligible file under ``config.root`` that is not fresh.

    The root is checked and the compressor resolved before anything is
    touched. Processing stops at the first error, which propagates.
    """
    validate_root(config.root)
    command = resolve_command(
        config.command_candidates,
        config.search_path,
        require_executable=config.require_executable,
    )
    logger.debug("using compressor: %s (%s)", command, command.executable)
    compressor = compressor_factory(command)

    summary = RunSummary()
    for path in select_files(
        config.root,
        include=config.include_matcher,
        exclude=config.exclude_matcher,
        min_length=config.min_length,
    ):
        summary.selected += 1
        if process_file(path, compressor, strict_timestamps=config.strict_timestamps):
            summary.compressed += 1

    logger.debug(
        "%d eligible files, %d compressed, %d already up to date",
        summary.selected,
        summary.compressed,
        summary.skipped,
    )
    return summary


__all__ = ["RunSummary", "run"]
