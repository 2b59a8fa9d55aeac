"""Command-line front door for gzip-static-generate.

Parses CLI options into a ``Configuration`` and runs one compression pass.
Fatal errors become a one-line message and exit status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Mapping, Sequence

from . import __version__
from .config import (
    default_commands,
    default_min_length,
    default_types,
    load_user_defaults,
    resolve_configuration,
)
from .driver import run
from .errors import GzipStaticError

APPEND_PREFIX = "+="


def _non_negative_int(value: str) -> int:
    """argparse type for non-negative integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _split_commas(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def merge_list_option(
    values: Sequence[str] | None,
    defaults: Sequence[str],
    split_commas: bool,
) -> list[str] | None:
    """Combine repeated option values with their defaults.

    Plain values replace the defaults and accumulate across repeats. A value
    starting with ``+=`` appends to the defaults (or to what has accumulated
    so far). Returns ``None`` when the option was never given.
    """
    if values is None:
        return None
    merged: list[str] | None = None
    for value in values:
        if value.startswith(APPEND_PREFIX):
            value = value[len(APPEND_PREFIX):]
            if merged is None:
                merged = list(defaults)
        elif merged is None:
            merged = []
        if split_commas:
            merged.extend(_split_commas(value))
        elif value.strip():
            merged.append(value.strip())
    return merged


def build_parser(user_defaults: Mapping[str, object] | None = None) -> argparse.ArgumentParser:
    """Build the parser; ``user_defaults`` only feeds the default values shown in help."""
    if user_defaults is None:
        user_defaults = load_user_defaults()
    parser = argparse.ArgumentParser(
        prog="gzip-static-generate",
        description=(
            "Pre-compress static files so a webserver can serve FILE.gz directly. "
            "Files whose .gz sibling is already up to date are skipped."
        ),
    )
    parser.add_argument("directory", help="Directory tree to process.")
    parser.add_argument(
        "-t",
        "--types",
        "--type",
        dest="types",
        action="append",
        metavar="PATTERNS",
        help=(
            "Comma-separated extension globs to compress; repeatable. "
            f"Prefix with '{APPEND_PREFIX}' to add to the defaults "
            f"(default: {','.join(default_types(user_defaults))})."
        ),
    )
    parser.add_argument(
        "-m",
        "--min-length",
        "--min_length",
        dest="min_length",
        type=_non_negative_int,
        default=None,
        metavar="BYTES",
        help=f"Only compress files larger than BYTES (default: {default_min_length(user_defaults)}).",
    )
    parser.add_argument(
        "-c",
        "--cmd",
        "--command",
        dest="commands",
        action="append",
        metavar="COMMAND",
        help=(
            "Compressor command line, tried in order; repeatable. The file name is appended. "
            f"Prefix with '{APPEND_PREFIX}' to add to the defaults "
            f"(default: {' then '.join(repr(cmd) for cmd in default_commands(user_defaults))})."
        ),
    )
    parser.add_argument(
        "--allow-non-executable",
        action="store_true",
        help="Accept a compressor program file even without its execute permission bit.",
    )
    parser.add_argument(
        "--strict-timestamps",
        action="store_true",
        help="Fail when a .gz file's modification time cannot be set.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Also report skipped files and the chosen compressor.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only report warnings and errors.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and run one pass over the given directory.

    ``argv`` defaults to ``sys.argv[1:]``. Any ``GzipStaticError`` is
    reported as ``SystemExit`` with the error message.
    """
    user_defaults = load_user_defaults()
    parser = build_parser(user_defaults)
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        config = resolve_configuration(
            args.directory,
            types=merge_list_option(args.types, default_types(user_defaults), split_commas=True),
            min_length=args.min_length,
            commands=merge_list_option(args.commands, default_commands(user_defaults), split_commas=False),
            require_executable=not args.allow_non_executable,
            strict_timestamps=args.strict_timestamps,
            user_defaults=user_defaults,
        )
        run(config)
    except GzipStaticError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
