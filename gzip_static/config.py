"""Run configuration and persisted user defaults.

``Configuration`` is the immutable value object the driver consumes. Values
not given explicitly come from the user's JSON defaults file, then from the
built-in defaults. Reading that file is defensive: malformed or missing
config falls back safely.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .commands import CommandLine
from .errors import ConfigError
from .patterns import TypeMatcher, compile_type_patterns, normalize_type_pattern

APP_NAME = "gzip-static-generate"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_TYPES: tuple[str, ...] = (
    "html",
    "htm",
    "?html",
    "txt",
    "css",
    "js",
    "xml",
    "rss",
    "atom",
    "svg",
    "mml",
    "kml",
)
DEFAULT_MIN_LENGTH = 50
DEFAULT_COMMANDS: tuple[str, ...] = ("zopfli", "gzip -kf9")
COMPRESSED_TYPE = "gz"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _string_list(value: object) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, str) for item in value):
        return None
    return tuple(value)


def load_user_defaults() -> dict[str, object]:
    """Return validated ``types``/``min_length``/``cmd`` overrides from config.

    Entries of the wrong type are dropped individually.
    """
    data = load_config()
    defaults: dict[str, object] = {}

    types = _string_list(data.get("types"))
    if types is not None:
        defaults["types"] = types

    min_length = data.get("min_length")
    if isinstance(min_length, int) and not isinstance(min_length, bool) and min_length >= 0:
        defaults["min_length"] = min_length

    commands = _string_list(data.get("cmd"))
    if commands is not None:
        defaults["cmd"] = commands
    return defaults


def default_types(user_defaults: Mapping[str, object] | None = None) -> tuple[str, ...]:
    """Return the user-configured types, else the built-in list.

    Pass ``user_defaults`` from ``load_user_defaults`` to avoid re-reading the
    config file.
    """
    defaults = load_user_defaults() if user_defaults is None else user_defaults
    value = defaults.get("types")
    return value if isinstance(value, tuple) else DEFAULT_TYPES


def default_min_length(user_defaults: Mapping[str, object] | None = None) -> int:
    defaults = load_user_defaults() if user_defaults is None else user_defaults
    value = defaults.get("min_length")
    return value if isinstance(value, int) else DEFAULT_MIN_LENGTH


def default_commands(user_defaults: Mapping[str, object] | None = None) -> tuple[str, ...]:
    defaults = load_user_defaults() if user_defaults is None else user_defaults
    value = defaults.get("cmd")
    return value if isinstance(value, tuple) else DEFAULT_COMMANDS


def search_path_from_env(environ: Mapping[str, str] | None = None) -> tuple[Path, ...]:
    """Split ``PATH`` into directories; empty entries mean the current directory."""
    env = os.environ if environ is None else environ
    raw = env.get("PATH", "")
    if not raw:
        return ()
    return tuple(Path(entry or ".") for entry in raw.split(os.pathsep))


def validate_root(root: Path) -> Path:
    if not root.exists():
        raise ConfigError(f"Directory not found: {root}")
    if not root.is_dir():
        raise ConfigError(f"Not a directory: {root}")
    return root


@dataclass(frozen=True)
class Configuration:
    """Resolved settings for one run.

    ``include_matcher`` and ``exclude_matcher`` are compiled from the type
    tuples at construction time.
    """

    root: Path
    include_types: tuple[str, ...]
    exclude_types: tuple[str, ...]
    min_length: int | None
    command_candidates: tuple[CommandLine, ...]
    search_path: tuple[Path, ...]
    require_executable: bool = True
    strict_timestamps: bool = False
    include_matcher: TypeMatcher | None = field(init=False, repr=False, compare=False)
    exclude_matcher: TypeMatcher | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.min_length is not None and self.min_length < 0:
            raise ConfigError(f"min_length must be >= 0, got {self.min_length}")
        object.__setattr__(self, "include_matcher", compile_type_patterns(self.include_types))
        object.__setattr__(self, "exclude_matcher", compile_type_patterns(self.exclude_types))


def _with_compressed_type(patterns: Iterable[str]) -> tuple[str, ...]:
    normalized = [normalize_type_pattern(pattern) for pattern in patterns]
    if not any(pattern.casefold() == COMPRESSED_TYPE for pattern in normalized):
        normalized.append(COMPRESSED_TYPE)
    return tuple(normalized)


def _parse_commands(commands: Iterable[str | CommandLine]) -> tuple[CommandLine, ...]:
    parsed: list[CommandLine] = []
    for command in commands:
        parsed.append(command if isinstance(command, CommandLine) else CommandLine.parse(command))
    return tuple(parsed)


def resolve_configuration(
    root: Path | str,
    *,
    types: Iterable[str] | None = None,
    min_length: int | None = None,
    commands: Iterable[str | CommandLine] | None = None,
    exclude_types: Iterable[str] = (),
    search_path: Iterable[Path] | None = None,
    require_executable: bool = True,
    strict_timestamps: bool = False,
    user_defaults: Mapping[str, object] | None = None,
) -> Configuration:
    """Build a validated ``Configuration``.

    ``None`` for ``types``, ``min_length`` or ``commands`` means "use the user
    default, else the built-in default". ``gz`` is always added to the
    exclusion patterns so the tool never compresses its own output.

    ``user_defaults`` is the result of ``load_user_defaults``; the config file
    is read at most once here when it is not given.
    """
    root_path = validate_root(Path(root))
    if user_defaults is None and (types is None or min_length is None or commands is None):
        user_defaults = load_user_defaults()
    defaults: Mapping[str, object] = user_defaults or {}
    include = tuple(normalize_type_pattern(pattern) for pattern in (types if types is not None else default_types(defaults)))
    return Configuration(
        root=root_path,
        include_types=include,
        exclude_types=_with_compressed_type(exclude_types),
        min_length=default_min_length(defaults) if min_length is None else min_length,
        command_candidates=_parse_commands(commands if commands is not None else default_commands(defaults)),
        search_path=tuple(search_path) if search_path is not None else search_path_from_env(),
        require_executable=require_executable,
        strict_timestamps=strict_timestamps,
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_TYPES",
    "DEFAULT_MIN_LENGTH",
    "DEFAULT_COMMANDS",
    "Configuration",
    "load_config",
    "load_user_defaults",
    "default_types",
    "default_min_length",
    "default_commands",
    "search_path_from_env",
    "validate_root",
    "resolve_configuration",
]
