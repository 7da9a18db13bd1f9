"""
TOML-based config file loading for repoglob.

Searches for `.repoglob.toml`, `repoglob.toml`, or `pyproject.toml [tool.repoglob]`
walking up from the repository root. Config values are merged with CLI flags
using precedence: explicit CLI flags > config file > built-in defaults.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

log = logging.getLogger(__name__)


@dataclass
class RepoglobConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    # Matching
    globs: list[str] | None = None
    groups: dict[str, list[str]] | None = None
    strict: bool | None = None
    # Traversal
    threads: int | None = None
    respect_ignore_files: bool | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".repoglob.toml", "repoglob.toml", "pyproject.toml"]

# Mapping from TOML kebab-case keys to Python snake_case field names
_KEBAB_TO_SNAKE: dict[str, str] = {
    "respect-ignore-files": "respect_ignore_files",
}

# Tables whose contents are a value of their own rather than nested settings.
_TABLE_FIELDS = {"groups"}

_VALID_FIELDS = {f.name for f in fields(RepoglobConfig)}

# Scalar settings and the TOML type each must have.
_SCALAR_TYPES: dict[str, type] = {
    "strict": bool,
    "threads": int,
    "respect_ignore_files": bool,
}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.repoglob.toml` >
    `repoglob.toml` > `pyproject.toml` (only if it has `[tool.repoglob]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_repoglob_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_repoglob_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.repoglob] section."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return "repoglob" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError):
        return False


def load_config(config_path: Path) -> RepoglobConfig:
    """
    Load a `RepoglobConfig` from a TOML file. Supports both standalone
    `repoglob.toml` / `.repoglob.toml` and `pyproject.toml` (extracts
    `[tool.repoglob]`). A file that can't be read or parsed gives an empty config.
    """
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        log.warning("Ignoring config file %s: %s", config_path, e)
        return RepoglobConfig()

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("repoglob", {})

    return _parse_config_data(data, source=config_path)


def _parse_config_data(data: dict[str, Any], source: Path | None = None) -> RepoglobConfig:
    """Parse a flat or sectioned TOML dict into RepoglobConfig."""
    # Flatten sections: [matching] and [traversal] merge into top level
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict) and key not in _TABLE_FIELDS:
            for sub_key, sub_value in cast(dict[str, Any], value).items():
                flat[sub_key] = sub_value
        else:
            flat[key] = value

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = _KEBAB_TO_SNAKE.get(key, key.replace("-", "_"))
        if snake_key in _VALID_FIELDS:
            mapped[snake_key] = value
        else:
            log.warning("Ignoring unrecognized config key %r in %s", key, source or "config")

    for name, expected in _SCALAR_TYPES.items():
        if name in mapped and not _is_type(mapped[name], expected):
            value = mapped.pop(name)
            log.warning(
                "Ignoring config key %r: expected %s, got %s",
                name,
                expected.__name__,
                type(value).__name__,
            )
    if "groups" in mapped:
        mapped["groups"] = _normalize_groups(mapped["groups"])
    if "globs" in mapped:
        mapped["globs"] = _normalize_globs(mapped["globs"])

    return RepoglobConfig(**mapped)


def _is_type(value: Any, expected: type) -> bool:
    # TOML booleans are not integers here.
    if isinstance(value, bool) and expected is not bool:
        return False
    return isinstance(value, expected)


def _normalize_globs(globs: Any) -> list[str] | None:
    """Accept `globs = "glob"` as shorthand for `globs = ["glob"]`."""
    if isinstance(globs, str):
        return [globs]
    if isinstance(globs, list) and all(isinstance(g, str) for g in cast(list[Any], globs)):
        return cast(list[str], globs)
    log.warning("Ignoring config key 'globs': expected a glob or list of globs")
    return None


def _normalize_groups(groups: Any) -> dict[str, list[str]] | None:
    """Accept `key = "glob"` as shorthand for `key = ["glob"]`."""
    if not isinstance(groups, dict):
        log.warning("Ignoring config key 'groups': expected a table, got %s", type(groups).__name__)
        return None
    normalized: dict[str, list[str]] = {}
    for key, value in cast(dict[str, Any], groups).items():
        if isinstance(value, str):
            normalized[str(key)] = [value]
        elif isinstance(value, list):
            normalized[str(key)] = [str(v) for v in cast(list[Any], value)]
        else:
            log.warning("Ignoring group %r: expected a glob or list of globs", key)
    return normalized


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: RepoglobConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(RepoglobConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        # Skip if CLI explicitly set this flag
        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
