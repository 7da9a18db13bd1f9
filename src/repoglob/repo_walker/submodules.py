"""
Submodule discovery from `.gitmodules`, used to keep walks out of nested repositories.

`.gitmodules` uses git-config syntax: `[submodule "name"]` sections holding
`path = ...` and `url = ...` keys. Only the `path` values matter here.
"""

from __future__ import annotations

import configparser
import logging
import os
from collections.abc import Sequence
from pathlib import Path

import pathspec

from repoglob.repo_walker.defaults import GITMODULES_FILENAME
from repoglob.repo_walker.errors import ConfigParseError
from repoglob.repo_walker.globs import compile_glob_set

log = logging.getLogger(__name__)


def _new_parser() -> configparser.ConfigParser:
    # Parser settings that approximate git-config syntax.
    return configparser.ConfigParser(
        strict=False,
        allow_no_value=True,
        delimiters=("=",),
        interpolation=None,
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=("#", ";"),
        empty_lines_in_values=False,
        default_section="\x00",
    )


def _is_submodule_section(header: str) -> bool:
    """True for `submodule "name"`, legacy `submodule.name`, and bare `submodule`."""
    kind = header.strip().split(None, 1)[0] if header.strip() else ""
    kind = kind.split(".", 1)[0]
    return kind.lower() == "submodule"


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _check_section_headers(parser: configparser.ConfigParser) -> None:
    """Raise for unterminated `[section` lines, which the parser takes for keys."""
    for section in parser.sections():
        for key in parser.options(section):
            if key.startswith("["):
                raise ConfigParseError(
                    f"Malformed {GITMODULES_FILENAME}: bad section header {key!r} in [{section}]"
                )


def parse_submodule_paths(text: str) -> list[str] | None:
    """
    Parse `.gitmodules` text and return each submodule's `path` value in file order.

    Returns `None` if the text has no `submodule` sections at all, and a possibly
    empty list otherwise (sections without a `path` are skipped). Raises
    `ConfigParseError` if the text is not a well-formed sectioned config.
    """
    parser = _new_parser()
    # Git config has no indented continuation lines, so indentation is dropped.
    lines = "\n".join(line.lstrip() for line in text.splitlines())
    try:
        parser.read_string(lines, source=GITMODULES_FILENAME)
    except configparser.Error as e:
        raise ConfigParseError(f"Malformed {GITMODULES_FILENAME}: {e}") from e
    _check_section_headers(parser)

    sections = [name for name in parser.sections() if _is_submodule_section(name)]
    if not sections:
        return None

    paths: list[str] = []
    for name in sections:
        value = parser.get(name, "path", fallback=None)
        if value is None:
            continue
        path = _unquote(value)
        if path:
            paths.append(path)
    return paths


def load_submodule_paths(repo_root: str | os.PathLike[str]) -> list[str] | None:
    """
    Read `.gitmodules` at the repository root and return its submodule paths.

    Never raises: a missing, unreadable, non-UTF-8 or malformed file, or one with no
    submodule sections, all mean "no submodules" and return `None`.
    """
    gitmodules = Path(repo_root) / GITMODULES_FILENAME
    try:
        text = gitmodules.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        log.debug("Could not read %s: %s", gitmodules, e)
        return None

    try:
        return parse_submodule_paths(text)
    except ConfigParseError as e:
        log.debug("Ignoring %s: %s", gitmodules, e)
        return None


def build_submodule_matcher(paths: Sequence[str] | None) -> pathspec.PathSpec:
    """
    Compile submodule paths into one matcher over root-relative directory paths.

    Each path is compiled as its own glob; invalid ones are skipped. `None` or an
    empty list gives a matcher that matches nothing.
    """
    if not paths:
        return pathspec.PathSpec([])
    # A trailing slash would make the pattern match only paths below the directory.
    cleaned = [p.strip().strip("/") for p in paths]
    return compile_glob_set((p for p in cleaned if p), descendants=True)
