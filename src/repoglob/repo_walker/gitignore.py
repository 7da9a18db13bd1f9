"""Per-directory ignore file handling (`.gitignore`, `.ignore`) using pathspec."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import pathspec
from pathspec.patterns.gitignore import GitIgnorePatternError
from pathspec.patterns.gitignore.basic import GitIgnoreBasicPattern

log = logging.getLogger(__name__)


def _read_ignore_file(path: Path) -> list[str] | None:
    """
    Return the rule lines of an ignore file, or `None` if it is missing, unreadable,
    not valid UTF-8, or has no rules.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        log.debug("Ignoring unreadable ignore file %s: %s", path, e)
        return None
    lines = [line for line in text.splitlines() if line.strip() and not line.startswith("#")]
    return lines or None


def load_ignore_spec(directory: Path, filenames: Sequence[str]) -> pathspec.PathSpec | None:
    """
    Read the named ignore files in `directory` and compile their rules into one
    `PathSpec`, later files taking precedence. Returns `None` when there are no rules.
    Invalid rules are skipped.
    """
    patterns: list[GitIgnoreBasicPattern] = []
    for name in filenames:
        lines = _read_ignore_file(directory / name)
        if not lines:
            continue
        for line in lines:
            try:
                pattern = GitIgnoreBasicPattern(line)
            except (GitIgnorePatternError, re.error) as e:
                log.debug("Skipping rule %r in %s: %s", line, directory / name, e)
                continue
            if pattern.include is not None:
                patterns.append(pattern)
    if not patterns:
        return None
    return pathspec.PathSpec(patterns)


@dataclass(frozen=True)
class IgnoreRules:
    """
    Ignore specs in effect for one directory: its own file's rules plus those of its
    ancestors up to the walk root. Each spec is paired with the root-relative
    directory it was read from ("" for the root).
    """

    specs: tuple[tuple[str, pathspec.PathSpec], ...] = ()

    def extend(self, rel_dir: str, spec: pathspec.PathSpec | None) -> IgnoreRules:
        """Rules for a child directory that may carry its own ignore file."""
        if spec is None:
            return self
        return IgnoreRules(self.specs + ((rel_dir, spec),))

    def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
        """
        Check a root-relative path. The deepest ignore file with a matching rule
        decides, and within a file the last matching rule wins, so `!pattern`
        re-includes a path ignored further up.
        """
        for rel_dir, spec in reversed(self.specs):
            local = rel_path[len(rel_dir) + 1 :] if rel_dir else rel_path
            if is_dir:
                local += "/"
            include = spec.check_file(local).include
            if include is not None:
                return include
        return False
