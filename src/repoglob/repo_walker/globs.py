"""
Glob compilation on top of pathspec's gitignore-style patterns.

Globs are anchored at the repository root before compiling, so the grammar reads
like a shell glob over root-relative paths: `*` and `?` stay within one path
segment, `**` spans any number of segments, and `[...]` is a character class.
A glob matches whole paths only; `foo/**` is how to select a directory's contents.
Submodule matching opts into gitignore's directory behavior with `descendants=True`,
where a pattern naming a directory also covers every path beneath it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

import pathspec
from pathspec.patterns.gitignore import GitIgnorePatternError
from pathspec.patterns.gitignore.basic import GitIgnoreBasicPattern

from repoglob.repo_walker.errors import PatternCompileError

log = logging.getLogger(__name__)

# Tail pathspec appends so a pattern matches a path or anything beneath it.
_DESCENDANTS_SUFFIX = "(?:/|$)"


def _to_gitignore_line(glob: str) -> str:
    """
    Rewrite a root-relative glob as an anchored gitignore line. Anchoring also keeps
    a leading `!` or `#` literal instead of meaning negation or a comment.
    """
    if not glob.strip():
        raise PatternCompileError(glob, "pattern is empty")
    # Gitignore drops trailing spaces unless they are escaped.
    body = glob.rstrip(" ")
    line = body + "\\ " * (len(glob) - len(body))
    if not line.startswith("/"):
        line = "/" + line
    return line


def _whole_path_regex(regex: str) -> str:
    if regex.endswith(_DESCENDANTS_SUFFIX):
        return regex[: -len(_DESCENDANTS_SUFFIX)] + "$"
    return regex


def compile_glob(glob: str, *, descendants: bool = False) -> pathspec.RegexPattern:
    """
    Compile one glob into a pathspec pattern, raising `PatternCompileError` if the
    glob is malformed (e.g. a dangling backslash or an invalid bracket range).

    With `descendants`, a glob naming a directory also matches everything under it.
    """
    line = _to_gitignore_line(glob)
    try:
        pattern = GitIgnoreBasicPattern(line)
    except (GitIgnorePatternError, re.error) as e:
        raise PatternCompileError(glob, str(e)) from e
    if pattern.include is None or pattern.regex is None:
        raise PatternCompileError(glob, "pattern matches nothing")
    if descendants:
        return pattern
    regex = re.compile(_whole_path_regex(pattern.regex.pattern))
    return pathspec.RegexPattern(regex, include=True)


def compile_glob_set(
    globs: Iterable[str], strict: bool = False, *, descendants: bool = False
) -> pathspec.PathSpec:
    """
    Compile globs into one `PathSpec` that matches a path if any member glob does.

    Invalid globs are logged and skipped, unless `strict` is set, in which case the
    first one raises `PatternCompileError`. An empty result matches nothing.
    """
    patterns: list[pathspec.RegexPattern] = []
    for glob in globs:
        try:
            patterns.append(compile_glob(glob, descendants=descendants))
        except PatternCompileError as e:
            if strict:
                raise
            log.warning("Skipping glob: %s", e)
    return pathspec.PathSpec(patterns)


def glob_to_regex(glob: str) -> str | None:
    """Return the regular expression a glob compiles to, or `None` if it is invalid."""
    try:
        pattern = compile_glob(glob)
    except PatternCompileError:
        return None
    assert pattern.regex is not None
    return pattern.regex.pattern
