"""Exceptions raised while reading repository configuration and compiling globs."""

from __future__ import annotations


class RepoglobError(Exception):
    """Base class for all repoglob errors."""


class ConfigParseError(RepoglobError):
    """
    A `.gitmodules`-style file is not well-formed. The underlying parser error is
    available as `__cause__`.
    """


class PatternCompileError(RepoglobError, ValueError):
    """A glob pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")
        self.pattern: str = pattern
        self.reason: str = reason
