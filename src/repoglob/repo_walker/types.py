"""Option and entry types for repository traversal."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from repoglob.repo_walker.defaults import DEFAULT_IGNORE_FILENAMES, DEFAULT_THREADS, MAX_THREADS

T = TypeVar("T")

# Receives a root-relative `/`-separated path of a regular file. `None` means
# "not collected".
PathClassifier = Callable[[str], T | None]


class EntryKind(Enum):
    """File type of a directory entry, determined without following symlinks."""

    file = "file"
    directory = "directory"
    symlink = "symlink"
    other = "other"

    @classmethod
    def of(cls, entry: os.DirEntry[str]) -> EntryKind | None:
        """Classify a `DirEntry`, or return `None` if its type can't be determined."""
        try:
            if entry.is_symlink():
                return cls.symlink
            if entry.is_file(follow_symlinks=False):
                return cls.file
            if entry.is_dir(follow_symlinks=False):
                return cls.directory
        except OSError:
            return None
        return cls.other


@dataclass
class WalkOptions:
    """
    Options for a single repository walk.

    `threads=1` scans directories on the calling thread; higher values scan them
    on a thread pool. Results are ordered identically either way.
    `respect_ignore_files` honors `ignore_filenames` found in each directory.
    With `require_git`, `.gitignore` files count only inside a git repository
    (a `.git` entry at the root or above it); `.ignore` files count everywhere.
    `.git` and submodule subtrees are pruned regardless of these options.
    """

    threads: int = DEFAULT_THREADS
    respect_ignore_files: bool = True
    require_git: bool = True
    ignore_filenames: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_FILENAMES))

    @property
    def effective_threads(self) -> int:
        """Worker count clamped to `1..MAX_THREADS`."""
        return max(1, min(self.threads, MAX_THREADS))
