"""
Default names and limits used during repository traversal.
"""

from __future__ import annotations

# Version-control metadata directory; never descended into.
GIT_DIR_NAME: str = ".git"

# Declares submodule mount points, read from the repository root only.
GITMODULES_FILENAME: str = ".gitmodules"

# Only honored inside a git repository when `require_git` is on.
GITIGNORE_FILENAME: str = ".gitignore"

# Per-directory ignore files honored when `respect_ignore_files` is on.
# Listed from lowest to highest precedence within one directory.
DEFAULT_IGNORE_FILENAMES: tuple[str, ...] = (GITIGNORE_FILENAME, ".ignore")

DEFAULT_THREADS: int = 1

# Upper bound for worker threads, regardless of what callers ask for.
MAX_THREADS: int = 64
