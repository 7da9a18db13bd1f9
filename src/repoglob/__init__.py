"""
repoglob: glob matching over a repository working tree that never descends into
`.git` or git submodules.

Usage::

    from repoglob import walk_repo_glob, walk_repo_globs, walk_repo_globs_map

    walk_repo_glob(".", "**/*.md")
    walk_repo_globs(".", ["**/package.json", "**/package-lock.json"])
    walk_repo_globs_map(".", {"json": ["**/*.json"], "lock": ["**/*.lock"]})
"""

from repoglob.match_api import glob_to_regex, walk_repo_glob, walk_repo_globs, walk_repo_globs_map
from repoglob.repo_walker import ConfigParseError, PatternCompileError, WalkOptions, walk_repo

__all__ = [
    "ConfigParseError",
    "PatternCompileError",
    "WalkOptions",
    "glob_to_regex",
    "walk_repo",
    "walk_repo_glob",
    "walk_repo_globs",
    "walk_repo_globs_map",
]
