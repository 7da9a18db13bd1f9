"""
Self-contained repository walker with submodule-aware pruning and glob compilation.

No imports from `repoglob` outside this package.

Usage::

    from repoglob.repo_walker import WalkOptions, compile_glob_set, walk_repo

    spec = compile_glob_set(["**/*.py"])
    files = walk_repo(".", lambda path: path if spec.match_file(path) else None,
                      WalkOptions(threads=4))
"""

from repoglob.repo_walker.errors import ConfigParseError, PatternCompileError, RepoglobError
from repoglob.repo_walker.globs import compile_glob, compile_glob_set, glob_to_regex
from repoglob.repo_walker.submodules import (
    build_submodule_matcher,
    load_submodule_paths,
    parse_submodule_paths,
)
from repoglob.repo_walker.types import EntryKind, PathClassifier, WalkOptions
from repoglob.repo_walker.walker import walk_repo

__all__ = [
    "ConfigParseError",
    "EntryKind",
    "PathClassifier",
    "PatternCompileError",
    "RepoglobError",
    "WalkOptions",
    "build_submodule_matcher",
    "compile_glob",
    "compile_glob_set",
    "glob_to_regex",
    "load_submodule_paths",
    "parse_submodule_paths",
    "walk_repo",
]
