"""
Glob matching over a repository tree: one glob, a union of globs, or named groups
of globs classified in a single walk.

All paths returned are relative to the repository root, `/`-separated, and in walk
order (see `walk_repo`). Invalid globs are skipped unless `strict=True`.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping

from repoglob.repo_walker import (
    PatternCompileError,
    WalkOptions,
    compile_glob_set,
    walk_repo,
)
from repoglob.repo_walker.globs import glob_to_regex

__all__ = [
    "glob_to_regex",
    "walk_repo_glob",
    "walk_repo_globs",
    "walk_repo_globs_map",
]


def walk_repo_glob(
    repo_dir: str | os.PathLike[str],
    glob: str,
    *,
    strict: bool = False,
    options: WalkOptions | None = None,
) -> list[str]:
    """
    List files under `repo_dir` matching `glob`.

    An invalid glob returns an empty list, or raises `PatternCompileError` when
    `strict` is set.
    """
    try:
        spec = compile_glob_set([glob], strict=True)
    except PatternCompileError:
        if strict:
            raise
        return []

    return walk_repo(repo_dir, lambda path: path if spec.match_file(path) else None, options)


def walk_repo_globs(
    repo_dir: str | os.PathLike[str],
    globs: Iterable[str],
    *,
    strict: bool = False,
    options: WalkOptions | None = None,
) -> list[str]:
    """
    List files under `repo_dir` matching any of `globs`. Each file is listed once.

    Invalid globs are skipped (or raise when `strict` is set); if none compile, the
    result is empty and no walk is done.
    """
    spec = compile_glob_set(globs, strict=strict)
    if not len(spec):
        return []

    return walk_repo(repo_dir, lambda path: path if spec.match_file(path) else None, options)


def walk_repo_globs_map(
    repo_dir: str | os.PathLike[str],
    globs_map: Mapping[str, Iterable[str]],
    *,
    strict: bool = False,
    options: WalkOptions | None = None,
) -> dict[str, list[str]]:
    """
    Classify files under `repo_dir` into named groups in one walk.

    Every key in `globs_map` appears in the result, in input order, mapped to the
    files matching any of its globs. A file matching several keys is listed under
    each of them. Keys whose globs all fail to compile match nothing (or raise
    when `strict` is set).
    """
    matchers = [(key, compile_glob_set(globs, strict=strict)) for key, globs in globs_map.items()]
    result: dict[str, list[str]] = {key: [] for key, _ in matchers}
    active = [(key, spec) for key, spec in matchers if len(spec)]
    if not active:
        return result

    def classify(path: str) -> tuple[str, list[str]] | None:
        keys = [key for key, spec in active if spec.match_file(path)]
        return (path, keys) if keys else None

    for path, keys in walk_repo(repo_dir, classify, options):
        for key in keys:
            result[key].append(path)
    return result

