"""
walk_repo: the single traversal every matching entry point is built on.

Walks a repository working tree once, pruning `.git`, symlinks, submodule
subtrees and (optionally) ignored paths, and hands each surviving regular file's
root-relative path to a caller-supplied classifier.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

import pathspec

from repoglob.repo_walker.defaults import GIT_DIR_NAME, GITIGNORE_FILENAME
from repoglob.repo_walker.gitignore import IgnoreRules, load_ignore_spec
from repoglob.repo_walker.submodules import build_submodule_matcher, load_submodule_paths
from repoglob.repo_walker.types import EntryKind, WalkOptions

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class _WalkContext(Generic[T]):
    """Read-only state shared by every directory scan of one walk."""

    root: Path
    classify: Callable[[str], T | None]
    submodules: pathspec.PathSpec
    options: WalkOptions
    ignore_filenames: tuple[str, ...] = ()


@dataclass
class _DirectoryScan(Generic[T]):
    """Classified files of one directory, plus the subdirectories left to visit."""

    results: list[T] = field(default_factory=list)
    subdirs: list[str] = field(default_factory=list)
    rules: IgnoreRules = field(default_factory=IgnoreRules)


def _join(rel_dir: str, name: str) -> str:
    return f"{rel_dir}/{name}" if rel_dir else name


def _is_text(name: str) -> bool:
    """False for names that only survive decoding as surrogate escapes."""
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _in_git_repo(root: Path) -> bool:
    """True if `root` or one of its ancestors has a `.git` entry (directory or file)."""
    current = root.resolve()
    while True:
        if os.path.lexists(current / GIT_DIR_NAME):
            return True
        if current.parent == current:
            return False
        current = current.parent


def _active_ignore_filenames(root: Path, options: WalkOptions) -> tuple[str, ...]:
    if not options.respect_ignore_files:
        return ()
    names = tuple(options.ignore_filenames)
    if options.require_git and GITIGNORE_FILENAME in names and not _in_git_repo(root):
        log.debug("Not inside a git repository, ignoring %s files: %s", GITIGNORE_FILENAME, root)
        names = tuple(name for name in names if name != GITIGNORE_FILENAME)
    return names


def _is_dir_excluded(ctx: _WalkContext[T], name: str, rel_path: str, rules: IgnoreRules) -> bool:
    """Check if a directory should be pruned (not descended into)."""
    if name == GIT_DIR_NAME:
        return True
    if ctx.submodules.match_file(rel_path):
        return True
    return rules.is_ignored(rel_path, is_dir=True)


def _scan_directory(ctx: _WalkContext[T], rel_dir: str, rules: IgnoreRules) -> _DirectoryScan[T]:
    """
    List one directory, filter its entries, and classify its files in name order.
    An unreadable directory yields an empty scan.
    """
    abs_dir = ctx.root / rel_dir if rel_dir else ctx.root
    if ctx.ignore_filenames:
        rules = rules.extend(rel_dir, load_ignore_spec(abs_dir, ctx.ignore_filenames))

    files: list[str] = []
    dirs: list[str] = []
    try:
        with os.scandir(abs_dir) as entries:
            for entry in entries:
                name = entry.name
                if not _is_text(name):
                    continue
                kind = EntryKind.of(entry)
                rel_path = _join(rel_dir, name)
                if kind is EntryKind.file:
                    if not rules.is_ignored(rel_path, is_dir=False):
                        files.append(name)
                elif kind is EntryKind.directory:
                    if not _is_dir_excluded(ctx, name, rel_path, rules):
                        dirs.append(name)
                # Symlinks, other file types and entries of unknown type are dropped.
    except OSError as e:
        log.debug("Skipping unreadable directory %s: %s", abs_dir, e)

    files.sort()
    dirs.sort()

    scan: _DirectoryScan[T] = _DirectoryScan(rules=rules)
    for name in files:
        result = ctx.classify(_join(rel_dir, name))
        if result is not None:
            scan.results.append(result)
    scan.subdirs = [_join(rel_dir, name) for name in dirs]
    return scan


def _walk_serial(ctx: _WalkContext[T]) -> list[T]:
    collected: list[T] = []
    stack: list[tuple[str, IgnoreRules]] = [("", IgnoreRules())]
    while stack:
        rel_dir, rules = stack.pop()
        scan = _scan_directory(ctx, rel_dir, rules)
        collected.extend(scan.results)
        stack.extend((subdir, scan.rules) for subdir in reversed(scan.subdirs))
    return collected


def _walk_parallel(ctx: _WalkContext[T], threads: int) -> list[T]:
    """
    Scan directories on a thread pool as they are discovered, then stitch the
    per-directory results together in the same depth-first order as `_walk_serial`.
    """
    scans: dict[str, _DirectoryScan[T]] = {}
    with ThreadPoolExecutor(max_workers=threads, thread_name_prefix="repoglob-walk") as executor:
        pending: dict[Future[_DirectoryScan[T]], str] = {
            executor.submit(_scan_directory, ctx, "", IgnoreRules()): ""
        }
        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            for future in done:
                rel_dir = pending.pop(future)
                scan = future.result()
                scans[rel_dir] = scan
                for subdir in scan.subdirs:
                    pending[executor.submit(_scan_directory, ctx, subdir, scan.rules)] = subdir

    collected: list[T] = []
    stack = [""]
    while stack:
        scan = scans[stack.pop()]
        collected.extend(scan.results)
        stack.extend(reversed(scan.subdirs))
    return collected


def walk_repo(
    repo_dir: str | os.PathLike[str],
    classify: Callable[[str], T | None],
    options: WalkOptions | None = None,
) -> list[T]:
    """
    Walk the repository at `repo_dir` and collect `classify(path)` for every regular
    file, skipping `None` results.

    `path` is relative to `repo_dir` and `/`-separated. Within each directory files
    come first, then subdirectories (each expanded in place), both sorted by name, so
    the result order depends only on the tree. `.git` directories, symlinks,
    submodule paths declared in `.gitmodules`, and paths matched by ignore files
    (when enabled; `.gitignore` only inside a git repository) are never visited.

    Filesystem errors never abort the walk; a missing root gives an empty list.
    Exceptions raised by `classify` propagate.
    """
    options = options or WalkOptions()
    root = Path(repo_dir)
    if not os.path.isdir(root):
        log.debug("Not a directory, nothing to walk: %s", root)
        return []

    submodule_paths = load_submodule_paths(root)
    if submodule_paths:
        log.debug("Excluding submodules under %s: %s", root, submodule_paths)
    ctx = _WalkContext(
        root=root,
        classify=classify,
        submodules=build_submodule_matcher(submodule_paths),
        options=options,
        ignore_filenames=_active_ignore_filenames(root, options),
    )

    threads = options.effective_threads
    if threads > 1:
        return _walk_parallel(ctx, threads)
    return _walk_serial(ctx)
