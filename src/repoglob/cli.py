#!/usr/bin/env python3
"""
repoglob: List repository files matching glob patterns, skipping .git and submodules

Common usage:
  repoglob -g '**/*.py'
  repoglob path/to/repo -g '**/package.json' -g '**/package-lock.json'
  repoglob -m json='**/*.json' -m lock='**/*.lock' --json
  repoglob --regex '**/*.ts'

Patterns are matched against paths relative to the repository root: `*` stays
within one directory level and `**` spans any number of levels.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from repoglob.config import find_config_file, load_config, merge_cli_with_config
from repoglob.match_api import glob_to_regex, walk_repo_glob, walk_repo_globs, walk_repo_globs_map
from repoglob.repo_walker import PatternCompileError, WalkOptions

log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the repoglob tool."""

    root: str
    globs: list[str] = field(default_factory=list)
    groups: dict[str, list[str]] = field(default_factory=dict)
    json: bool = False
    threads: int = 1
    respect_ignore_files: bool = True
    strict: bool = False
    regex: str | None = None
    verbose: bool = False
    version: bool = False


def _key_glob(value: str) -> tuple[str, str]:
    """Parse a `KEY=GLOB` argument."""
    key, sep, glob = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=GLOB, got {value!r}")
    return key, glob


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks which
    settings the user passed explicitly (for config merge precedence).
    """
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="repoglob",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root to walk (default: current directory)",
    )
    patterns = parser.add_mutually_exclusive_group()
    patterns.add_argument(
        "-g",
        "--glob",
        action="append",
        dest="globs",
        default=None,
        metavar="GLOB",
        help="Glob to match; repeat to match any of several globs",
    )
    patterns.add_argument(
        "-m",
        "--map",
        action="append",
        dest="groups",
        type=_key_glob,
        default=None,
        metavar="KEY=GLOB",
        help="Add GLOB to the named group KEY; files are listed per group. Can be repeated",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON (a list, or an object of lists for --map)",
    )
    parser.add_argument(
        "-t",
        "--threads",
        type=int,
        default=None,
        metavar="N",
        help="Scan directories with N worker threads (default: 1)",
    )
    parser.add_argument(
        "--no-respect-ignore",
        action="store_true",
        default=None,
        dest="no_respect_ignore",
        help="Do not honor .gitignore and .ignore files",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on invalid glob patterns instead of skipping them",
    )
    parser.add_argument(
        "--regex",
        type=str,
        default=None,
        metavar="GLOB",
        help="Print the regular expression GLOB compiles to and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument("--version", action="store_true", help="Show version information and exit")
    opts = parser.parse_args(args)

    explicit_flags: set[str] = set()
    if opts.globs is not None or opts.groups is not None:
        # Patterns on the command line replace both kinds of configured patterns.
        explicit_flags.update({"globs", "groups"})
    if opts.threads is not None:
        explicit_flags.add("threads")
    if opts.no_respect_ignore is not None:
        explicit_flags.add("respect_ignore_files")
    if opts.strict is not None:
        explicit_flags.add("strict")

    groups: dict[str, list[str]] = {}
    for key, glob in opts.groups or []:
        groups.setdefault(key, []).append(glob)

    return (
        Options(
            root=opts.root,
            globs=opts.globs or [],
            groups=groups,
            json=opts.json,
            threads=opts.threads if opts.threads is not None else 1,
            respect_ignore_files=not opts.no_respect_ignore,
            strict=bool(opts.strict),
            regex=opts.regex,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def _print_paths(paths: list[str], as_json: bool) -> None:
    if as_json:
        print(json.dumps(paths, indent=2))
    else:
        for path in paths:
            print(path)


def _print_groups(groups: dict[str, list[str]], as_json: bool) -> None:
    if as_json:
        print(json.dumps(groups, indent=2))
    else:
        for key, paths in groups.items():
            for path in paths:
                print(f"{key}\t{path}")


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the repoglob CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if options.version:
        try:
            version = importlib.metadata.version("repoglob")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.regex is not None:
        regex = glob_to_regex(options.regex)
        if regex is None:
            print(f"Error: Invalid glob pattern: {options.regex!r}", file=sys.stderr)
            return 1
        print(regex)
        return 0

    root = Path(options.root)
    if not root.is_dir():
        print(f"Error: Not a directory: {options.root}", file=sys.stderr)
        return 1

    # Settings from the repository's own config file (or one above it)
    config_path = find_config_file(root)
    if config_path:
        log.debug("Using config file %s", config_path)
        merge_cli_with_config(options, load_config(config_path), explicit_flags)

    walk_options = WalkOptions(
        threads=options.threads,
        respect_ignore_files=options.respect_ignore_files,
    )

    try:
        if options.groups:
            _print_groups(
                walk_repo_globs_map(
                    root, options.groups, strict=options.strict, options=walk_options
                ),
                options.json,
            )
        elif len(options.globs) == 1:
            _print_paths(
                walk_repo_glob(root, options.globs[0], strict=options.strict, options=walk_options),
                options.json,
            )
        elif options.globs:
            _print_paths(
                walk_repo_globs(root, options.globs, strict=options.strict, options=walk_options),
                options.json,
            )
        else:
            print(
                "Error: No patterns specified. Use -g GLOB or -m KEY=GLOB, or set `globs` or"
                " `groups` in a config file. Use --help for more options.",
                file=sys.stderr,
            )
            return 1
    except PatternCompileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
