"""Tests for the repoglob command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repoglob.cli import main


def _write(root: Path, rel: str, text: str = "") -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    for rel in ["a.txt", "b/b.txt", "pkg/package.json", "pkg/yarn.lock", ".git/HEAD"]:
        _write(tmp_path, rel)
    return tmp_path


def _render_help(capsys: pytest.CaptureFixture[str]) -> str:
    """Run `repoglob --help` via CLI entrypoint and return captured stdout."""
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    return capsys.readouterr().out


def test_help_includes_tagline_and_usage(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "repoglob: List repository files matching glob patterns" in out
    assert "Common usage:" in out
    assert "repoglob -m json='**/*.json'" in out


def test_single_glob_plain_output(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo), "-g", "*.txt"]) == 0
    assert capsys.readouterr().out == "a.txt\n"


def test_multiple_globs_json_output(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo), "-g", "**/*.txt", "-g", "**/*.lock", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == ["a.txt", "b/b.txt", "pkg/yarn.lock"]


def test_map_plain_output(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo), "-m", "json=**/*.json", "-m", "lock=**/*.lock"]) == 0
    assert capsys.readouterr().out == "json\tpkg/package.json\nlock\tpkg/yarn.lock\n"


def test_map_json_output_repeated_key(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    args = [str(repo), "-m", "pkg=**/*.json", "-m", "pkg=**/*.lock", "-m", "py=**/*.py", "--json"]
    assert main(args) == 0
    assert json.loads(capsys.readouterr().out) == {
        "pkg": ["pkg/package.json", "pkg/yarn.lock"],
        "py": [],
    }


def test_map_argument_requires_key(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["-m", "**/*.json"])
    assert exc.value.code == 2
    assert "expected KEY=GLOB" in capsys.readouterr().err


def test_glob_and_map_are_exclusive(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["-g", "*", "-m", "k=*"])
    assert exc.value.code == 2


def test_threads_flag(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo), "-g", "**/*.txt", "-t", "4"]) == 0
    assert capsys.readouterr().out == "a.txt\nb/b.txt\n"


def test_invalid_glob_is_skipped(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo), "-g", "[z-a]", "-g", "*.txt"]) == 0
    assert capsys.readouterr().out == "a.txt\n"


def test_invalid_glob_strict_fails(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo), "-g", "[z-a]", "--strict"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error: Invalid glob pattern '[z-a]'" in captured.err


def test_regex_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--regex", "*.txt"]) == 0
    out = capsys.readouterr().out.strip()
    assert out.startswith("^")
    assert "txt" in out


def test_regex_flag_invalid(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--regex", "[z-a]"]) == 1
    assert "Error: Invalid glob pattern" in capsys.readouterr().err


def test_no_patterns_fails(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo)]) == 1
    assert "Error: No patterns specified" in capsys.readouterr().err


def test_root_must_be_directory(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(repo / "a.txt"), "-g", "*"]) == 1
    assert "Error: Not a directory" in capsys.readouterr().err


def test_config_globs_used_without_flags(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, ".repoglob.toml", 'globs = ["**/*.lock"]\n')
    assert main([str(repo)]) == 0
    assert capsys.readouterr().out == "pkg/yarn.lock\n"


def test_config_groups_used_without_flags(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, "repoglob.toml", '[groups]\ntext = "**/*.txt"\n')
    assert main([str(repo), "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {"text": ["a.txt", "b/b.txt"]}


def test_cli_globs_override_config_groups(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, "repoglob.toml", '[groups]\ntext = "**/*.txt"\n')
    assert main([str(repo), "-g", "**/*.json"]) == 0
    assert capsys.readouterr().out == "pkg/package.json\n"


def test_ignore_files_respected_by_default(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, ".gitignore", "b/\n")
    assert main([str(repo), "-g", "**/*.txt"]) == 0
    assert capsys.readouterr().out == "a.txt\n"

    assert main([str(repo), "-g", "**/*.txt", "--no-respect-ignore"]) == 0
    assert capsys.readouterr().out == "a.txt\nb/b.txt\n"


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("v") or out.startswith("unknown")


def test_config_with_bad_threads_still_runs(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, "repoglob.toml", 'threads = "4"\n')
    assert main([str(repo), "-g", "*.txt"]) == 0
    assert capsys.readouterr().out == "a.txt\n"
