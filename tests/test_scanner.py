"""Tests for the directory scanner and path helpers."""

from __future__ import annotations

import os
import re
from pathlib import Path

import pytest

from confscan.errors import ScanFailure
from confscan.file_resolver.scanner import (
    DirectoryScanner,
    build_environment_path_regex,
    compile_name_regex,
    expand_braces,
    to_gitignore_line,
)


def _tree(root: Path, *rel_paths: str) -> None:
    for rel in rel_paths:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")


def _names(paths: list[str], root: Path) -> list[str]:
    real_root = Path(os.path.realpath(root))
    return [Path(p).relative_to(real_root).as_posix() for p in paths]


def test_compile_name_regex_delimited():
    regex = compile_name_regex("/\\.ya?ml$/")
    assert regex is not None
    assert regex.search("app.yaml")
    assert regex.search("app.yml")
    assert not regex.search("app.toml")


def test_compile_name_regex_flags():
    regex = compile_name_regex("/^APP/i")
    assert regex is not None
    assert regex.flags & re.IGNORECASE
    assert regex.search("app.toml")


def test_compile_name_regex_globs_and_literals():
    assert compile_name_regex("*.toml") is None
    assert compile_name_regex("settings.toml") is None
    assert compile_name_regex("/") is None
    # Invalid regex body falls back to glob handling
    assert compile_name_regex("/[unclosed/") is None


@pytest.mark.parametrize(
    ("pattern", "name"),
    [
        ("#\\.ini$#", "db.ini"),
        ("~^APP~i", "app.toml"),
        ("{\\.ya?ml$}", "app.yml"),
        ("(^db)", "db.toml"),
        ("<\\.toml$>", "app.toml"),
        ("/ms/", "ms.toml"),
    ],
)
def test_compile_name_regex_other_delimiters(pattern: str, name: str):
    regex = compile_name_regex(pattern)
    assert regex is not None
    assert regex.search(name)


def test_compile_name_regex_needs_closing_delimiter():
    assert compile_name_regex("#local.toml") is None
    assert compile_name_regex("!override.toml") is None
    assert compile_name_regex("{a,b}.toml") is None
    assert compile_name_regex("##") is None
    assert compile_name_regex("/i") is None


def test_expand_braces():
    assert expand_braces("*.{yml,yaml}") == ["*.yml", "*.yaml"]
    assert expand_braces("{app,db}.{ini,toml}") == ["app.ini", "app.toml", "db.ini", "db.toml"]
    assert expand_braces("*.{y{a,}ml,json}") == ["*.yaml", "*.yml", "*.json"]
    assert expand_braces("{single}.toml") == ["{single}.toml"]
    assert expand_braces("{open.toml") == ["{open.toml"]
    assert expand_braces("plain.toml") == ["plain.toml"]


def test_to_gitignore_line():
    assert to_gitignore_line("*.toml") == "*.toml"
    assert to_gitignore_line("#local.toml") == "\\#local.toml"
    assert to_gitignore_line("!override.toml") == "\\!override.toml"
    assert to_gitignore_line("app.toml  ") == "app.toml\\ \\ "


def test_environment_path_regex_segments():
    regex = build_environment_path_regex("dev")
    assert regex.search("dev/app.toml")
    assert regex.search("services/dev/app.toml")
    assert regex.search("a/dev/b/app.toml")
    assert not regex.search("development/app.toml")
    assert not regex.search("services/predev/app.toml")
    assert not regex.search("dev.toml")
    assert not regex.search("services/dev")


def test_environment_path_regex_escapes_name():
    regex = build_environment_path_regex("v1.0")
    assert regex.search("v1.0/app.toml")
    assert not regex.search("v1x0/app.toml")


def test_scan_glob_patterns(tmp_path: Path):
    _tree(tmp_path, "a.toml", "b.yaml", "c.txt", "sub/d.toml")

    scanner = DirectoryScanner(["*.toml", "*.yaml"])
    assert _names(scanner.scan(tmp_path), tmp_path) == ["a.toml", "b.yaml", "sub/d.toml"]


def test_scan_literal_and_regex_patterns(tmp_path: Path):
    _tree(tmp_path, "settings.toml", "other.toml", "db.ini", "sub/settings.toml")

    scanner = DirectoryScanner(["settings.toml", "/\\.ini$/"])
    assert _names(scanner.scan(tmp_path), tmp_path) == [
        "db.ini",
        "settings.toml",
        "sub/settings.toml",
    ]


@pytest.mark.parametrize(
    ("pattern", "expected"),
    [
        ("#local.toml", ["#local.toml"]),
        ("!override.toml", ["!override.toml"]),
        ("app.toml ", ["app.toml "]),
        ("*.{yml,yaml}", ["app.yaml", "db.yml"]),
    ],
)
def test_scan_patterns_match_names_literally(tmp_path: Path, pattern: str, expected: list[str]):
    _tree(
        tmp_path,
        "#local.toml",
        "!override.toml",
        "app.toml ",
        "app.toml",
        "app.yaml",
        "db.yml",
        "other.txt",
    )

    scanner = DirectoryScanner([pattern])
    assert _names(scanner.scan(tmp_path), tmp_path) == expected


def test_scan_negation_text_does_not_unselect(tmp_path: Path):
    _tree(tmp_path, "app.toml", "!app.toml")

    scanner = DirectoryScanner(["*.toml", "!app.toml"])
    assert _names(scanner.scan(tmp_path), tmp_path) == ["!app.toml", "app.toml"]


def test_scan_no_patterns_matches_everything(tmp_path: Path):
    _tree(tmp_path, "a.toml", "b.txt")

    scanner = DirectoryScanner([])
    assert scanner.matches_name("anything")
    assert _names(scanner.scan(tmp_path), tmp_path) == ["a.toml", "b.txt"]


def test_scan_files_before_subdirectories(tmp_path: Path):
    _tree(tmp_path, "b/x.toml", "a/x.toml", "z.toml", "m.toml")

    scanner = DirectoryScanner(["*.toml"])
    assert _names(scanner.scan(tmp_path), tmp_path) == ["m.toml", "z.toml", "a/x.toml", "b/x.toml"]


def test_scan_order_is_not_plain_path_sort(tmp_path: Path):
    _tree(tmp_path, "a/x.toml", "b.toml")

    scanner = DirectoryScanner(["*.toml"])
    assert _names(scanner.scan(tmp_path), tmp_path) == ["b.toml", "a/x.toml"]


def test_scan_exclude_names_at_any_depth(tmp_path: Path):
    _tree(
        tmp_path,
        "base.toml",
        "prod/p.toml",
        "svc/s.toml",
        "svc/prod/p.toml",
        "svc/dev/d.toml",
        "production/x.toml",
    )

    scanner = DirectoryScanner(["*.toml"])
    result = scanner.scan(tmp_path, exclude_names=["prod", "dev"])
    assert _names(result, tmp_path) == ["base.toml", "production/x.toml", "svc/s.toml"]


def test_scan_path_pattern(tmp_path: Path):
    _tree(tmp_path, "base.toml", "dev/a.toml", "svc/dev/b.toml", "development/c.toml")

    scanner = DirectoryScanner(["*.toml"])
    result = scanner.scan(tmp_path, path_pattern=build_environment_path_regex("dev"))
    assert _names(result, tmp_path) == ["dev/a.toml", "svc/dev/b.toml"]


def test_scan_returns_real_absolute_paths(tmp_path: Path):
    _tree(tmp_path, "real/app.toml")
    link = tmp_path / "link"
    link.symlink_to(tmp_path / "real", target_is_directory=True)

    scanner = DirectoryScanner(["*.toml"])
    assert scanner.scan(link) == [os.path.realpath(tmp_path / "real" / "app.toml")]


def test_scan_empty_directory(tmp_path: Path):
    scanner = DirectoryScanner(["*.toml"])
    assert scanner.scan(tmp_path) == []


def test_scan_missing_directory_raises(tmp_path: Path):
    scanner = DirectoryScanner(["*.toml"])
    with pytest.raises(ScanFailure) as exc_info:
        scanner.scan(tmp_path / "missing")
    assert isinstance(exc_info.value, OSError)
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


def test_scan_unreadable_subdirectory_raises(tmp_path: Path):
    if os.getuid() == 0:
        pytest.skip("root can read any directory regardless of permissions")
    _tree(tmp_path, "a.toml", "locked/b.toml")
    locked = tmp_path / "locked"
    locked.chmod(0o000)
    try:
        scanner = DirectoryScanner(["*.toml"])
        with pytest.raises(ScanFailure):
            scanner.scan(tmp_path)
    finally:
        locked.chmod(0o755)
