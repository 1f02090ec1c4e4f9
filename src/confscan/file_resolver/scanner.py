"""
Directory scanning for config files.

A `DirectoryScanner` lists the files under a directory whose names match a
set of patterns, optionally pruning subdirectories by name or keeping only
files whose relative path matches a regex.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Collection, Iterable, Sequence
from pathlib import Path

import pathspec

from confscan.errors import ScanFailure

log = logging.getLogger(__name__)

# Closing delimiter for each accepted regex opening delimiter, e.g. `/\.ini$/`
# or `{^app\.}i`.
_REGEX_DELIMITERS = {
    "/": "/",
    "#": "#",
    "~": "~",
    "%": "%",
    "@": "@",
    "|": "|",
    "!": "!",
    "(": ")",
    "[": "]",
    "{": "}",
    "<": ">",
}

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def compile_name_regex(pattern: str) -> re.Pattern[str] | None:
    """
    Compile `pattern` if it is a delimited regex such as `/\\.conf$/i` or
    `#^app\\.#`. Returns `None` for anything else, including delimited text
    that is not a valid regex (it is then treated as a glob).
    """
    closing = _REGEX_DELIMITERS.get(pattern[:1])
    if closing is None:
        return None
    # Walk left over trailing flag letters to find the closing delimiter.
    for body_end in range(len(pattern), 1, -1):
        char = pattern[body_end - 1]
        if char == closing and body_end >= 3:
            break
        if char not in _REGEX_FLAGS:
            return None
    else:
        return None
    flags = 0
    for flag in pattern[body_end:]:
        flags |= _REGEX_FLAGS[flag]
    try:
        return re.compile(pattern[1 : body_end - 1], flags)
    except re.error:
        return None


def expand_braces(pattern: str) -> list[str]:
    """
    Expand `{a,b}` alternations in a glob: `*.{yml,yaml}` gives `*.yml` and
    `*.yaml`. Braces without a top-level comma, or unbalanced ones, are
    kept as literal text.
    """
    start = pattern.find("{")
    while start != -1:
        depth = 0
        commas: list[int] = []
        end = -1
        for i in range(start, len(pattern)):
            char = pattern[i]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    end = i
                    break
            elif char == "," and depth == 1:
                commas.append(i)
        if end == -1:
            return [pattern]
        if commas:
            prefix, suffix = pattern[:start], pattern[end + 1 :]
            bounds = [start, *commas, end]
            expanded: list[str] = []
            for left, right in zip(bounds, bounds[1:]):
                expanded.extend(expand_braces(prefix + pattern[left + 1 : right] + suffix))
            return expanded
        start = pattern.find("{", end + 1)
    return [pattern]


def to_gitignore_line(glob: str) -> str:
    """
    Escape the parts of `glob` that gitignore syntax would otherwise treat
    specially: a leading `#` (comment) or `!` (negation) and trailing spaces
    (stripped).
    """
    stripped = glob.rstrip(" ")
    line = stripped + "\\ " * (len(glob) - len(stripped))
    if line.startswith(("#", "!")):
        line = "\\" + line
    return line


def build_environment_path_regex(environment: str) -> re.Pattern[str]:
    """
    Regex matching a relative path that contains a directory named exactly
    `environment`, either as the first segment or after a `/`.
    `dev` matches `dev/app.toml` and `a/dev/b/app.toml` but not
    `development/app.toml`.
    """
    return re.compile(r"(?:^|/)" + re.escape(environment) + r"/")


class DirectoryScanner:
    """
    Finds files by name pattern under a directory. Patterns are compiled once
    and reused for every `scan()`. Globs are matched with `pathspec` after
    brace expansion and escaping of gitignore-only syntax, so `#local.toml`
    or `!override.toml` match literally. With no patterns, every file matches.
    """

    def __init__(self, name_patterns: Sequence[str]) -> None:
        globs: list[str] = []
        self._name_regexes: list[re.Pattern[str]] = []
        for pattern in name_patterns:
            regex = compile_name_regex(pattern)
            if regex is not None:
                self._name_regexes.append(regex)
            else:
                globs.extend(to_gitignore_line(g) for g in expand_braces(pattern))
        self._glob_spec: pathspec.PathSpec | None = (
            pathspec.PathSpec.from_lines("gitignore", globs) if globs else None
        )
        self._match_all: bool = not name_patterns

    def matches_name(self, filename: str) -> bool:
        """Check a bare file name against the name patterns."""
        if self._match_all:
            return True
        if self._glob_spec is not None and self._glob_spec.match_file(filename):
            return True
        return any(regex.search(filename) for regex in self._name_regexes)

    def scan(
        self,
        directory: str | Path,
        exclude_names: Collection[str] = (),
        path_pattern: re.Pattern[str] | None = None,
    ) -> list[str]:
        """
        Return absolute paths of matching files under `directory`.

        - `exclude_names`: subdirectories with any of these names are not
          entered, at any depth.
        - `path_pattern`: only files whose `/`-separated path relative to
          `directory` matches (via `search`) are kept.

        Traversal order is deterministic: within each directory, files come
        first (sorted by name), then subdirectories (sorted by name).
        Raises `ScanFailure` if any directory cannot be read.
        """
        root = Path(directory)
        found = list(self._walk(root, frozenset(exclude_names), path_pattern))
        log.debug(
            "Scanned %s (exclude=%s, path=%s): %d file(s)",
            root,
            sorted(exclude_names),
            path_pattern.pattern if path_pattern else None,
            len(found),
        )
        return found

    def _walk(
        self,
        root: Path,
        exclude_names: frozenset[str],
        path_pattern: re.Pattern[str] | None,
    ) -> Iterable[str]:
        def on_error(error: OSError) -> None:
            raise ScanFailure(str(error.filename or root), error) from error

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            current = Path(dirpath)

            # Prune excluded directories in-place (prevents descent)
            dirnames[:] = sorted(d for d in dirnames if d not in exclude_names)

            for filename in sorted(filenames):
                if not self.matches_name(filename):
                    continue
                filepath = current / filename
                if path_pattern is not None:
                    rel = filepath.relative_to(root).as_posix()
                    if not path_pattern.search(rel):
                        continue
                yield os.path.realpath(filepath)
