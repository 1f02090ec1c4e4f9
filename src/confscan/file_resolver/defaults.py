"""
Default filename filter for config file discovery.

Patterns are gitignore-style globs matched against file names, or regexes
written between slashes (e.g. `/\\.ya?ml$/`).
"""

from __future__ import annotations

DEFAULT_FILENAMES_FILTER: tuple[str, ...] = ("*.toml",)
