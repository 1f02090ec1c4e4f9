"""Normalization and validation of `ConfigFileResolver` inputs."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from typing import Any

from confscan.errors import (
    EntryReason,
    InvalidDirectoryEntry,
    InvalidEnvironmentEntry,
    InvalidInput,
    InvalidPatternEntry,
    MissingActiveEnvironment,
    UnknownActiveEnvironment,
)

StrPath = str | os.PathLike[str]


def _keyed(values: Any) -> Iterable[tuple[Any, Any]]:
    """
    Iterate `(key, value)` pairs of a mapping, or `(index, value)` pairs of
    any other collection.
    """
    if isinstance(values, Mapping):
        return values.items()
    return enumerate(values)


def _is_single(value: Any) -> bool:
    return isinstance(value, (str, os.PathLike))


def build_config_dirs(config_dirs: Any) -> tuple[str, ...]:
    """
    Validate config directories: at least one, each an existing directory.
    Paths are kept as given (relative paths stay relative).
    """
    if not config_dirs:
        raise InvalidInput("A list of configuration directories must be provided.")
    if _is_single(config_dirs):
        config_dirs = [config_dirs]

    result: list[str] = []
    for key, config_dir in _keyed(config_dirs):
        if isinstance(config_dir, os.PathLike):
            config_dir = os.fspath(config_dir)
        if config_dir is None or config_dir == "":
            raise InvalidDirectoryEntry(key, EntryReason.EMPTY, config_dir)
        if not isinstance(config_dir, str):
            raise InvalidDirectoryEntry(key, EntryReason.NOT_A_STRING, config_dir)
        if not os.path.exists(config_dir):
            raise InvalidDirectoryEntry(key, EntryReason.NOT_FOUND, config_dir)
        if not os.path.isdir(config_dir):
            raise InvalidDirectoryEntry(key, EntryReason.NOT_A_DIRECTORY, config_dir)
        result.append(config_dir)
    return tuple(result)


def build_allowed_environments(allowed_environments: Any) -> tuple[str, ...]:
    """Validate allowed environment names: each a non-empty string."""
    if not allowed_environments:
        return ()
    if isinstance(allowed_environments, str):
        allowed_environments = [allowed_environments]

    result: list[str] = []
    for key, environment in _keyed(allowed_environments):
        if environment is None or environment == "":
            raise InvalidEnvironmentEntry(key, EntryReason.EMPTY, environment)
        if not isinstance(environment, str):
            raise InvalidEnvironmentEntry(key, EntryReason.NOT_A_STRING, environment)
        result.append(environment)
    return tuple(result)


def build_active_environment(
    active_environment: str | None, allowed_environments: tuple[str, ...]
) -> str:
    """
    Check the active environment against the allowed ones. An empty active
    environment is only valid when no environments are allowed; a non-empty
    one must match an allowed name exactly.
    """
    if not active_environment:
        if allowed_environments:
            raise MissingActiveEnvironment()
        return ""
    if active_environment not in allowed_environments:
        raise UnknownActiveEnvironment(active_environment)
    return active_environment


def build_filenames_filter(filenames_filter: Any) -> tuple[str, ...]:
    """Validate filename patterns. No patterns means no filtering."""
    if not filenames_filter:
        return ()
    if isinstance(filenames_filter, str):
        filenames_filter = [filenames_filter]

    result: list[str] = []
    for key, pattern in _keyed(filenames_filter):
        if pattern is None or pattern == "":
            raise InvalidPatternEntry(key, EntryReason.EMPTY, pattern)
        if not isinstance(pattern, str):
            raise InvalidPatternEntry(key, EntryReason.NOT_A_STRING, pattern)
        result.append(pattern)
    return tuple(result)
