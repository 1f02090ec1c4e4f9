"""
ConfigFileResolver — main entry point for config file discovery.

Resolves a list of config directories into an ordered list of config files
to be merged in sequence. When an active environment is set, files inside
subdirectories named after it are overrides and come after the base files of
the same directory, so a last-write-wins merge lets them take precedence.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Any

from confscan.file_resolver.defaults import DEFAULT_FILENAMES_FILTER
from confscan.file_resolver.scanner import DirectoryScanner, build_environment_path_regex
from confscan.file_resolver.validation import (
    StrPath,
    build_active_environment,
    build_allowed_environments,
    build_config_dirs,
    build_filenames_filter,
)

log = logging.getLogger(__name__)


class ConfigFileResolver:
    """
    Finds config files in a list of directories, with optional
    per-environment overlays.

    With no active environment, every matching file under each directory is
    returned. With an active environment, each directory contributes its
    base files (outside any allowed-environment subdirectory) followed by its
    override files (under a subdirectory named after the active environment).

    Inputs are validated on construction. The result of
    `find_config_files()` is computed once and reused; construct a new
    resolver to pick up filesystem changes.
    """

    def __init__(
        self,
        config_dirs: StrPath | Sequence[StrPath] | Mapping[Any, StrPath],
        allowed_environments: Sequence[str] | Mapping[Any, str] = (),
        active_environment: str | None = "",
        filenames_filter: str | Sequence[str] | Mapping[Any, str] = DEFAULT_FILENAMES_FILTER,
    ) -> None:
        self._config_dirs: tuple[str, ...] = build_config_dirs(config_dirs)
        self._allowed_environments: tuple[str, ...] = build_allowed_environments(
            allowed_environments
        )
        self._active_environment: str = build_active_environment(
            active_environment, self._allowed_environments
        )
        self._filenames_filter: tuple[str, ...] = build_filenames_filter(filenames_filter)
        self._scanner: DirectoryScanner = DirectoryScanner(self._filenames_filter)
        self._config_files: tuple[str, ...] | None = None
        self._lock: threading.Lock = threading.Lock()

    @property
    def config_dirs(self) -> tuple[str, ...]:
        return self._config_dirs

    @property
    def allowed_environments(self) -> tuple[str, ...]:
        return self._allowed_environments

    @property
    def active_environment(self) -> str:
        return self._active_environment

    @property
    def filenames_filter(self) -> tuple[str, ...]:
        return self._filenames_filter

    def find_config_files(self) -> tuple[str, ...]:
        """
        Return the config files of all directories, in directory order.
        Within each directory, base files precede override files.

        Raises `ScanFailure` if a directory cannot be read; nothing is cached
        in that case.
        """
        if self._config_files is not None:
            return self._config_files
        with self._lock:
            if self._config_files is None:
                self._config_files = self._discover()
        return self._config_files

    def _discover(self) -> tuple[str, ...]:
        config_files: list[str] = []
        for config_dir in self._config_dirs:
            if not self._active_environment:
                config_files.extend(self._scanner.scan(config_dir))
            else:
                config_files.extend(self._find_base_files(config_dir))
                config_files.extend(self._find_override_files(config_dir))
        log.debug(
            "Resolved %d config file(s) from %d director%s (environment=%r)",
            len(config_files),
            len(self._config_dirs),
            "y" if len(self._config_dirs) == 1 else "ies",
            self._active_environment,
        )
        return tuple(config_files)

    def _find_base_files(self, config_dir: str) -> list[str]:
        """Files outside every subdirectory named after an allowed environment."""
        return self._scanner.scan(config_dir, exclude_names=self._allowed_environments)

    def _find_override_files(self, config_dir: str) -> list[str]:
        """
        Files under a subdirectory named after the active environment, at any
        depth. These must be merged after all base files.
        """
        return self._scanner.scan(
            config_dir, path_pattern=build_environment_path_regex(self._active_environment)
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(config_dirs={list(self._config_dirs)!r}, "
            f"allowed_environments={list(self._allowed_environments)!r}, "
            f"active_environment={self._active_environment!r}, "
            f"filenames_filter={list(self._filenames_filter)!r})"
        )
