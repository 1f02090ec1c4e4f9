"""
Error types raised by confscan.

Validation errors for list entries carry the offending `key` (an index for
sequences, the key for mappings) and an `EntryReason`, so callers can check
the kind of failure without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class EntryReason(str, Enum):
    """Why a single list entry was rejected."""

    EMPTY = "empty"
    NOT_A_STRING = "not_a_string"
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"


class ConfscanError(Exception):
    """Base class for all confscan errors."""


class InvalidInput(ConfscanError, ValueError):
    """A required input list is empty."""


class InvalidEntry(ConfscanError, ValueError):
    """An element of an input list failed validation."""

    list_name: str = "input list"

    def __init__(self, key: Any, reason: EntryReason, value: Any = None) -> None:
        self.key = key
        self.reason = reason
        self.value = value
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = f'at the key "{self.key}" of the {self.list_name}'
        if self.reason is EntryReason.EMPTY:
            return f"A value must be provided {where}."
        if self.reason is EntryReason.NOT_A_STRING:
            return f"The value {where} must be a string, got {type(self.value).__name__}."
        if self.reason is EntryReason.NOT_FOUND:
            return f'"{self.value}" {where} points to a non-existent location.'
        return f'"{self.value}" {where} is not a directory, but a file.'


class InvalidDirectoryEntry(InvalidEntry):
    list_name = "configuration directories list"


class InvalidEnvironmentEntry(InvalidEntry):
    list_name = "allowed environments list"


class InvalidPatternEntry(InvalidEntry):
    list_name = "filenames filter list"


class MissingActiveEnvironment(ConfscanError, ValueError):
    """Allowed environments are configured but no active environment was given."""

    def __init__(self) -> None:
        super().__init__(
            "An active environment must be provided when the list of allowed "
            "environments is not empty."
        )


class UnknownActiveEnvironment(ConfscanError, ValueError):
    """The active environment is not one of the allowed environments."""

    def __init__(self, environment: str) -> None:
        self.environment = environment
        super().__init__(
            f'The active environment "{environment}" could not be found in the '
            "list of allowed environments."
        )


class ScanFailure(ConfscanError, OSError):
    """A directory could not be read while scanning for config files."""

    def __init__(self, path: str, error: OSError) -> None:
        self.path = path
        super().__init__(f"Failed to scan {path}: {error.strerror or error}")


class UndefinedVariable(ConfscanError, KeyError):
    """An environment variable is not defined."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f'The environment variable "{self.name}" is not defined.'
