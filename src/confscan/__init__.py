"""
confscan: find config files across directories, with environment overlays.
"""

from confscan.env import convert_to_native, read_var, read_var_list
from confscan.errors import (
    ConfscanError,
    EntryReason,
    InvalidDirectoryEntry,
    InvalidEntry,
    InvalidEnvironmentEntry,
    InvalidInput,
    InvalidPatternEntry,
    MissingActiveEnvironment,
    ScanFailure,
    UndefinedVariable,
    UnknownActiveEnvironment,
)
from confscan.file_resolver import DEFAULT_FILENAMES_FILTER, ConfigFileResolver

__all__ = [
    "DEFAULT_FILENAMES_FILTER",
    "ConfigFileResolver",
    "ConfscanError",
    "EntryReason",
    "InvalidDirectoryEntry",
    "InvalidEntry",
    "InvalidEnvironmentEntry",
    "InvalidInput",
    "InvalidPatternEntry",
    "MissingActiveEnvironment",
    "ScanFailure",
    "UndefinedVariable",
    "UnknownActiveEnvironment",
    "convert_to_native",
    "read_var",
    "read_var_list",
]
