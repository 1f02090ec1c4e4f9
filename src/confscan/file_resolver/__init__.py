"""
Config file discovery with per-environment overlay directories.

Self-contained: no imports from `confscan` outside this package except the
shared error types.

Usage::

    from confscan.file_resolver import ConfigFileResolver

    resolver = ConfigFileResolver(
        ["config", "/etc/myapp"],
        allowed_environments=["production", "development"],
        active_environment="development",
        filenames_filter=["*.toml", "*.yaml"],
    )
    for path in resolver.find_config_files():
        ...  # merge in order; later files win
"""

from confscan.file_resolver.defaults import DEFAULT_FILENAMES_FILTER
from confscan.file_resolver.resolver import ConfigFileResolver
from confscan.file_resolver.scanner import DirectoryScanner, build_environment_path_regex

__all__ = [
    "DEFAULT_FILENAMES_FILTER",
    "ConfigFileResolver",
    "DirectoryScanner",
    "build_environment_path_regex",
]
