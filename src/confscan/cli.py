#!/usr/bin/env python3
"""
confscan: List config files across directories, with environment overlays

Files are printed one per line, in the order they should be merged (later
files override earlier ones). With an active environment, files inside
subdirectories named after it are printed after the base files of the same
directory; subdirectories named after other allowed environments are skipped.

Common usage:
  confscan config/
  confscan config/ /etc/myapp --allowed-env production --allowed-env development -e development
  confscan config/ --name '*.yaml' --name '/\\.ya?ml$/'

Settings are also read from `.confscan.toml`, `confscan.toml`, or
`pyproject.toml [tool.confscan]`, and from the CONFSCAN_ENV and
CONFSCAN_ALLOWED_ENVS environment variables.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from confscan.config import (
    combine_configs,
    find_config_file,
    load_config,
    load_env_config,
    merge_cli_with_config,
)
from confscan.errors import ConfscanError, ScanFailure
from confscan.file_resolver import DEFAULT_FILENAMES_FILTER, ConfigFileResolver

log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the confscan tool."""

    directories: list[str]
    active_environment: str | None
    allowed_environments: list[str] | None
    filenames: list[str] | None
    config: str | None
    no_config: bool
    verbose: bool
    version: bool


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags`
    tracks which settings the user passed on the command line (for config
    merge precedence).
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "directories",
        nargs="*",
        type=str,
        default=[],
        help="Config directories to search, in merge order",
    )
    parser.add_argument(
        "-e",
        "--env",
        type=str,
        dest="active_environment",
        default=None,
        metavar="NAME",
        help="Active environment; must be one of the allowed environments",
    )
    parser.add_argument(
        "--allowed-env",
        action="append",
        dest="allowed_environments",
        default=None,
        metavar="NAME",
        help="An allowed environment name (subdirectory name). Can be repeated",
    )
    parser.add_argument(
        "-n",
        "--name",
        action="append",
        dest="filenames",
        default=None,
        metavar="PATTERN",
        help="Filename pattern: a glob, a literal name, or a regex like '/\\.ini$/'. "
        f"Can be repeated (default: {', '.join(DEFAULT_FILENAMES_FILTER)})",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Read settings from this TOML file instead of searching for one",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        dest="no_config",
        help="Do not read settings from a config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log discovery details to stderr",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    explicit_flags: set[str] = set()
    if opts.directories:
        explicit_flags.add("directories")
    for name in ("active_environment", "allowed_environments", "filenames"):
        if getattr(opts, name) is not None:
            explicit_flags.add(name)

    return (
        Options(
            directories=opts.directories,
            active_environment=opts.active_environment,
            allowed_environments=opts.allowed_environments,
            filenames=opts.filenames,
            config=opts.config,
            no_config=opts.no_config,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def _load_settings(options: Options, explicit_flags: set[str]) -> Options:
    """Merge config file and environment settings into the CLI options."""
    file_config = None
    if not options.no_config:
        config_path = Path(options.config) if options.config else find_config_file(Path.cwd())
        if config_path:
            log.debug("Using config file %s", config_path)
            file_config = load_config(config_path)
    config = combine_configs(file_config, load_env_config())
    return merge_cli_with_config(options, config, explicit_flags)


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the confscan CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for invalid input, 2 for scan failures)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("confscan")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        options = _load_settings(options, explicit_flags)
    except OSError as e:
        print(f"Error: Could not read config file: {e}", file=sys.stderr)
        return 1

    if not options.directories:
        print(
            "Error: No config directories specified. Provide directories as arguments"
            " or set `directories` in a config file. Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    try:
        resolver = ConfigFileResolver(
            options.directories,
            allowed_environments=options.allowed_environments or [],
            active_environment=options.active_environment or "",
            filenames_filter=(
                options.filenames
                if options.filenames is not None
                else list(DEFAULT_FILENAMES_FILTER)
            ),
        )
        config_files = resolver.find_config_files()
    except ScanFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ConfscanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for path in config_files:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
