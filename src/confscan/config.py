"""
TOML-based config file loading for confscan.

Searches for `.confscan.toml`, `confscan.toml`, or `pyproject.toml [tool.confscan]`
walking up from the current directory. Settings can also come from the
`CONFSCAN_ENV` and `CONFSCAN_ALLOWED_ENVS` environment variables. Precedence:
explicit CLI flags > environment variables > config file > built-in defaults.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, TypeVar, cast

from confscan.env import read_var, read_var_list
from confscan.errors import UndefinedVariable

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class ConfscanConfig:
    """
    Settings from a config file or the environment. Fields are `None` when
    not set, so the merge logic can tell "not configured" apart from
    "explicitly set to an empty value".
    """

    directories: list[str] | None = None
    allowed_environments: list[str] | None = None
    active_environment: str | None = None
    filenames: list[str] | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".confscan.toml", "confscan.toml", "pyproject.toml"]

# Mapping from TOML kebab-case keys to Python snake_case field names
_KEBAB_TO_SNAKE: dict[str, str] = {
    "allowed-environments": "allowed_environments",
    "active-environment": "active_environment",
}

_VALID_FIELDS = {f.name for f in fields(ConfscanConfig)}
_LIST_FIELDS = {"directories", "allowed_environments", "filenames"}

ENV_ACTIVE_ENVIRONMENT = "CONFSCAN_ENV"
ENV_ALLOWED_ENVIRONMENTS = "CONFSCAN_ALLOWED_ENVS"


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.confscan.toml` >
    `confscan.toml` > `pyproject.toml` (only if it has `[tool.confscan]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_confscan_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_confscan_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.confscan] section."""
    try:
        data = tomllib.loads(path.read_text())
        return "confscan" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, UnicodeDecodeError, OSError):
        return False


def load_config(config_path: Path) -> ConfscanConfig:
    """
    Load a `ConfscanConfig` from a TOML file. Relative `directories` are
    resolved against the directory holding the config file. A malformed file
    is reported on stderr and treated as empty.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        print(f"Warning: ignoring malformed config file {config_path}: {e}", file=sys.stderr)
        return ConfscanConfig()

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("confscan", {})

    config = _parse_config_data(data)
    if config.directories is not None:
        base = config_path.resolve().parent
        # Empty entries are left for the resolver to reject.
        config.directories = [str(base / d) if d else d for d in config.directories]
    return config


def _parse_config_data(data: dict[str, Any]) -> ConfscanConfig:
    """Parse a flat or sectioned TOML dict into ConfscanConfig."""
    # Flatten sections: e.g. [discovery] and [environments] merge into top level
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in cast(dict[str, Any], value).items():
                flat[sub_key] = sub_value
        else:
            flat[key] = value

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = _KEBAB_TO_SNAKE.get(key, key.replace("-", "_"))
        if snake_key not in _VALID_FIELDS:
            print(f"Warning: unrecognized config key: {key}", file=sys.stderr)
        elif snake_key in _LIST_FIELDS:
            if isinstance(value, str):
                value = [value]
            if isinstance(value, list) and all(isinstance(v, str) for v in value):
                mapped[snake_key] = value
            else:
                print(f"Warning: config key {key} must be a list of strings", file=sys.stderr)
        elif isinstance(value, str):
            mapped[snake_key] = value
        else:
            print(f"Warning: config key {key} must be a string", file=sys.stderr)

    return ConfscanConfig(**mapped)


def load_env_config(environ: Mapping[str, str] | None = None) -> ConfscanConfig:
    """
    Read settings from `CONFSCAN_ENV` (active environment) and
    `CONFSCAN_ALLOWED_ENVS` (comma-separated allowed environments).
    Unset variables leave the corresponding field as `None`.
    """
    config = ConfscanConfig()
    try:
        config.active_environment = cast(str, read_var(ENV_ACTIVE_ENVIRONMENT, environ=environ))
    except UndefinedVariable:
        pass
    try:
        config.allowed_environments = cast(
            list[str], read_var_list(ENV_ALLOWED_ENVIRONMENTS, environ=environ)
        )
    except UndefinedVariable:
        pass
    return config


def combine_configs(*configs: ConfscanConfig | None) -> ConfscanConfig:
    """Overlay configs left to right: set fields of later configs win."""
    result = ConfscanConfig()
    for config in configs:
        if config is None:
            continue
        updates = {
            f.name: getattr(config, f.name)
            for f in fields(ConfscanConfig)
            if getattr(config, f.name) is not None
        }
        result = replace(result, **updates)
    return result


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: ConfscanConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Fill CLI options from config settings, skipping options the user set
    explicitly on the command line.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(ConfscanConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
