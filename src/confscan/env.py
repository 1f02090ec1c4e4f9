"""
Helpers for reading environment variables, with optional conversion of
scalar tokens (`null`, `true`, `off`, ...) to native Python values.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import cast

from confscan.errors import UndefinedVariable

EnvValue = str | bool | None

_NATIVE_VALUES: dict[str, bool | None] = {
    "null": None,
    "true": True,
    "on": True,
    "yes": True,
    "1": True,
    "false": False,
    "off": False,
    "no": False,
    "0": False,
}


def convert_to_native(value: str) -> EnvValue:
    """
    Convert `"null"` to `None` and boolean words (`true`/`on`/`yes`/`1`,
    `false`/`off`/`no`/`0`) to `True`/`False`, ignoring case. Anything else
    is returned unchanged.
    """
    key = value.lower()
    if key in _NATIVE_VALUES:
        return _NATIVE_VALUES[key]
    return value


def read_var(
    name: str,
    convert_to_native: bool = False,
    environ: Mapping[str, str] | None = None,
) -> EnvValue:
    """
    Return the value of environment variable `name`, read from `environ`
    (defaults to `os.environ`). Raises `UndefinedVariable` if it is not set.
    """
    source = os.environ if environ is None else environ
    if name not in source:
        raise UndefinedVariable(name)
    value = source[name]
    if convert_to_native:
        return _convert(value)
    return value


def read_var_list(
    name: str,
    convert_to_native: bool = False,
    environ: Mapping[str, str] | None = None,
) -> list[EnvValue]:
    """
    Split a comma-separated environment variable into a list of stripped
    values. A blank value gives an empty list.
    """
    value = cast(str, read_var(name, environ=environ))
    if not value.strip():
        return []
    items = [item.strip() for item in value.split(",")]
    if convert_to_native:
        return [_convert(item) for item in items]
    return items


# The keyword arguments above shadow the module-level function name.
_convert = convert_to_native
