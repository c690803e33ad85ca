"""Reading typed settings from environment variables."""

import os
from typing import TypeVar

T = TypeVar("T")

_BOOL_VALUES = {"true": True, "false": False}


def env_var_or_default(key: str, default: T) -> T:
    """Return the variable ``key`` parsed as the type of ``default``.

    Falls back to ``default`` when the variable is unset or does not parse.
    """
    raw = os.environ.get(key)
    if raw is None:
        return default
    target = type(default)
    if target is bool:
        return _BOOL_VALUES.get(raw, default)  # type: ignore[return-value]
    if target is str:
        return raw  # type: ignore[return-value]
    if target is int and raw != raw.strip():
        return default
    try:
        return target(raw)  # type: ignore[call-arg]
    except (TypeError, ValueError):
        return default