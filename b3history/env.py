"""Typed lookups of settings held in environment variables."""

from __future__ import annotations

import os
import re

_INT = re.compile(r"[+-]?[0-9]+")


def get_env_int(key: str, default: int) -> int:
    """Return the integer in ``key``, or ``default`` if unset or not an integer."""
    value = os.environ.get(key)
    return int(value) if value is not None and _INT.fullmatch(value) else default


def get_env_bool(key: str, default: bool) -> bool:
    """Return whether ``key`` is "true", "1" or "yes" (any case); ``default`` if unset."""
    value = os.environ.get(key)
    return default if value is None else value.lower() in ("true", "1", "yes")


def get_env_char(key: str, default: str) -> str:
    """Return the first character of ``key``, or ``default`` if unset or empty."""
    value = os.environ.get(key)
    return value[0] if value else default