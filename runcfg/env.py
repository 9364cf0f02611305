"""Helpers for reading values from the process environment."""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import TypeVar

T = TypeVar("T")


def get_first_env(*keys: str) -> str:
    """Return the first non-empty value among the named environment variables."""
    return next((value for value in map(os.environ.get, keys) if value), "")


def first_non_empty(*values: T) -> T | None:
    """Return the first truthy value, or None when there is none."""
    return next((value for value in values if value), None)


def _first_text(candidates: str | Iterable[str] | None) -> str | None:
    if candidates is None:
        return None
    if isinstance(candidates, str):
        return candidates or None
    return first_non_empty(*candidates)


def _parse_unsigned(text: str, bits: int) -> int:
    """Parse a plain decimal unsigned integer that fits in ``bits`` bits."""
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"parsing {text!r}: invalid syntax")
    value = int(text)
    if value >= 1 << bits:
        raise ValueError(f"parsing {text!r}: value out of range")
    return value