"""Province name canonicalization used for matching only (never for display)."""

from __future__ import annotations

from typing import Any


def normalize_name(value: str) -> str:
    return value.strip().lower()


def names_match(left: str, right: str) -> bool:
    return normalize_name(left) == normalize_name(right)


def usable_name(value: Any) -> str | None:
    """Return the raw name if it is a string with visible content, else None."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value
