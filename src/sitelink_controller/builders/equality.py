"""Kind-specific spec comparison."""

from __future__ import annotations

from typing import Any


def prune_zero_values(value: Any) -> Any:
    """Drop None, "", False, 0 and empty collections, recursively.

    Mirrors how typed API clients omit zero-valued fields, so a stored spec
    missing ``client: false`` still equals a desired spec that sets it.
    """
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            item = prune_zero_values(item)
            if item not in (None, "", False, 0, [], {}):
                pruned[key] = item
        return pruned
    if isinstance(value, list):
        return [prune_zero_values(item) for item in value]
    return value


def spec_equal_ignoring_zero_values(current: dict[str, Any], desired: dict[str, Any]) -> bool:
    """Compare specs as typed structs would: zero values equal missing ones."""
    return prune_zero_values(current) == prune_zero_values(desired)
