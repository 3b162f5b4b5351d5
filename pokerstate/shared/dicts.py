"""Dictionary helpers for layering configuration sources."""

from __future__ import annotations

from typing import Any


def deep_merge_dicts(base: dict[Any, Any], override: dict[Any, Any]) -> dict[Any, Any]:
    """
    Return a new dict with override merged onto base.

    Nested dicts merge recursively; any other value in override replaces the
    base value outright (lists are not concatenated). Neither input is mutated.
    """
    result: dict[Any, Any] = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def nest_keys(flat: dict[str, Any], separator: str = "__") -> dict[str, Any]:
    """
    Convert a flat dict with separator-joined keys into a nested dict.

    Example::

        {"game__min_bet": 4, "system__seed": 7}
        ->  {"game": {"min_bet": 4}, "system": {"seed": 7}}
    """
    result: dict[str, Any] = {}
    for key, value in flat.items():
        *parents, leaf = key.split(separator)
        current = result
        for part in parents:
            current = current.setdefault(part, {})
        current[leaf] = value
    return result
