"""
Structural Utilities - Pure helpers for nested configuration data.

This module provides:
- deep_copy: Independent copy of nested containers (callables are shared)
- deep_merge: Recursive merge of records, whole replacement of arrays
- is_array: Array-shape detection (lists, tuples, mappings keyed 1..N)
- is_empty: Emptiness check (non-containers count as empty)
- table_keys / table_size: Key listing and entry counting

Containers follow the configuration value model used throughout nvcore:
lists and tuples are arrays, mappings are records unless their keys are
exactly the integers 1..N.
"""

from collections.abc import Mapping
from typing import Any


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def deep_copy(value: Any) -> Any:
    """
    Deep copy a value, including nested containers.

    Non-container values (primitives, callables, arbitrary objects) are
    returned as-is.

    Args:
        value: Value to copy

    Returns:
        Independent copy of the value
    """
    if isinstance(value, Mapping):
        return {key: deep_copy(item) for key, item in value.items()}
    if isinstance(value, list):
        return [deep_copy(item) for item in value]
    if isinstance(value, tuple):
        return tuple(deep_copy(item) for item in value)
    return value


def is_array(value: Any) -> bool:
    """
    Check if a value is array-shaped.

    Lists and tuples are arrays. A mapping is an array only when its keys
    are exactly the integers 1..N (an empty mapping included).

    Args:
        value: Value to check

    Returns:
        True if value is an array
    """
    if isinstance(value, (list, tuple)):
        return True
    if not isinstance(value, Mapping):
        return False

    keys = list(value)
    for key in keys:
        # bool is an int subclass; True must not pass for 1
        if isinstance(key, bool) or not isinstance(key, int):
            return False
    return set(keys) == set(range(1, len(keys) + 1))


def is_record(value: Any) -> bool:
    """Check if a value is a record-shaped container (mapping, not array)."""
    return isinstance(value, Mapping) and not is_array(value)


def deep_merge(base: Any, override: Any) -> dict:
    """
    Deep merge two records, override taking precedence.

    Nested records are merged recursively. Everything else in override,
    arrays included, replaces the base value outright. Neither input is
    modified and the result shares no containers with them.

    Args:
        base: Base record (defaults)
        override: Overriding record (user values)

    Returns:
        New merged dictionary

    Example:
        deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"x": 9}})
        # {"a": {"x": 9, "y": 2}}
        deep_merge({"a": [1, 2, 3]}, {"a": [4, 5]})
        # {"a": [4, 5]}
    """
    result = deep_copy(base) if isinstance(base, Mapping) else {}
    if not isinstance(override, Mapping):
        return result

    for key, value in override.items():
        if is_record(value) and is_record(result.get(key)):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deep_copy(value)

    return result


def is_empty(value: Any) -> bool:
    """
    Check if a value is empty.

    Non-container values are considered empty.

    Args:
        value: Value to check

    Returns:
        True if value is not a container or has no entries
    """
    if not _is_container(value):
        return True
    return len(value) == 0


def table_keys(value: Any) -> list:
    """Get all keys of a container (indices 1..N for sequences)."""
    if isinstance(value, Mapping):
        return list(value.keys())
    if isinstance(value, (list, tuple)):
        return list(range(1, len(value) + 1))
    return []


def table_size(value: Any) -> int:
    """Get the number of top-level entries in a container."""
    if not _is_container(value):
        return 0
    return len(value)
