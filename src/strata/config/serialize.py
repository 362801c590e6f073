"""Conversion between flat dot-path mappings and nested dictionaries.

Layers store settings flat, keyed by full dot path::

    {"style.bg_color": "blue", "style.height": 12}

Exports hand them back nested::

    {"style": {"bg_color": "blue", "height": 12}}
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Callable, Optional

from .values import unwrap

SEPARATOR = "."


def flatten(
    nested: Mapping[str, Any],
    is_leaf: Optional[Callable[[str], bool]] = None,
    prefix: str = "",
) -> dict[str, Any]:
    """Flatten a nested mapping into a dot-path keyed dictionary.

    Args:
        nested: Nested mapping to flatten
        is_leaf: Optional predicate on the full path; when it returns True the
            value at that path is kept whole even if it is a mapping
        prefix: Path prefix prepended to every key

    Returns:
        Flat dictionary
    """
    flat: dict[str, Any] = {}
    for key, value in nested.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping) and not (is_leaf and is_leaf(path)):
            flat.update(flatten(value, is_leaf, path + SEPARATOR))
        else:
            flat[path] = value
    return flat


def nest(flat: Mapping[str, Any]) -> dict[str, Any]:
    """Build a nested dictionary from a dot-path keyed mapping.

    Intermediate containers are created on demand and reused once created.

    Raises:
        ValueError: If a key needs a container where a value already sits,
            or a value where a container already sits
    """
    nested: dict[str, Any] = {}
    # Containers created here, so dict-valued leaves are never descended into
    containers: set[int] = {id(nested)}
    for key, value in flat.items():
        parts = key.split(SEPARATOR)
        node = nested
        for depth, part in enumerate(parts[:-1]):
            if part not in node:
                child = node[part] = {}
                containers.add(id(child))
            else:
                child = node[part]
                if id(child) not in containers:
                    raise ValueError(
                        f"Cannot nest {key!r}: "
                        f"{SEPARATOR.join(parts[: depth + 1])!r} already holds a value"
                    )
            node = child
        leaf = parts[-1]
        if leaf in node and id(node[leaf]) in containers:
            raise ValueError(f"Cannot nest {key!r}: it already holds nested settings")
        node[leaf] = value
    return nested


def unwrap_functions(flat: Mapping[str, Any]) -> dict[str, Any]:
    """Replace normalized function wrappers with the caller's originals."""
    return {key: unwrap(value) for key, value in flat.items()}


def copy_values(flat: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-copy plain values; callables are kept by reference."""
    return {
        key: value if callable(value) else copy.deepcopy(value)
        for key, value in flat.items()
    }


def merge_layers(base: Mapping[str, Any], local: Mapping[str, Any]) -> dict[str, Any]:
    """Key-wise union of two flat layers; local wins."""
    merged = dict(base)
    merged.update(local)
    return merged
