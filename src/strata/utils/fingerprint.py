"""Content fingerprints for configuration trees.

Two trees with the same settings hash the same regardless of key order.
Callables contribute their qualified name, not their code.
"""

from typing import Any, Mapping

import xxhash

from strata.utils.json_utils import dumps_config


def canonical_json(tree: Mapping[str, Any]) -> str:
    """Deterministic JSON text for a nested settings tree."""
    return dumps_config(tree, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def fingerprint_tree(tree: Mapping[str, Any]) -> str:
    """Hexadecimal xxh3_64 hash of a nested settings tree."""
    hasher = xxhash.xxh3_64()
    hasher.update(canonical_json(tree).encode("utf-8"))
    return hasher.hexdigest()
