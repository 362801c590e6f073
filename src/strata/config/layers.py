"""Layered value storage.

Each configuration owns two flat layers keyed by full dot path: ``base``
(typically loaded from a config source) and ``local`` (overrides set by the
user or the application). Lookups consult local, then base, then the schema
default.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Optional

from .validation import warn_unrecognized_key

if TYPE_CHECKING:
    from .schema import SchemaLike

BASE = "base"
LOCAL = "local"
DEFAULT = "default"
LAYER_NAMES = (BASE, LOCAL)


@dataclass(frozen=True)
class Resolution:
    """Where a key's effective raw value came from.

    ``layer`` is "local", "base", "default", or None for unknown keys.
    ``source`` is the provenance label recorded when the value was stored.
    """

    key: str
    value: Any
    layer: Optional[str]
    source: Optional[str] = None


class Layer:
    """A flat mapping of dot-path keys to raw values, with provenance."""

    def __init__(self, name: str):
        self.name = name
        self._values: dict[str, Any] = {}
        self._sources: dict[str, Optional[str]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def source_of(self, key: str) -> Optional[str]:
        return self._sources.get(key)

    def write(self, key: str, value: Any, source: Optional[str] = None) -> None:
        self._values[key] = value
        self._sources[key] = source

    def update(self, entries: Mapping[str, Any], source: Optional[str] = None) -> None:
        for key, value in entries.items():
            self.write(key, value, source)

    def view(self) -> Mapping[str, Any]:
        """Read-only live view of the stored values."""
        return MappingProxyType(self._values)

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)


class LayeredStore:
    """Base and local layers resolved against a schema."""

    def __init__(self, schema: SchemaLike):
        self.schema = schema
        self.base = Layer(BASE)
        self.local = Layer(LOCAL)

    def layer(self, name: str) -> Mapping[str, Any]:
        """Read-only view of the named layer ("base" or "local")."""
        if name == BASE:
            return self.base.view()
        if name == LOCAL:
            return self.local.view()
        raise ValueError(f"Unknown layer {name!r}; must be one of {LAYER_NAMES}")

    def target(self, name: str) -> Layer:
        if name == BASE:
            return self.base
        if name == LOCAL:
            return self.local
        raise ValueError(f"Unknown layer {name!r}; must be one of {LAYER_NAMES}")

    def resolve(self, key: str) -> Resolution:
        """Resolve a key and report which layer answered."""
        if self.schema.get_slot(key) is None:
            warn_unrecognized_key(
                key, f'Attempt to access undefined configuration key "{key}"'
            )
            return Resolution(key, None, None)

        if key in self.local:
            return Resolution(key, self.local[key], LOCAL, self.local.source_of(key))
        if key in self.base:
            return Resolution(key, self.base[key], BASE, self.base.source_of(key))
        return Resolution(key, self.schema.get_default_value(key), DEFAULT, "schema")

    def resolve_raw(self, key: str) -> Any:
        """Effective raw value: local, then base, then schema default."""
        return self.resolve(key).value

    def is_set(self, key: str) -> bool:
        """True if either layer holds a value for ``key``."""
        return key in self.local or key in self.base

    def set_local(
        self, key: str, value: Any, config: Any = None, source: Optional[str] = "set"
    ) -> Any:
        """Normalize ``value`` for ``key`` and store it in the local layer.

        Returns:
            The normalized value

        Raises:
            ValidationError: If the schema rejects the value; nothing is stored
        """
        normalized = self.schema.normalize_setting(key, value, config)
        self.local.write(key, normalized, source)
        return normalized

    def missing_required(self) -> list[str]:
        """Required slots without a default that neither layer sets."""
        missing = []
        for slot in self.schema.get_all_slots():
            if slot.required and not slot.has_default and not self.is_set(slot.name):
                missing.append(slot.name)
        return missing
