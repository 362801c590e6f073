"""The Configuration facade.

A Configuration has a number of slots, declared by its schema, each named by
a dot path like ``"style.bg_color"``. Values come from three tiers:

1. Local (highest) - values set with ``set()`` or ``load_local()``
2. Base - values loaded with ``load_base()``, usually from a config source
3. Defaults (lowest) - slot defaults from the schema

Example:
    config = Configuration(schema)
    config.get("style.bg_color")                 # "white"
    config.load_base({"style": {"bg_color": "blue"}})
    config.set("style.bg_color", "red")
    config.export_base()                         # {"style": {"bg_color": "blue"}}
    config.export_local()                        # {"style": {"bg_color": "red"}}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..utils.fingerprint import fingerprint_tree
from .accessors import Accessor, AccessorCache
from .layers import BASE, LOCAL, LayeredStore, Resolution
from .loader import LayerLoader
from .options import EngineOptions
from .schema import SchemaLike
from .serialize import copy_values, merge_layers, nest, unwrap_functions
from .validation import ValidationResult, validate_config
from .values import MISSING
from .watch import Listener, Watch, WatchBus

logger = logging.getLogger(__name__)


class Configuration:
    """Layered, schema-validated settings with cached accessors and watches."""

    def __init__(
        self,
        schema: SchemaLike,
        base: Optional[Mapping[str, Any]] = None,
        *,
        options: Optional[EngineOptions] = None,
        source: Optional[str] = None,
    ):
        """Initialize the configuration.

        Args:
            schema: Schema declaring the legal slots; shared, never modified
            base: Optional nested settings loaded into the base layer
            options: Engine behavior switches
            source: Provenance label for the initial base settings

        Raises:
            TypeError: If no schema is given
        """
        if schema is None:
            raise TypeError("must provide a schema to Configuration constructor")

        self.schema = schema
        self.options = options or EngineOptions()
        self.store = LayeredStore(schema)
        self._accessors = AccessorCache(self.store)
        self._bus = WatchBus(self.options.listener_errors)
        self._loader = LayerLoader(schema, self.options)

        if base is not None:
            self._load(BASE, base, source, False)

    def __repr__(self) -> str:
        return (
            f"Configuration(base={len(self.store.base)}, "
            f"local={len(self.store.local)}, schema={self.schema!r})"
        )

    # Reading

    def get(self, key: str, *args: Any, **kwargs: Any) -> Any:
        """Get the value of a setting.

        Callable settings are evaluated with the given arguments; plain
        values ignore them. Unknown keys emit UnrecognizedKeyWarning and
        return None.
        """
        return self._accessors.get(key, *args, **kwargs)

    def get_accessor(self, key: str) -> Accessor:
        """Return a callable that produces the value of a setting."""
        return self._accessors.get_accessor(key)

    def get_raw(self, key: str) -> Any:
        """Effective raw value without evaluating callables."""
        return self.store.resolve_raw(key)

    def describe(self, key: str) -> Resolution:
        """Effective raw value plus the layer and source that supplied it."""
        return self.store.resolve(key)

    def is_set(self, key: str) -> bool:
        return self.store.is_set(key)

    # Writing

    def normalize_setting(self, key: str, value: Any) -> Any:
        """Validate and possibly transform a value before it is set.

        Raises:
            ValidationError: If the value is invalid
        """
        return self.schema.normalize_setting(key, value, self)

    def set(self, key: str, value: Any, notify: bool = True) -> Any:
        """Set a local value for one key.

        Args:
            key: Full dot path of the slot
            value: New value (or callable)
            notify: Whether to call listeners watching ``key``

        Returns:
            The normalized value that was stored

        Raises:
            ValidationError: If the schema rejects the key or value; nothing
                changes in that case
        """
        old_value = self._previous_value(key)
        new_value = self.store.set_local(key, value, self)
        self._accessors.evict(key)
        if notify:
            self._bus.notify(key, old_value, new_value)
        return new_value

    def _previous_value(self, key: str) -> Any:
        if self.schema.get_slot(key) is None:
            return None
        try:
            return self.get(key)
        except Exception as e:
            # A callable setting may need arguments or fail without them
            logger.debug(f"Could not read previous value of {key!r}: {e}")
            return None

    def load_base(
        self,
        data: Mapping[str, Any],
        *,
        source: Optional[str] = None,
        notify: bool = False,
    ) -> list[str]:
        """Load settings into the base layer, overwriting the keys given.

        Returns:
            Keys written
        """
        return self._load(BASE, data, source, notify)

    def load_local(
        self,
        data: Mapping[str, Any],
        *,
        source: Optional[str] = None,
        notify: bool = False,
    ) -> list[str]:
        """Load settings into the local layer, overwriting the keys given.

        Returns:
            Keys written
        """
        return self._load(LOCAL, data, source, notify)

    def _load(
        self,
        layer_name: str,
        data: Mapping[str, Any],
        source: Optional[str],
        notify: bool,
    ) -> list[str]:
        before = (self.store.local.snapshot(), self.store.base.snapshot()) if notify else None

        # Unknown-key warnings point at whoever called load_base, load_local
        # or the constructor, two frames above _load
        written = self._loader.load(
            data, self.store.target(layer_name), self, source, stacklevel=3
        )
        self._accessors.evict_many(written)

        if before is not None:
            local_before, base_before = before
            first_error: Optional[BaseException] = None
            for key in written:
                old_value = local_before.get(key, MISSING)
                if old_value is MISSING:
                    old_value = base_before.get(key, MISSING)
                if old_value is MISSING:
                    old_value = self.schema.get_default_value(key)
                new_value = self.store.resolve_raw(key)
                if old_value is not new_value and old_value != new_value:
                    try:
                        self._bus.notify(key, old_value, new_value)
                    except Exception as e:
                        if first_error is None:
                            first_error = e
            if first_error is not None:
                raise first_error
        return written

    # Watching

    def watch(self, key_path: str, callback: Listener) -> Watch:
        """Call ``callback(key, old, new)`` whenever ``key_path`` is set.

        Only the exact key path is observed. Use the returned handle's
        ``remove()`` to stop watching.
        """
        return self._bus.watch(key_path, callback)

    def listener_count(self, key_path: str) -> int:
        return self._bus.listener_count(key_path)

    # Validation

    def missing_required(self) -> list[str]:
        """Required slots without a default that have no value set."""
        return self.store.missing_required()

    def validate(self) -> ValidationResult:
        return validate_config(self)

    # Export

    def export_base(self) -> dict[str, Any]:
        """Nested dictionary of the base layer.

        Plain values are copies; changing them does not change the layer.
        """
        return nest(copy_values(self.store.base.snapshot()))

    def export_local(self) -> dict[str, Any]:
        """Nested dictionary of the locally set values."""
        return nest(copy_values(self.store.local.snapshot()))

    def export_merged(self) -> dict[str, Any]:
        """Nested dictionary of base with local merged over it.

        Callable settings are exported as the functions originally supplied,
        not the wrappers added by normalization.
        """
        merged = merge_layers(self.store.base.snapshot(), self.store.local.snapshot())
        return nest(copy_values(unwrap_functions(merged)))

    def fingerprint(self) -> str:
        """Stable hash of the merged settings."""
        return fingerprint_tree(self.export_merged())
