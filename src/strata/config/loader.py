"""Bulk loading of nested settings into a layer.

Input may be nested (``{"style": {"bg_color": "blue"}}``), flat
(``{"style.bg_color": "blue"}``) or any mix of the two. Every leaf whose full
path names a schema slot is normalized and written; unknown keys are reported
and dropped so that partial or newer config sources never break startup.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from .layers import Layer
from .options import EngineOptions, InvalidValuePolicy
from .validation import ValidationError, warn_unrecognized_key

if TYPE_CHECKING:
    from .schema import SchemaLike

logger = logging.getLogger(__name__)


class LayerLoader:
    """Validate nested input against a schema and write it into a layer."""

    def __init__(self, schema: SchemaLike, options: Optional[EngineOptions] = None):
        self.schema = schema
        self.options = options or EngineOptions()

    def load(
        self,
        data: Mapping[str, Any],
        layer: Layer,
        config: Any = None,
        source: Optional[str] = None,
        stacklevel: int = 1,
    ) -> list[str]:
        """Load ``data`` into ``layer``, overwriting only the keys it contains.

        Every leaf is normalized before anything is written, so a failure
        under InvalidValuePolicy.RAISE leaves the layer untouched.

        Args:
            data: Nested or flat settings
            layer: Target layer
            config: Owning configuration, handed to the schema for context
            source: Provenance label recorded for each written key
            stacklevel: Frame that unknown-key warnings are attributed to,
                counted as in warnings.warn with 1 being the caller of load

        Returns:
            Keys written, in input order

        Raises:
            TypeError: If ``data`` is not a mapping
            ValidationError: If a value is invalid and the policy is RAISE
        """
        if not isinstance(data, Mapping):
            raise TypeError(
                f"Configuration input must be a mapping, got {type(data).__name__}"
            )

        staged: dict[str, Any] = {}
        self._walk(data, "", staged, layer.name, config, stacklevel + 3)
        layer.update(staged, source)

        origin = f" from {source}" if source else ""
        logger.debug(f"Loaded {len(staged)} setting(s) into {layer.name} layer{origin}")
        return list(staged)

    def _walk(
        self,
        data: Mapping[str, Any],
        prefix: str,
        staged: dict[str, Any],
        layer_name: str,
        config: Any,
        stacklevel: int,
    ) -> None:
        for key, value in data.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"{prefix}{key!r}", "configuration keys must be strings", key
                )
            if value is None:
                continue

            full_key = prefix + key
            if self.schema.get_slot(full_key) is not None:
                self._stage(full_key, value, staged, config)
            elif isinstance(value, Mapping):
                self._walk(
                    value, full_key + ".", staged, layer_name, config, stacklevel + 1
                )
            else:
                warn_unrecognized_key(
                    full_key,
                    f'Unknown configuration key "{full_key}" in {layer_name} '
                    "configuration, ignoring.",
                    stacklevel=stacklevel,
                )

    def _stage(self, key: str, value: Any, staged: dict[str, Any], config: Any) -> None:
        try:
            if callable(value):
                staged[key] = self.schema.normalize_function(key, value, config)
            else:
                staged[key] = self.schema.normalize_value(key, value, config)
        except ValidationError as e:
            if self.options.on_invalid is InvalidValuePolicy.RAISE:
                raise
            logger.warning(f"Skipping invalid setting {e}")
