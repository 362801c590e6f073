"""Configuration engine for Strata.

This package resolves dot-separated key paths against layered, schema-validated
settings.

Resolution Order (Priority Order):
1. Local (highest) - Values set with set() or load_local()
2. Base - Values loaded with load_base()
3. Defaults (lowest) - Slot defaults declared by the schema

Example Usage:
    from strata.config import Configuration, Schema

    schema = Schema.from_dict({
        "style": {"bg_color": {"type": "string", "default": "white"}},
    })
    config = Configuration(schema, {"style": {"bg_color": "blue"}})

    config.get("style.bg_color")  # "blue"
    watch = config.watch("style.bg_color", lambda key, old, new: print(old, new))
    config.set("style.bg_color", "red")  # prints "blue red"
    watch.remove()

Callable Settings:
    A setting may be a function; get() passes its extra arguments through:
    - config.set("style.label", lambda feature: feature["name"])
    - config.get("style.label", {"name": "gene-1"})  # "gene-1"
"""

from .accessors import AccessorCache
from .configuration import Configuration
from .layers import Layer, LayeredStore, Resolution
from .loader import LayerLoader
from .options import EngineOptions, InvalidValuePolicy, ListenerErrorPolicy
from .schema import Schema, SchemaLike, Slot, SlotType
from .serialize import copy_values, flatten, merge_layers, nest, unwrap_functions
from .validation import (
    ConfigValidationError,
    UnrecognizedKeyWarning,
    ValidationError,
    ValidationIssue,
    ValidationResult,
    validate_config,
)
from .values import MISSING, Computed, Constant
from .watch import Watch, WatchBus

__all__ = [
    # Main config class
    "Configuration",
    # Schema
    "Schema",
    "SchemaLike",
    "Slot",
    "SlotType",
    "MISSING",
    # Values
    "Constant",
    "Computed",
    # Components
    "AccessorCache",
    "Layer",
    "LayeredStore",
    "LayerLoader",
    "Resolution",
    "Watch",
    "WatchBus",
    # Options
    "EngineOptions",
    "InvalidValuePolicy",
    "ListenerErrorPolicy",
    # Serialization
    "flatten",
    "nest",
    "merge_layers",
    "copy_values",
    "unwrap_functions",
    # Validation
    "validate_config",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
    "ConfigValidationError",
    "UnrecognizedKeyWarning",
]
