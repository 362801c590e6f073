"""
Strata: layered, schema-validated configuration
"""

__version__ = "1.0.0"

from strata.config import (
    Configuration,
    ConfigValidationError,
    EngineOptions,
    Schema,
    Slot,
    SlotType,
    UnrecognizedKeyWarning,
    ValidationError,
    Watch,
    flatten,
    nest,
    validate_config,
)
from strata.utils.fingerprint import fingerprint_tree

__all__ = [
    # Core
    "Configuration",
    "Schema",
    "Slot",
    "SlotType",
    "Watch",
    "EngineOptions",
    # Serialization
    "flatten",
    "nest",
    "fingerprint_tree",
    # Validation
    "validate_config",
    "ValidationError",
    "ConfigValidationError",
    "UnrecognizedKeyWarning",
]
