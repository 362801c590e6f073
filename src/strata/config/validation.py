"""Configuration validation for Strata.

This module defines the error and warning taxonomy used by the engine and a
whole-configuration validation pass.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .configuration import Configuration

logger = logging.getLogger(__name__)


class UnrecognizedKeyWarning(UserWarning):
    """Emitted when a key path does not name any schema slot.

    Reads of such keys resolve to ``None`` and bulk loads drop them.
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(message)


def warn_unrecognized_key(key: str, message: str, stacklevel: int = 4) -> None:
    """Report an unknown key through both warnings and logging."""
    logger.warning(message)
    warnings.warn(UnrecognizedKeyWarning(key, message), stacklevel=stacklevel)


class ValidationError(ValueError):
    """Raised when a value fails normalization for its slot."""

    def __init__(self, key: str, message: str, value: Any = None) -> None:
        self.key = key
        self.message = message
        self.value = value
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.key}: {self.message} (got: {self.value!r})"
        return f"{self.key}: {self.message}"


@dataclass
class ValidationIssue:
    """A single problem found while validating a configuration."""

    key: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.key}: {self.message} (got: {self.value!r})"
        return f"{self.key}: {self.message}"


class ConfigValidationError(Exception):
    """Raised when a caller asks for fail-fast handling of a validation result.

    Attributes:
        errors: List of ValidationIssue objects describing what failed
        warnings: List of ValidationIssue objects for non-fatal issues
    """

    def __init__(
        self,
        message: str,
        errors: list[ValidationIssue],
        warnings: Optional[list[ValidationIssue]] = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors
        self.warnings = warnings or []

    def __str__(self) -> str:
        lines = [super().__str__()]
        if self.errors:
            lines.append("Errors:")
            for error in self.errors:
                lines.append(f"  - {error}")
        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  - {warning}")
        return "\n".join(lines)


@dataclass
class ValidationResult:
    """Result of configuration validation."""

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid

    def raise_for_errors(self) -> None:
        """Raise ConfigValidationError if any error was recorded."""
        if not self.valid:
            raise ConfigValidationError(
                f"Configuration has {len(self.errors)} error(s)",
                self.errors,
                self.warnings,
            )


def validate_config(config: Configuration) -> ValidationResult:
    """Validate a configuration instance.

    Required slots without a default that have no value in either layer are
    reported as errors, as are stored keys the schema does not declare.
    Stored values are not normalized again: they were normalized when they
    were written, and normalizers need not be idempotent.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with errors and warnings
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    _validate_required(config, errors)
    _validate_stored(config, errors, warnings)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_required(
    config: Configuration,
    errors: list[ValidationIssue],
) -> None:
    for name in config.missing_required():
        errors.append(ValidationIssue(name, "required setting is not set"))


def _validate_stored(
    config: Configuration,
    errors: list[ValidationIssue],
    warnings: list[ValidationIssue],
) -> None:
    schema = config.schema
    for layer_name in ("base", "local"):
        for key in config.store.layer(layer_name):
            if schema.get_slot(key) is None:
                errors.append(
                    ValidationIssue(f"{layer_name}:{key}", "unknown configuration key")
                )

    for key in config.store.layer("local"):
        if key in config.store.layer("base"):
            continue
        slot = schema.get_slot(key)
        if slot is not None and slot.required and not slot.has_default:
            warnings.append(
                ValidationIssue(key, "required setting is only satisfied locally")
            )
