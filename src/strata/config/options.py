"""Engine options for Strata configurations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class InvalidValuePolicy(str, Enum):
    """What a bulk load does when one leaf fails validation."""

    RAISE = "raise"  # abort the whole load, nothing is written
    SKIP = "skip"  # drop the failing leaf with a warning, keep the rest


class ListenerErrorPolicy(str, Enum):
    """What notification does when a listener raises."""

    LOG = "log"
    RAISE = "raise"  # re-raised after every listener has run


@dataclass
class EngineOptions:
    """Behavior switches for a Configuration."""

    on_invalid: InvalidValuePolicy = InvalidValuePolicy.RAISE
    listener_errors: ListenerErrorPolicy = ListenerErrorPolicy.LOG

    def __post_init__(self) -> None:
        """Validate configuration values."""
        try:
            self.on_invalid = InvalidValuePolicy(self.on_invalid)
        except ValueError:
            raise ValueError(
                f"on_invalid must be one of {[p.value for p in InvalidValuePolicy]}"
            ) from None
        try:
            self.listener_errors = ListenerErrorPolicy(self.listener_errors)
        except ValueError:
            raise ValueError(
                f"listener_errors must be one of {[p.value for p in ListenerErrorPolicy]}"
            ) from None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "on_invalid": self.on_invalid.value,
            "listener_errors": self.listener_errors.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineOptions:
        """Create from dictionary."""
        return cls(
            on_invalid=data.get("on_invalid", InvalidValuePolicy.RAISE),
            listener_errors=data.get("listener_errors", ListenerErrorPolicy.LOG),
        )
