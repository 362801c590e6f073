"""Setting value variants.

A resolved setting is always called to obtain its value. Plain values are
wrapped in :class:`Constant`; callables normalized by a schema are stored as
:class:`Computed`, which keeps the caller's original function next to the
normalized wrapper so exports can hand the original back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


class _MissingType:
    """Sentinel type for "no value", distinct from ``None``."""

    _instance = None

    def __new__(cls) -> _MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple[Any, tuple[()]]:
        return (_MissingType, ())


MISSING: Any = _MissingType()


@dataclass(frozen=True)
class Constant:
    """Accessor for a plain value; call arguments are ignored."""

    value: Any

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class Computed:
    """A normalized callable setting paired with the function it came from.

    Attributes:
        function: Callable invoked on access (may validate its results)
        original: The callable the caller supplied
    """

    function: Callable[..., Any]
    original: Callable[..., Any]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.function(*args, **kwargs)

    @classmethod
    def of(cls, fn: Callable[..., Any]) -> Computed:
        """Wrap a callable that needs no normalization."""
        if isinstance(fn, Computed):
            return fn
        return cls(function=fn, original=fn)


def unwrap(value: Any) -> Any:
    """Return the caller-supplied original for a Computed value."""
    if isinstance(value, Computed):
        return value.original
    return value
