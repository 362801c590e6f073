"""Configuration schema for Strata.

The engine only depends on the small capability contract described by
:class:`SchemaLike`. :class:`Schema` and :class:`Slot` are the stock
implementation: slots are declared with a type, an optional default, a
required flag and an optional custom normalizer.

Example:
    schema = Schema.from_dict({
        "style": {
            "bg_color": {"type": "string", "default": "white"},
            "height": {"type": "integer", "default": 12},
        },
        "name": {"type": "string", "required": True},
    })
"""

from __future__ import annotations

import copy
import functools
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

from .serialize import nest
from .validation import ValidationError
from .values import MISSING, Computed

if TYPE_CHECKING:
    from .configuration import Configuration

# Keys that mark a mapping in Schema.from_dict as a slot definition
SLOT_MARKERS = ("type", "default", "required")

_TRUE_STRINGS = ("true", "yes", "1", "on")
_FALSE_STRINGS = ("false", "no", "0", "off")


class SlotType(str, Enum):
    """Value types a slot can declare."""

    ANY = "any"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    LIST = "list"
    DICT = "dict"
    CALLABLE = "callable"


class SchemaLike(Protocol):
    """Capabilities a Configuration needs from its schema."""

    def get_slot(self, key: str) -> Optional[Slot]: ...

    def get_all_slots(self) -> Sequence[Slot]: ...

    def get_default_value(self, key: str) -> Any: ...

    def normalize_value(self, key: str, value: Any, config: Any = None) -> Any: ...

    def normalize_function(
        self, key: str, fn: Callable[..., Any], config: Any = None
    ) -> Computed: ...

    def normalize_setting(self, key: str, value: Any, config: Any = None) -> Any: ...


def _coerce_integer(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(key, "must be an integer", value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(key, "must be an integer", value)


def _coerce_float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(key, "must be a number", value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise ValidationError(key, "must be a number", value)


def _coerce_boolean(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValidationError(key, "must be a boolean", value)


def _coerce(slot_type: SlotType, key: str, value: Any) -> Any:
    """Coerce a plain value to the slot type, raising ValidationError."""
    if slot_type is SlotType.ANY:
        return value
    if slot_type is SlotType.STRING:
        if not isinstance(value, str):
            raise ValidationError(key, "must be a string", value)
        return value
    if slot_type is SlotType.INTEGER:
        return _coerce_integer(key, value)
    if slot_type is SlotType.FLOAT:
        return _coerce_float(key, value)
    if slot_type is SlotType.BOOLEAN:
        return _coerce_boolean(key, value)
    if slot_type is SlotType.LIST:
        if isinstance(value, (list, tuple)):
            return list(value)
        raise ValidationError(key, "must be a list", value)
    if slot_type is SlotType.DICT:
        if isinstance(value, Mapping):
            return dict(value)
        raise ValidationError(key, "must be a mapping", value)
    if slot_type is SlotType.CALLABLE:
        raise ValidationError(key, "must be a callable", value)
    raise ValidationError(key, f"unsupported slot type {slot_type!r}")


@dataclass(frozen=True)
class Slot:
    """A schema-declared configuration key.

    Attributes:
        name: Full dot path of the slot (e.g. "style.bg_color")
        type: Declared value type
        default: Default value, or MISSING when the slot has none
        required: Whether a value must be supplied when there is no default
        description: Free-form help text
        normalizer: Optional callable applied after type coercion. It receives
            the coerced value and returns the value to store; ValueError or
            TypeError raised from it is reported as a ValidationError.
    """

    name: str
    type: SlotType = SlotType.ANY
    default: Any = MISSING
    required: bool = False
    description: str = ""
    normalizer: Optional[Callable[[Any], Any]] = None

    def __post_init__(self) -> None:
        """Validate the declaration and normalize the default."""
        if not self.name or any(not part for part in self.name.split(".")):
            raise ValueError(f"Invalid slot name: {self.name!r}")
        try:
            slot_type = SlotType(self.type)
        except ValueError:
            raise ValueError(
                f"{self.name}: unknown slot type {self.type!r}; "
                f"must be one of {[t.value for t in SlotType]}"
            ) from None
        object.__setattr__(self, "type", slot_type)

        if self.default is not MISSING and self.default is not None:
            if callable(self.default):
                object.__setattr__(self, "default", self.normalize_function(self.default))
            else:
                object.__setattr__(self, "default", self.normalize_value(self.default))

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def normalize_value(self, value: Any, config: Optional[Configuration] = None) -> Any:
        """Coerce and validate a plain value for this slot."""
        value = _coerce(self.type, self.name, value)
        if self.normalizer is not None:
            try:
                value = self.normalizer(value)
            except ValidationError:
                raise
            except (TypeError, ValueError) as e:
                raise ValidationError(self.name, str(e), value) from e
        return value

    def normalize_function(
        self, fn: Callable[..., Any], config: Optional[Configuration] = None
    ) -> Computed:
        """Wrap a callable so each call's result is normalized for this slot."""
        original = fn.original if isinstance(fn, Computed) else fn
        # Callable slots hold the function itself; results are not typed
        if self.type is SlotType.CALLABLE or (
            self.type is SlotType.ANY and self.normalizer is None
        ):
            return Computed.of(original)

        @functools.wraps(original)
        def normalized(*args: Any, **kwargs: Any) -> Any:
            return self.normalize_value(original(*args, **kwargs), config)

        return Computed(function=normalized, original=original)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a slot definition dictionary."""
        result: dict[str, Any] = {"type": self.type.value}
        if self.has_default:
            default = self.default
            result["default"] = default.original if isinstance(default, Computed) else default
        if self.required:
            result["required"] = True
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> Slot:
        """Create from a slot definition dictionary."""
        unknown = set(data) - {"type", "default", "required", "description", "normalizer"}
        if unknown:
            raise ValueError(f"{name}: unknown slot attributes {sorted(unknown)}")
        return cls(
            name=name,
            type=data.get("type", SlotType.ANY),
            default=data.get("default", MISSING),
            required=data.get("required", False),
            description=data.get("description", ""),
            normalizer=data.get("normalizer"),
        )


class Schema:
    """Immutable collection of slots keyed by full dot path."""

    def __init__(self, slots: Iterable[Slot]):
        """Initialize the schema.

        Args:
            slots: Slot declarations

        Raises:
            ValueError: On duplicate names or when one slot name is a dotted
                prefix of another
        """
        self._slots: dict[str, Slot] = {}
        for slot in slots:
            if slot.name in self._slots:
                raise ValueError(f"Duplicate slot: {slot.name}")
            self._slots[slot.name] = slot

        for name in self._slots:
            parts = name.split(".")
            for i in range(1, len(parts)):
                prefix = ".".join(parts[:i])
                if prefix in self._slots:
                    raise ValueError(
                        f"Slot {prefix!r} conflicts with nested slot {name!r}"
                    )

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"Schema({len(self._slots)} slots)"

    def get_slot(self, key: str) -> Optional[Slot]:
        return self._slots.get(key)

    def get_all_slots(self) -> list[Slot]:
        return list(self._slots.values())

    def get_default_value(self, key: str) -> Any:
        """Return the slot default, or None if there is no slot or default.

        Plain defaults are deep-copied so that configurations sharing this
        schema never share a mutable default.
        """
        slot = self._slots.get(key)
        if slot is None or not slot.has_default:
            return None
        if callable(slot.default):
            return slot.default
        return copy.deepcopy(slot.default)

    def _require_slot(self, key: str, value: Any) -> Slot:
        slot = self._slots.get(key)
        if slot is None:
            raise ValidationError(key, "unknown configuration key", value)
        return slot

    def normalize_value(self, key: str, value: Any, config: Any = None) -> Any:
        return self._require_slot(key, value).normalize_value(value, config)

    def normalize_function(
        self, key: str, fn: Callable[..., Any], config: Any = None
    ) -> Computed:
        return self._require_slot(key, fn).normalize_function(fn, config)

    def normalize_setting(self, key: str, value: Any, config: Any = None) -> Any:
        """Normalize a value for a single-key write.

        Callables are wrapped with normalize_function, everything else goes
        through normalize_value.
        """
        if callable(value):
            return self.normalize_function(key, value, config)
        return self.normalize_value(key, value, config)

    def with_slots(self, *slots: Slot) -> Schema:
        """Return a new schema with extra or replaced slots."""
        merged = dict(self._slots)
        for slot in slots:
            merged[slot.name] = slot
        return Schema(merged.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested slot definition dictionary."""
        return nest({name: slot.to_dict() for name, slot in self._slots.items()})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schema:
        """Create a schema from a nested definition dictionary.

        A mapping holding a "type", "default" or "required" key is a slot
        definition; any other mapping is a group. Slot instances may appear as leaves, in
        which case their name is replaced by the path they sit at. Use a Slot
        instance for a group that has a child named after one of those keys.
        """
        slots: list[Slot] = []
        _collect_slots(data, "", slots)
        return cls(slots)


def _collect_slots(data: Mapping[str, Any], prefix: str, slots: list[Slot]) -> None:
    for key, value in data.items():
        path = prefix + key
        if isinstance(value, Slot):
            slots.append(value if value.name == path else replace(value, name=path))
        elif isinstance(value, Mapping) and any(m in value for m in SLOT_MARKERS):
            slots.append(Slot.from_dict(path, value))
        elif isinstance(value, Mapping):
            _collect_slots(value, path + ".", slots)
        else:
            raise ValueError(f"{path}: expected a slot definition or group, got {value!r}")
