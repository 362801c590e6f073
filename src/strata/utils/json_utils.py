"""JSON utilities for exported configuration trees."""

import json
from enum import Enum
from typing import Any

from strata.config.values import Computed


def callable_name(obj: Any) -> str:
    """Qualified name of a callable, stable across processes."""
    module = getattr(obj, "__module__", None) or type(obj).__module__
    qualname = getattr(obj, "__qualname__", None) or type(obj).__qualname__
    return f"{module}.{qualname}"


class ConfigJSONEncoder(json.JSONEncoder):
    """JSON encoder for exported settings.

    This encoder converts values JSON cannot hold natively:
    - function wrappers -> the original callable's reference string
    - callables -> "<callable module.qualname>"
    - enums -> their value
    - sets and frozensets -> sorted lists
    """

    def default(self, obj: Any) -> Any:
        """Convert settings values to JSON-serializable Python types."""
        if isinstance(obj, Computed):
            obj = obj.original
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset)):
            return sorted(obj, key=repr)
        if callable(obj):
            return f"<callable {callable_name(obj)}>"
        return super().default(obj)


def dumps_config(obj: Any, **kwargs) -> str:
    """Serialize obj to a JSON string, handling callables.

    Args:
        obj: Object to serialize
        **kwargs: Additional arguments to pass to json.dumps

    Returns:
        JSON string
    """
    return json.dumps(obj, cls=ConfigJSONEncoder, **kwargs)


def dump_config(obj: Any, fp, **kwargs) -> None:
    """Serialize obj as JSON to a file, handling callables.

    Args:
        obj: Object to serialize
        fp: File-like object to write to
        **kwargs: Additional arguments to pass to json.dump
    """
    json.dump(obj, fp, cls=ConfigJSONEncoder, **kwargs)
