"""Per-key change notification.

Listeners are registered for one exact key path; watching ``"style"`` does
not observe changes to ``"style.bg_color"``. Each notification runs over a
snapshot of the listeners taken when it starts, so listeners may add or
remove watches (or trigger further notifications) while being called.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Optional

from .options import ListenerErrorPolicy

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any, Any], Any]


class Watch:
    """Handle returned by :meth:`WatchBus.watch`.

    ``remove()`` may be called any number of times, including from inside a
    notification.
    """

    def __init__(self, bus: WatchBus, key_path: str, listener_id: int, callback: Listener):
        self._bus = bus
        self.key_path = key_path
        self.callback = callback
        self._listener_id = listener_id
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def remove(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus._discard(self.key_path, self._listener_id)

    def __enter__(self) -> Watch:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.remove()

    def __repr__(self) -> str:
        state = "active" if self._active else "removed"
        return f"Watch({self.key_path!r}, {state})"


class WatchBus:
    """Registry of listeners keyed by exact key path."""

    def __init__(self, listener_errors: ListenerErrorPolicy = ListenerErrorPolicy.LOG):
        self.listener_errors = ListenerErrorPolicy(listener_errors)
        # key path -> {listener id: callback}; ids are never reused
        self._listeners: dict[str, dict[int, Listener]] = {}
        self._ids = itertools.count()

    def watch(self, key_path: str, callback: Listener) -> Watch:
        """Register a callback for changes to ``key_path``.

        The callback is called as ``callback(key_path, old_value, new_value)``.
        """
        if not callable(callback):
            raise TypeError(f"Listener for {key_path!r} must be callable")
        listener_id = next(self._ids)
        self._listeners.setdefault(key_path, {})[listener_id] = callback
        return Watch(self, key_path, listener_id, callback)

    def _discard(self, key_path: str, listener_id: int) -> None:
        listeners = self._listeners.get(key_path)
        if listeners is None:
            return
        listeners.pop(listener_id, None)
        if not listeners:
            del self._listeners[key_path]

    def notify(self, key_path: str, old_value: Any, new_value: Any) -> None:
        """Call every listener registered for ``key_path``.

        A listener that raises does not stop the others. The error is logged
        and, under ``ListenerErrorPolicy.RAISE``, the first one is re-raised
        once every listener has run.
        """
        listeners = self._listeners.get(key_path)
        if not listeners:
            return

        first_error: Optional[BaseException] = None
        for callback in list(listeners.values()):
            try:
                callback(key_path, old_value, new_value)
            except Exception as e:
                logger.exception(f"Listener for {key_path!r} failed: {e}")
                if first_error is None:
                    first_error = e

        if first_error is not None and self.listener_errors is ListenerErrorPolicy.RAISE:
            raise first_error

    def listener_count(self, key_path: str) -> int:
        return len(self._listeners.get(key_path, ()))

    def watched_paths(self) -> list[str]:
        return list(self._listeners)
