from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, DefaultDict, Dict, List, Optional

logger = logging.getLogger(__name__)


class MapEvents:
    """Event names published by the document store."""

    SAVED = "map_saved"
    SAVE_FAILED = "map_save_failed"
    LOADED = "map_loaded"
    LOAD_FAILED = "map_load_failed"
    LOAD_BLOCKED = "map_load_blocked"  # missing assets
    CREATED = "map_created"
    SWITCHED = "map_switched"
    PATH_CHANGED = "map_path_changed"


@dataclass(frozen=True)
class Event:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)


Listener = Callable[[Event], None]


class EventBus:
    """Thread-safe publish/subscribe for store notifications.

    Listeners run synchronously on the publishing thread, in subscription
    order. A listener that raises is logged and the remaining ones still run.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
        self._lock = RLock()

    def subscribe(self, event_name: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it again."""
        if not callable(listener):
            raise TypeError("listener must be callable")
        with self._lock:
            self._listeners[event_name].append(listener)
        logger.debug("Listener %s added for '%s'", getattr(listener, "__name__", listener), event_name)
        return lambda: self.unsubscribe(event_name, listener)

    def unsubscribe(self, event_name: str, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(event_name)
            if listeners and listener in listeners:
                listeners.remove(listener)

    def listener_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._listeners.get(event_name, ()))

    def publish(self, event_name: str, payload: Optional[Dict[str, Any]] = None) -> Event:
        event = Event(event_name, dict(payload or {}))
        with self._lock:
            listeners = list(self._listeners.get(event_name, ()))
        logger.debug("Event '%s' -> %d listener(s): %s", event_name, len(listeners), event.payload)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener for '%s' failed", event_name)
        return event
