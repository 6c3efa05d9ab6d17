"""Synchronous event bus used to signal project changes to views."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from hospm.events.types import EventType

logger = logging.getLogger(__name__)

Listener = Callable[[EventType, dict[str, Any]], None]


class EventBus:
    """Simple pub/sub event bus."""

    def __init__(self) -> None:
        self._listeners: dict[EventType, list[Listener]] = defaultdict(list)
        self._global_listeners: list[Listener] = []

    def on(self, event_type: EventType, listener: Listener) -> None:
        """Register a listener for a specific event type."""
        self._listeners[event_type].append(listener)

    def on_all(self, listener: Listener) -> None:
        """Register a listener for all events."""
        self._global_listeners.append(listener)

    def off(self, event_type: EventType, listener: Listener) -> None:
        """Remove a listener."""
        if listener in self._listeners[event_type]:
            self._listeners[event_type].remove(listener)

    def emit(self, event_type: EventType, data: dict[str, Any] | None = None) -> None:
        """Emit an event to all registered listeners.

        A failing listener is logged and skipped; the change that triggered
        the event has already happened.
        """
        data = data or {}
        listeners = self._listeners.get(event_type, []) + self._global_listeners

        for listener in listeners:
            try:
                listener(event_type, data)
            except Exception:
                logger.exception("Error in event listener for %s", event_type)

    def clear(self) -> None:
        """Remove all listeners."""
        self._listeners.clear()
        self._global_listeners.clear()
