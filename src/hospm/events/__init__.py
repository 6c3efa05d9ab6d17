"""Project change events."""

from hospm.events.bus import EventBus
from hospm.events.types import EventType

__all__ = ["EventBus", "EventType"]
