"""
Event System - identity-bearing events and listener dispatch.

Core Components:
- Event: immutable event with a unique id and a payload
- EmitEvent: notification wrapping every emitted event
- ListenerRegistry: ordered listeners per event type

Quick Start:
    from eventobserver.core.events import Event

    class UserJoined(Event[str]):
        pass

    event = UserJoined("alice")
    event.type_key()   # shared by every UserJoined
    event.event_id     # unique to this instance
"""

from .base import Event, EventType, Listener, resolve_event_key
from .emit import EmitEvent
from .registry import ListenerRegistration, ListenerRegistry

__all__ = [
    "EmitEvent",
    "Event",
    "EventType",
    "Listener",
    "ListenerRegistration",
    "ListenerRegistry",
    "resolve_event_key",
]
