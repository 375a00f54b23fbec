"""Core module for EventObserver."""

from eventobserver.core.cache import IdCache
from eventobserver.core.config import ObserverConfig
from eventobserver.core.events import EmitEvent, Event, ListenerRegistry
from eventobserver.core.exceptions import (
    BindingError,
    ConfigurationError,
    EventObserverError,
    InvalidEventTypeError,
)
from eventobserver.core.observer import EventObserver, RelayBinding, RelayFlags

__all__ = [
    "BindingError",
    "ConfigurationError",
    "EmitEvent",
    "Event",
    "EventObserver",
    "EventObserverError",
    "IdCache",
    "InvalidEventTypeError",
    "ListenerRegistry",
    "ObserverConfig",
    "RelayBinding",
    "RelayFlags",
]
