"""
EventObserver - observer pattern with relays between observers.

Main Features:
- Listeners bound by Event class (or instance of it)
- Events carry a unique id; an id is only ever emitted once per observer
- Observers can be bound so events flow to, from, or both ways
- Relay cycles stop on their own thanks to the id cache

Quick Start:
    >>> from eventobserver import Event, EventObserver, RelayFlags
    >>> class Ping(Event[str]):
    ...     pass
    >>> a, b = EventObserver(), EventObserver()
    >>> a.bind(b, RelayFlags.ALL)
    >>> b.on(Ping, lambda event: print(event.data))
    >>> a.emit(Ping("hello"))
    hello
    False

Architecture:
    emit -> id cache -> listeners -> EmitEvent -> relays -> peer.emit
"""

__version__ = "0.1.0"

import logging as _logging

from eventobserver.core.cache import IdCache
from eventobserver.core.config import ObserverConfig
from eventobserver.core.events import EmitEvent, Event, EventType, Listener
from eventobserver.core.exceptions import (
    BindingError,
    ConfigurationError,
    EventObserverError,
    InvalidEventTypeError,
)
from eventobserver.core.logging_config import setup_logging
from eventobserver.core.observer import EventObserver, RelayBinding, RelayFlags

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

__all__ = [
    "BindingError",
    "ConfigurationError",
    "EmitEvent",
    "Event",
    "EventObserver",
    "EventObserverError",
    "EventType",
    "IdCache",
    "InvalidEventTypeError",
    "Listener",
    "ObserverConfig",
    "RelayBinding",
    "RelayFlags",
    "__version__",
    "setup_logging",
]
