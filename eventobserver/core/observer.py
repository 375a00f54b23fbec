"""
EventObserver - observer pattern bindable to other observers.

Responsibilities:
- Register/unregister listeners by Event class or instance
- Emit events synchronously, dropping events whose id was already emitted
- Notify every emission with an EmitEvent
- Relay events between bound observers in a chosen direction

Architecture:
    emit(event)
        -> id cache check (drop duplicates)
        -> listeners for the event's type key
        -> listeners for EmitEvent (relay closures live here)
            -> peer.emit(event)   # same event, same id

An event relayed A -> B -> A arrives at A a second time with an id A has
already cached, so the cycle stops there. No recursion limit exists beyond
this, so cyclic topologies rely on the cache for termination. A cache that
is too small for the relay fan-out can let an event loop again once its id
has been evicted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntFlag
import logging
from typing import Any

from eventobserver.core.cache import IdCache
from eventobserver.core.config import ObserverConfig
from eventobserver.core.events.base import Event, EventType, Listener, resolve_event_key
from eventobserver.core.events.emit import EmitEvent
from eventobserver.core.events.registry import ListenerRegistry
from eventobserver.core.exceptions import BindingError, InvalidEventTypeError

logger = logging.getLogger(__name__)


class RelayFlags(IntFlag):
    """
    Flags used to track how two EventObservers are bound.

    - RelayFlags.TO sends the binding observer's events to the bound observer.
    - RelayFlags.FROM sends the bound observer's events to the binding observer.
    - RelayFlags.ALL sends all events from either observer to the other.
    - RelayFlags.NONE sends no events between the observers.
    """

    NONE = 0
    TO = 1
    FROM = 2
    ALL = TO | FROM


@dataclass(frozen=True)
class RelayBinding:
    """
    Binding record kept by the binding observer.

    Attributes:
        flags: Direction events flow
        to_listener: Relay installed on this observer's EmitEvent (TO)
        from_listener: Relay installed on the peer's EmitEvent (FROM)
    """

    flags: RelayFlags
    to_listener: Listener | None = None
    from_listener: Listener | None = None


class EventObserver:
    """
    Synchronous observer whose instances can relay events to each other.

    EventObserver takes Event objects rather than names because it tracks
    each event's id. When two or more observers are bound, that id is what
    keeps an event from being emitted back and forth forever.

    Method names follow the familiar emitter vocabulary (on, once, off, ...)
    with Python naming.

    Usage:
        a, b = EventObserver(), EventObserver()
        a.bind(b, RelayFlags.ALL)
        b.on(MyEvent, handle_my_event)
        a.emit(MyEvent("payload"))  # handle_my_event runs on b
    """

    def __init__(
        self,
        config: ObserverConfig | None = None,
        *,
        id_cache_limit: int | None = None,
    ):
        """
        Initialize EventObserver.

        Args:
            config: Observer configuration (defaults + EVENTOBSERVER_* env vars if None)
            id_cache_limit: Overrides config.id_cache_limit when given
        """
        self.config = config or ObserverConfig()
        limit = self.config.id_cache_limit if id_cache_limit is None else id_cache_limit

        self._registry = ListenerRegistry(isolate_errors=self.config.isolate_listener_errors)
        self._id_cache: IdCache = IdCache(limit=limit)
        self._relays: dict[EventObserver, RelayBinding] = {}
        # Observers that installed a FROM relay on this observer's EmitEvent
        self._bound_from: set[EventObserver] = set()

    # ------------------------------------------------------------------
    # Id cache
    # ------------------------------------------------------------------

    def get_id_cache_limit(self) -> int:
        """Get the maximum number of ids kept in cache (0 when unlimited)."""
        return self._id_cache.limit

    def set_id_cache_limit(self, limit: int) -> None:
        """
        Set the maximum number of ids kept in cache.

        Shrinking below the current number of ids purges the oldest ones.
        A limit <= 0 removes the bound.
        """
        self._id_cache.set_limit(limit)

    def get_id_cache_size(self) -> int:
        """Get the number of ids currently cached."""
        return self._id_cache.size()

    def clear_id_cache(self) -> None:
        """Remove all ids from the id cache."""
        self._id_cache.clear()

    # ------------------------------------------------------------------
    # Emit
    # ------------------------------------------------------------------

    def emit(self, event: Event) -> bool:
        """
        Emit an event.

        The event's id is compared with the cache of emitted ids first. If
        found, nothing happens and False is returned. Otherwise the id is
        cached, listeners for the event's type are called, and an EmitEvent
        wrapping the event is dispatched.

        EmitEvents themselves skip the cache and are never wrapped again.
        Their ids are fresh on every construction, so there is nothing to
        deduplicate.

        Args:
            event: Event instance to emit

        Returns:
            True if any listener for the event's own type was called

        Raises:
            InvalidEventTypeError: If event is not an Event instance
        """
        if not isinstance(event, Event):
            raise InvalidEventTypeError(f"emit() requires an Event instance, got {event!r}", value=event)

        if isinstance(event, EmitEvent):
            return self._registry.dispatch(EmitEvent.type_key(), event)

        if self._id_cache.contains(event.event_id):
            logger.debug(
                f"Dropped already emitted event {event.name} ({event.event_id})",
                extra={"context": event.to_dict()},
            )
            return False

        self._id_cache.insert(event.event_id)

        called = self._registry.dispatch(event.type_key(), event)
        self._registry.dispatch(EmitEvent.type_key(), EmitEvent(event))
        return called

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on(self, event: EventType, listener: Listener) -> EventObserver:
        """
        Bind a listener to an event.

        Listeners are called with a single argument: the event instance.

        Args:
            event: Event class or instance. Passing an instance still binds to
                every instance of its class.
            listener: Callback to execute when the event type is emitted

        Returns:
            Reference to self
        """
        self._registry.register(resolve_event_key(event), listener)
        return self

    add_listener = on

    def once(self, event: EventType, listener: Listener) -> EventObserver:
        """Same as on(), but the listener is removed the first time it is called."""
        self._registry.register(resolve_event_key(event), listener, once=True)
        return self

    def prepend_listener(self, event: EventType, listener: Listener) -> EventObserver:
        """Same as on(), but the listener runs before those already bound."""
        self._registry.register(resolve_event_key(event), listener, prepend=True)
        return self

    def prepend_once_listener(self, event: EventType, listener: Listener) -> EventObserver:
        """Same as once(), but the listener runs before those already bound."""
        self._registry.register(resolve_event_key(event), listener, once=True, prepend=True)
        return self

    def remove_listener(self, event: EventType, listener: Listener) -> EventObserver:
        """
        Unbind a listener from an event. No-op if it isn't bound.

        Returns:
            Reference to self
        """
        self._registry.unregister(resolve_event_key(event), listener)
        return self

    off = remove_listener

    def remove_all_listeners(self, event: EventType | None = None) -> EventObserver:
        """
        Remove all listeners bound to an event type, or to every type if
        event is omitted.

        Relay bindings are EmitEvent listeners, so clearing every type or
        EmitEvent also removes every binding whose relay lives on this
        observer: the ones it made, and FROM bindings other observers made
        to it.
        """
        key = None if event is None else resolve_event_key(event)
        if key is None or key == EmitEvent.type_key():
            self.unbind_all()
            for peer in list(self._bound_from):
                peer.unbind(self)
        self._registry.unregister_all(key)
        return self

    def has_listener(self, event: EventType, listener: Listener) -> bool:
        """Check if a listener is bound to an event type."""
        return self._registry.has(resolve_event_key(event), listener)

    def listeners(self, event: EventType) -> list[Listener]:
        """Get the listeners bound to an event type in call order."""
        return self._registry.listeners(resolve_event_key(event))

    def listener_count(self, event: EventType) -> int:
        """Get the number of listeners bound to an event type."""
        return self._registry.listener_count(resolve_event_key(event))

    def event_keys(self) -> list[str]:
        """Get the type keys that currently have listeners."""
        return self._registry.event_keys()

    def listens_to(
        self,
        event: EventType,
        *,
        once: bool = False,
        prepend: bool = False,
    ) -> Callable[[Listener], Listener]:
        """
        Decorator form of on().

        Usage:
            @observer.listens_to(UserJoined)
            def greet(event: UserJoined) -> None:
                ...

        Returns:
            Decorator that registers the function and returns it unchanged
        """
        key = resolve_event_key(event)

        def decorator(func: Listener) -> Listener:
            self._registry.register(key, func, once=once, prepend=prepend)
            return func

        return decorator

    # ------------------------------------------------------------------
    # Relays
    # ------------------------------------------------------------------

    def bind(self, relay: EventObserver, relay_flags: RelayFlags | None = None) -> None:
        """
        Bind an EventObserver to this observer.

        - RelayFlags.NONE: neither observer sends its events to the other.
        - RelayFlags.FROM: relay emits its events on this observer.
        - RelayFlags.TO: this observer emits its events on relay.
        - RelayFlags.ALL: both observers emit their events on one another.

        An existing binding to relay is replaced, not combined.

        Args:
            relay: EventObserver to bind to this observer
            relay_flags: Direction events should be relayed. Defaults to
                config.default_relay_flags (RelayFlags.ALL)

        Raises:
            BindingError: If relay is not another EventObserver
        """
        if not isinstance(relay, EventObserver):
            raise BindingError(f"Can only bind to an EventObserver, got {relay!r}")
        if relay is self:
            raise BindingError("An EventObserver cannot be bound to itself")

        flags = RelayFlags(self.config.default_relay_flags if relay_flags is None else relay_flags)

        self.unbind(relay)

        to_listener = None
        from_listener = None
        if flags & RelayFlags.TO:
            to_listener = self._make_relay(relay)
            self._registry.register(EmitEvent.type_key(), to_listener)
        if flags & RelayFlags.FROM:
            from_listener = self._make_relay(self)
            relay._registry.register(EmitEvent.type_key(), from_listener)
            relay._bound_from.add(self)

        self._relays[relay] = RelayBinding(
            flags=flags, to_listener=to_listener, from_listener=from_listener
        )
        logger.debug(f"Bound {relay!r} to {self!r} with {flags!r}")

    def check_binding(self, relay: EventObserver) -> RelayFlags | None:
        """
        Check how an EventObserver is bound to this observer.

        Returns:
            RelayFlags for the binding, or None if relay is not bound
        """
        binding = self._relays.get(relay)
        return binding.flags if binding is not None else None

    def unbind(self, relay: EventObserver) -> None:
        """
        Unbind an EventObserver from this observer.

        No-op if relay is not bound. Safe to call from a listener running
        because of a relay: the relay in progress completes, later events are
        no longer relayed.
        """
        binding = self._relays.pop(relay, None)
        if binding is None:
            return

        if binding.to_listener is not None:
            self._registry.unregister(EmitEvent.type_key(), binding.to_listener)
        if binding.from_listener is not None:
            relay._registry.unregister(EmitEvent.type_key(), binding.from_listener)
            relay._bound_from.discard(self)
        logger.debug(f"Unbound {relay!r} from {self!r}")

    def unbind_all(self) -> None:
        """Unbind every observer this observer has bound."""
        for relay in list(self._relays):
            self.unbind(relay)

    def bindings(self) -> dict[EventObserver, RelayFlags]:
        """Get a snapshot of bound observers and their relay flags."""
        return {relay: binding.flags for relay, binding in self._relays.items()}

    @staticmethod
    def _make_relay(observer: EventObserver) -> Listener:
        """
        Create the listener that relays events to an observer.

        The returned function is bound to EmitEvent and emits the wrapped
        event on observer.
        """

        def relay(event: EmitEvent) -> None:
            observer.emit(event.data)

        return relay

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        """Get observer statistics for monitoring."""
        return {
            "listeners": self._registry.get_stats(),
            "bindings": len(self._relays),
            "id_cache": self._id_cache.stats,
        }

    def __repr__(self) -> str:
        return f"<EventObserver at {id(self):#x}>"
