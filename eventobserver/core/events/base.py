"""
Base Event - identity-bearing messages.

Core Concepts:
- Event: immutable record with a unique id and a payload
- EventType: either an Event subclass or an Event instance
- resolve_event_key: turns an EventType into the registry key

Every instance gets a fresh uuid4 at construction. The id is what lets an
EventObserver recognise an event it has already emitted. The type key is
shared by all instances of a class and is what listeners are registered
under.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Generic, TypeAlias, TypeVar
from uuid import UUID, uuid4

from eventobserver.core.exceptions import InvalidEventTypeError

T = TypeVar("T")


@dataclass(frozen=True, eq=False)
class Event(Generic[T]):
    """
    Base class for all events.

    Subclass it to declare a new kind of event; the payload goes in ``data``.

    Attributes:
        data: Payload carried by the event
        event_id: Unique identifier for this event instance
        timestamp: When the event was created
        metadata: Additional context (for logging, debugging)

    Example:
        >>> class UserJoined(Event[str]):
        ...     pass
        >>> event = UserJoined("alice")
        >>> event.data
        'alice'

    Subclasses that declare their own fields must make them keyword-only,
    since ``data`` stays positional and has a default:

        >>> @dataclass(frozen=True, kw_only=True)
        ... class PlayerMoved(Event[str]):
        ...     x: int
        ...     y: int = 0
        >>> moved = PlayerMoved("alice", x=3)
    """

    data: T | None = field(default=None, hash=False)
    event_id: UUID = field(default_factory=uuid4, init=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC), init=False)
    metadata: dict[str, Any] = field(default_factory=dict, kw_only=True, hash=False)

    @property
    def id(self) -> UUID:
        """Alias of ``event_id``."""
        return self.event_id

    @property
    def name(self) -> str:
        """Human-readable name. Not required to be unique."""
        return type(self).__name__

    @classmethod
    def type_key(cls) -> str:
        """
        Dispatch key shared by every instance of this class.

        Module-qualified so that two classes with the same name in different
        modules do not collide.
        """
        return f"{cls.__module__}.{cls.__qualname__}"

    def to_dict(self) -> dict[str, Any]:
        """Describe the event for logging."""
        return {
            "event_id": str(self.event_id),
            "event_type": self.type_key(),
            "name": self.name,
            "timestamp": self.timestamp.isoformat(),
            **self.metadata,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.event_id == other.event_id

    def __hash__(self) -> int:
        return hash(self.event_id)


EventType: TypeAlias = Event | type[Event]
Listener: TypeAlias = Callable[[Any], Any]


def resolve_event_key(event: EventType) -> str:
    """
    Turn an Event class or Event instance into its registry key.

    Both ``MyEvent`` and ``MyEvent(...)`` resolve to the same key, so
    listeners can be registered with whichever is at hand.

    Args:
        event: Event subclass or instance

    Returns:
        The class type key

    Raises:
        InvalidEventTypeError: If ``event`` is neither
    """
    match event:
        case type() if issubclass(event, Event):
            return event.type_key()
        case Event():
            return type(event).type_key()
        case _:
            raise InvalidEventTypeError(
                f"Expected an Event subclass or instance, got {event!r}", value=event
            )


__all__ = [
    "Event",
    "EventType",
    "Listener",
    "resolve_event_key",
]
