"""EmitEvent - notification raised whenever an observer emits an event."""

from .base import Event


class EmitEvent(Event[Event]):
    """
    Event executed when another event is emitted by an EventObserver.

    ``data`` holds the emitted event. Relay bindings listen on this type to
    forward events to bound observers.
    """

    @property
    def name(self) -> str:
        return "Event Invoked"

    @property
    def emitted(self) -> Event:
        """The event whose emission this notifies."""
        return self.data


__all__ = ["EmitEvent"]
