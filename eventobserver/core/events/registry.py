"""
Listener Registry - ordered listener storage and dispatch.

Responsibilities:
- Keep, per type key, the listeners in call order
- Support once and prepend registrations
- Dispatch an event to a snapshot of the listeners for its key

Reentrancy:
- Listeners may add or remove listeners, or dispatch again, while a
  dispatch is running. A registration removed by an earlier listener in the
  same pass is skipped; listeners added during the pass are not called
  until the next dispatch.
- ``once`` registrations are removed before they are called, so a nested
  dispatch for the same key cannot call them a second time.
"""

from collections import defaultdict
from dataclasses import dataclass, field
import logging
from typing import Any

from .base import Event, Listener

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ListenerRegistration:
    """
    A single listener registration.

    Compared by identity so that registering the same callable twice yields
    two independent registrations. ``removed`` is set once the registration
    leaves the registry, which is how a dispatch in progress knows to skip it.
    """

    listener: Listener
    once: bool = False
    removed: bool = field(default=False, init=False)

    @property
    def listener_name(self) -> str:
        """Human-readable name for logging/debugging."""
        return getattr(self.listener, "__qualname__", repr(self.listener))


class ListenerRegistry:
    """
    Mapping from event type key to ordered listener registrations.

    Usage:
        registry = ListenerRegistry()
        registry.register(MyEvent.type_key(), on_my_event)
        registry.dispatch(MyEvent.type_key(), MyEvent("payload"))
    """

    def __init__(self, isolate_errors: bool = False):
        """
        Initialize ListenerRegistry.

        Args:
            isolate_errors: Log listener exceptions and continue with the next
                listener instead of propagating them
        """
        self._registrations: dict[str, list[ListenerRegistration]] = defaultdict(list)
        self.isolate_errors = isolate_errors

    def register(
        self,
        key: str,
        listener: Listener,
        *,
        once: bool = False,
        prepend: bool = False,
    ) -> None:
        """
        Register a listener for a type key.

        Args:
            key: Event type key
            listener: Callable invoked with the event instance
            once: Remove the registration the first time it fires
            prepend: Insert before every current registration for the key
        """
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {listener!r}")

        registration = ListenerRegistration(listener=listener, once=once)
        if prepend:
            self._registrations[key].insert(0, registration)
        else:
            self._registrations[key].append(registration)
        logger.debug(
            f"Registered {'once ' if once else ''}listener {registration.listener_name} "
            f"for '{key}'{' (prepended)' if prepend else ''}"
        )

    def unregister(self, key: str, listener: Listener) -> None:
        """
        Remove the first registration of a listener for a type key.

        Does nothing if the listener is not registered.
        """
        registrations = self._registrations.get(key)
        if not registrations:
            return

        for index, registration in enumerate(registrations):
            if registration.listener == listener:
                del registrations[index]
                registration.removed = True
                logger.debug(f"Unregistered listener {registration.listener_name} from '{key}'")
                break

        if not registrations:
            del self._registrations[key]

    def unregister_all(self, key: str | None = None) -> None:
        """
        Remove every registration for a key, or for all keys if key is None.
        """
        if key is None:
            removed = [r for registrations in self._registrations.values() for r in registrations]
            self._registrations.clear()
            logger.debug("Removed all listeners")
        else:
            removed = self._registrations.pop(key, None) or []
            if removed:
                logger.debug(f"Removed all listeners for '{key}'")

        for registration in removed:
            registration.removed = True

    def has(self, key: str, listener: Listener) -> bool:
        """Check if a listener is registered for a type key."""
        return any(r.listener == listener for r in self._registrations.get(key, ()))

    def listeners(self, key: str) -> list[Listener]:
        """Get the listeners for a type key in call order."""
        return [r.listener for r in self._registrations.get(key, ())]

    def listener_count(self, key: str) -> int:
        """Get number of registered listeners for a type key."""
        return len(self._registrations.get(key, ()))

    def event_keys(self) -> list[str]:
        """Get the type keys that currently have listeners."""
        return [key for key, registrations in self._registrations.items() if registrations]

    def dispatch(self, key: str, event: Event) -> bool:
        """
        Call every listener registered for a key with the event.

        Args:
            key: Event type key
            event: Event instance passed to each listener

        Returns:
            True if at least one listener was called
        """
        snapshot = list(self._registrations.get(key, ()))
        if not snapshot:
            logger.debug(f"No listeners registered for '{key}'")
            return False

        called = False
        for registration in snapshot:
            if not self._claim(key, registration):
                continue

            called = True
            try:
                registration.listener(event)
            except Exception:
                if not self.isolate_errors:
                    raise
                logger.error(
                    f"Listener {registration.listener_name} failed for '{key}' "
                    f"({event.event_id})",
                    exc_info=True,
                )

        return called

    def _claim(self, key: str, registration: ListenerRegistration) -> bool:
        """
        Check that a snapshotted registration may still run.

        Once registrations are removed here, before their listener runs.
        """
        if registration.removed:
            return False

        if registration.once:
            registration.removed = True
            registrations = self._registrations[key]
            registrations.remove(registration)
            if not registrations:
                del self._registrations[key]
        return True

    def get_stats(self) -> dict[str, Any]:
        """Get registry statistics for monitoring."""
        return {
            "total_event_types": len(self.event_keys()),
            "total_listeners": sum(len(r) for r in self._registrations.values()),
            "listeners_by_type": {
                key: len(registrations) for key, registrations in self._registrations.items()
            },
        }


__all__ = [
    "ListenerRegistration",
    "ListenerRegistry",
]
