"""Custom exceptions for EventObserver."""


class EventObserverError(Exception):
    """Base exception for all EventObserver errors."""


class ConfigurationError(EventObserverError):
    """Raised when configuration is invalid."""


class InvalidEventTypeError(EventObserverError, TypeError):
    """Raised when a value is neither an Event subclass nor an Event instance."""

    def __init__(self, message: str, value: object = None) -> None:
        super().__init__(message)
        self.value = value


class BindingError(EventObserverError, ValueError):
    """Raised when two observers cannot be bound."""
