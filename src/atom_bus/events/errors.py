"""
Event Bus Errors.
"""


class EventBusError(Exception):
    """Base class for event bus errors."""
    pass


class PayloadTypeError(EventBusError, TypeError):
    """Raised when a payload value does not match the event's payload type."""
    pass


class NoEventLoopError(EventBusError, RuntimeError):
    """Raised when an EventRule is created without an event loop to dispatch on."""
    pass


class ListenerBoundError(EventBusError, ValueError):
    """Raised when a listener is handed to a second EventRule."""
    pass
