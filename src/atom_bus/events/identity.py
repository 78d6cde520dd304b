"""
Event identities and payload envelopes.

An Event is the (name, payload type) pair producers and rules agree on.
Payloads travel through the bus as EventPayload envelopes built by
Event.create_payload().
"""
import types
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union, get_origin

from .errors import PayloadTypeError

T = TypeVar("T")


def runtime_type(payload_type: Any) -> Any:
    """
    Resolve a type descriptor into something isinstance() accepts.

    Args:
        payload_type: A class, ``typing.Any``, ``None``, a parameterized
            generic such as ``list[int]`` or a union such as ``int | None``.

    Returns:
        The class (or union) to check payload values against.
    """
    if payload_type is Any:
        return object
    if payload_type is None:
        return type(None)
    origin = get_origin(payload_type)
    if origin is Union or origin is types.UnionType:
        return payload_type
    if isinstance(origin, type):
        return origin
    return payload_type


@dataclass(frozen=True)
class EventPayload(Generic[T]):
    """
    Envelope carried by the EventBus.

    Attributes:
        name: Name of the event this payload belongs to.
        value: The emitted value.
        payload_type: Type tag of the event that created the payload.
    """
    name: str
    value: T
    payload_type: Any = object


@dataclass(frozen=True)
class Event(Generic[T]):
    """
    Event blueprint for EventRule and producers.

    Usage:
        sign_in = Event("SignInEvent", bool)

        EventRule(sign_in, targets=[Immediate(on_sign_in)])

        emit(sign_in.create_payload(True))

    Two events with the same name share a channel on the bus; rules drop
    payloads whose value does not match their own payload type.
    """
    name: str
    payload_type: Any = object

    def __post_init__(self):
        try:
            isinstance(None, runtime_type(self.payload_type))
        except TypeError as e:
            raise TypeError(
                f"Event '{self.name}': unsupported payload type {self.payload_type!r}"
            ) from e

    def accepts(self, value: Any) -> bool:
        """Check whether a value is an instance of this event's payload type."""
        return isinstance(value, runtime_type(self.payload_type))

    def matches(self, payload: EventPayload) -> bool:
        """Check name and payload type of an envelope against this event."""
        return payload.name == self.name and self.accepts(payload.value)

    def create_payload(self, value: T) -> EventPayload[T]:
        """
        Create a payload instance for the event bus.

        Args:
            value: Value to deliver to the listeners.

        Returns:
            EventPayload ready for EventBus.emit()

        Raises:
            PayloadTypeError: If value is not an instance of payload_type
        """
        if not self.accepts(value):
            raise PayloadTypeError(
                f"Event '{self.name}' expects {self.payload_type!r}, "
                f"got {type(value).__name__}"
            )
        return EventPayload(self.name, value, self.payload_type)
