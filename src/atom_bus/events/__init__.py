"""
Event System - typed in-process pub/sub.

Provides:
- Event / EventPayload: event identity and the envelope it creates
- Immediate / OneOff / Debounced: listener disposition policies
- EventBus: process-wide broadcast channel (get_bus(), emit())
- EventRule: subscription binding an Event to its listeners

Usage:
    from src.atom_bus.events import Event, EventRule, Immediate, emit

    counter = Event("counter", int)
    rule = EventRule(counter, targets=[Immediate(print)])

    emit(counter.create_payload(1))  # prints 1 on the rule's event loop

    rule.cancel()
"""
from .errors import EventBusError, PayloadTypeError, NoEventLoopError, ListenerBoundError
from .identity import Event, EventPayload
from .listeners import (
    EventListener,
    ListenerKind,
    Immediate,
    OneOff,
    Debounced,
    DEFAULT_DEBOUNCE_SECONDS,
)
from .bus import EventBus, BusRegistration, get_bus, set_bus, emit
from .rule import EventRule, RuleState


__all__ = [
    "Event",
    "EventPayload",
    "EventListener",
    "ListenerKind",
    "Immediate",
    "OneOff",
    "Debounced",
    "DEFAULT_DEBOUNCE_SECONDS",
    "EventBus",
    "BusRegistration",
    "get_bus",
    "set_bus",
    "emit",
    "EventRule",
    "RuleState",
    "EventBusError",
    "PayloadTypeError",
    "NoEventLoopError",
    "ListenerBoundError",
]
