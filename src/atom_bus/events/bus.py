"""
EventBus - process-wide broadcast channel.

Every payload emitted on the bus is handed to every live registration. The
bus keeps nothing: payloads emitted with no registrations are dropped and
late subscribers never see earlier emissions.
"""
import threading
from typing import Callable, List, Optional
from loguru import logger

from ..settings import BusSettings
from .identity import EventPayload

Sink = Callable[[EventPayload], None]


class BusRegistration:
    """
    Handle for one raw subscription to an EventBus.

    Returned by EventBus.listen(); cancel() detaches the sink. Idempotent.
    """

    def __init__(self, bus: 'EventBus', sink: Sink):
        self._bus = bus
        self._sink = sink
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Detach from the bus."""
        self._bus._detach(self)

    def _deliver(self, payload: EventPayload) -> None:
        if self._active:
            self._sink(payload)


class EventBus:
    """
    Broadcast channel for EventPayload envelopes.

    Usage:
        bus = EventBus()
        rule = EventRule(event, targets=[Immediate(handler)], bus=bus)
        bus.emit(event.create_payload(value))

    Most code uses the process-wide instance from get_bus(); tests and
    composition roots can construct their own and pass it to EventRule.
    """

    def __init__(self, settings: Optional[BusSettings] = None):
        self.settings = settings or BusSettings()
        self._registrations: List[BusRegistration] = []
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self.settings.name

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._registrations)

    def listen(self, sink: Sink) -> BusRegistration:
        """
        Subscribe a raw sink to every payload emitted on this bus.

        Args:
            sink: Callable receiving each EventPayload. Must not block.

        Returns:
            BusRegistration used to detach the sink
        """
        if not callable(sink):
            raise TypeError("sink must be callable")
        registration = BusRegistration(self, sink)
        with self._lock:
            self._registrations.append(registration)
            count = len(self._registrations)
        logger.debug(f"EventBus '{self.name}': registration added ({count} active)")
        return registration

    def emit(self, payload: EventPayload) -> None:
        """
        Broadcast a payload to all registrations.

        Args:
            payload: Envelope created by Event.create_payload()
        """
        if not isinstance(payload, EventPayload):
            raise TypeError(
                f"emit() expects an EventPayload, got {type(payload).__name__}; "
                "use Event.create_payload()"
            )

        with self._lock:
            registrations = tuple(self._registrations)

        if not registrations:
            logger.trace(f"EventBus '{self.name}': no registrations, dropped '{payload.name}'")
            return

        for registration in registrations:
            try:
                registration._deliver(payload)
            except Exception as e:
                logger.opt(exception=e).error(
                    f"EventBus '{self.name}': sink failed for '{payload.name}': {e}"
                )

    def _detach(self, registration: BusRegistration) -> None:
        with self._lock:
            if not registration._active:
                return
            registration._active = False
            self._registrations.remove(registration)
            count = len(self._registrations)
        logger.debug(f"EventBus '{self.name}': registration removed ({count} active)")

    def __repr__(self) -> str:
        return f"EventBus(name={self.name!r}, subscribers={self.subscriber_count})"


# Global access
_default_bus: Optional[EventBus] = None
_default_lock = threading.Lock()


def get_bus() -> EventBus:
    """Return the process-wide EventBus, creating it on first use."""
    global _default_bus
    if _default_bus is None:
        with _default_lock:
            if _default_bus is None:
                _default_bus = EventBus()
    return _default_bus


def set_bus(bus: Optional[EventBus]) -> Optional[EventBus]:
    """
    Replace the process-wide EventBus.

    Args:
        bus: New default bus, or None to create a fresh one lazily

    Returns:
        The previous default bus (may be None)
    """
    global _default_bus
    with _default_lock:
        previous, _default_bus = _default_bus, bus
    return previous


def emit(payload: EventPayload) -> None:
    """Emit a payload on the process-wide EventBus."""
    get_bus().emit(payload)
