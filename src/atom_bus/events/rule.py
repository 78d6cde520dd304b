"""
EventRule - subscription binding an Event to its listeners.
"""
import asyncio
import threading
from enum import Enum
from typing import Generic, Iterable, Optional, Tuple, TypeVar
from loguru import logger

from .bus import EventBus, get_bus
from .errors import ListenerBoundError, NoEventLoopError
from .faults import report_fault
from .identity import Event, EventPayload
from .listeners import EventListener

T = TypeVar("T")


class RuleState(Enum):
    """EventRule lifecycle states."""
    ACTIVE = "active"
    CANCELED = "canceled"


class EventRule(Generic[T]):
    """
    Subscriber of an EventBus.

    Listens to payloads of one Event and calls its listeners, in order, on
    the event loop the rule was created on.

    Usage:
        rule = EventRule(sign_in, targets=[
            Immediate(on_sign_in),
            Debounced(save_state, duration=0.5),
        ])
        ...
        rule.cancel()  # release the registration and pending timers

    A rule can also be used as a (async) context manager that cancels on exit.
    """

    def __init__(
        self,
        event: Event[T],
        targets: Iterable[EventListener[T]],
        *,
        bus: Optional[EventBus] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        if not isinstance(event, Event):
            raise TypeError(f"event must be an Event, got {type(event).__name__}")

        targets = tuple(targets)
        for target in targets:
            if not isinstance(target, EventListener):
                raise TypeError(f"targets must be EventListener instances, got {target!r}")
            if target.is_bound or targets.count(target) > 1:
                raise ListenerBoundError(f"{target!r} is already bound to an EventRule")

        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise NoEventLoopError(
                    f"EventRule('{event.name}') needs a running event loop or an explicit loop"
                ) from e

        self.event = event
        self._targets: Tuple[EventListener[T], ...] = targets
        self._bus = bus or get_bus()
        self._loop = loop
        self._state = RuleState.ACTIVE
        self._lock = threading.Lock()

        for target in self._targets:
            target.bind(loop, self._bus.settings)

        self._registration = self._bus.listen(self._on_payload)
        logger.debug(f"EventRule '{event.name}': subscribed with {len(targets)} listener(s)")

    @property
    def targets(self) -> Tuple[EventListener[T], ...]:
        return self._targets

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def state(self) -> RuleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is RuleState.ACTIVE

    def cancel(self) -> None:
        """
        Cancel the subscription.

        Detaches from the bus and cancels pending debounce timers. Safe to
        call more than once.
        """
        with self._lock:
            if self._state is RuleState.CANCELED:
                return
            self._state = RuleState.CANCELED

        self._registration.cancel()
        for target in self._targets:
            target.dispose()
        logger.debug(f"EventRule '{self.event.name}': canceled")

    def _on_payload(self, payload: EventPayload) -> None:
        # Called on the emitting thread
        if not self.is_active or payload.name != self.event.name:
            return
        if not self.event.accepts(payload.value):
            logger.trace(
                f"EventRule '{self.event.name}': dropped {type(payload.value).__name__} payload "
                f"(expects {self.event.payload_type!r})"
            )
            return

        try:
            self._loop.call_soon_threadsafe(self._dispatch, payload)
        except RuntimeError:
            logger.warning(f"EventRule '{self.event.name}': event loop is closed, canceling rule")
            self.cancel()

    def _dispatch(self, payload: EventPayload) -> None:
        for target in self._targets:
            if not self.is_active:
                return
            try:
                target.invoke(payload.value)
            except Exception as e:
                report_fault(
                    e,
                    f"EventRule '{self.event.name}': {target!r} failed",
                    loop=self._loop,
                    forward=self._bus.settings.forward_faults_to_loop,
                    rule=self,
                )

    def __enter__(self) -> 'EventRule[T]':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cancel()

    async def __aenter__(self) -> 'EventRule[T]':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.cancel()

    def __repr__(self) -> str:
        return (
            f"EventRule(event={self.event.name!r}, targets={len(self._targets)}, "
            f"state={self._state.value})"
        )
