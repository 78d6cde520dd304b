"""
Event Listeners.

A closed set of listener variants, all driven through invoke():
- Immediate: calls its callback for every payload
- OneOff: calls its callback for the first payload only
- Debounced: calls its callback with the latest payload once no new payload
  arrived for `duration` seconds

Listeners are bound to exactly one EventRule, which supplies the event loop
used for debounce timers and coroutine callbacks.
"""
import asyncio
import inspect
import threading
from abc import ABC, abstractmethod
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, Optional, TypeVar, Union
from loguru import logger

from .errors import ListenerBoundError
from .faults import report_fault

if TYPE_CHECKING:
    from ..settings import BusSettings

T = TypeVar("T")

EventCallback = Callable[[T], Any]

DEFAULT_DEBOUNCE_SECONDS = 1.0


class ListenerKind(Enum):
    """Disposition policy of a listener."""
    IMMEDIATE = "immediate"
    ONE_OFF = "one_off"
    DEBOUNCED = "debounced"


class EventListener(ABC, Generic[T]):
    """
    Base for the listener variants.

    Do not subclass outside this module; use Immediate, OneOff or Debounced.
    """
    kind: ListenerKind

    def __init__(self, on_event: EventCallback):
        if not callable(on_event):
            raise TypeError("on_event must be callable")
        self._on_event = on_event
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._forward_faults = True
        self._bound = False

    @property
    def callback(self) -> EventCallback:
        return self._on_event

    @property
    def is_bound(self) -> bool:
        return self._bound

    def bind(self, loop: asyncio.AbstractEventLoop, settings: Optional['BusSettings'] = None) -> None:
        """
        Attach the listener to the loop of its owning EventRule.

        Raises:
            ListenerBoundError: If the listener already belongs to a rule
        """
        if self._bound:
            raise ListenerBoundError(f"{self!r} is already bound to an EventRule")
        self._loop = loop
        if settings is not None:
            self._forward_faults = settings.forward_faults_to_loop
        self._bound = True

    @abstractmethod
    def invoke(self, value: T) -> None:
        """Deliver a payload value according to the listener's policy."""

    def dispose(self) -> None:
        """Release resources held by the listener. Called by EventRule.cancel()."""

    def __call__(self, value: T) -> None:
        self.invoke(value)

    def __repr__(self) -> str:
        name = getattr(self._on_event, "__name__", repr(self._on_event))
        return f"{self.__class__.__name__}({name})"

    def _fire(self, value: T) -> None:
        """Run the callback, scheduling it if it returns an awaitable."""
        try:
            result = self._on_event(value)
        except Exception as e:
            self._report(e)
            return

        if inspect.isawaitable(result):
            self._schedule(result)

    def _schedule(self, awaitable: Awaitable) -> None:
        loop = self._loop or asyncio.get_running_loop()
        task = asyncio.ensure_future(awaitable, loop=loop)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._report(exc)

    def _report(self, exc: BaseException) -> None:
        report_fault(
            exc,
            f"Error in {self!r}",
            loop=self._loop,
            forward=self._forward_faults,
            listener=self,
        )


class Immediate(EventListener[T]):
    """
    Calls its callback for every delivered payload.

    Usage:
        EventRule(event, targets=[Immediate(lambda value: print(value))])
    """
    kind = ListenerKind.IMMEDIATE

    def invoke(self, value: T) -> None:
        self._fire(value)


class OneOff(EventListener[T]):
    """
    Calls its callback for the first delivered payload only.

    The fired flag is set before the callback runs, so delivery is
    at-most-once: a callback that raises on the first payload is not retried
    on later ones, unlike a listener that only counts successful calls.
    """
    kind = ListenerKind.ONE_OFF

    def __init__(self, on_event: EventCallback):
        super().__init__(on_event)
        self._fired = False
        self._lock = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    def invoke(self, value: T) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True
        self._fire(value)


class Debounced(EventListener[T]):
    """
    Delays its callback until payloads stop arriving.

    Every invoke() cancels the pending timer and arms a new one with the
    latest value. Intermediate values of a burst are dropped.

    Args:
        on_event: Callback receiving the last value of a burst
        duration: Quiet window in seconds (or timedelta). None uses the bus
            setting `default_debounce_seconds` (1 second unless configured).
    """
    kind = ListenerKind.DEBOUNCED

    def __init__(self, on_event: EventCallback, duration: Union[float, timedelta, None] = None):
        super().__init__(on_event)
        if isinstance(duration, timedelta):
            duration = duration.total_seconds()
        if duration is not None and duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")
        self._duration: Optional[float] = duration
        self._handle: Optional[asyncio.TimerHandle] = None
        self._disposed = False
        self._lock = threading.Lock()

    @property
    def duration(self) -> float:
        if self._duration is None:
            return DEFAULT_DEBOUNCE_SECONDS
        return self._duration

    @property
    def pending(self) -> bool:
        """True while a debounce timer is armed."""
        return self._handle is not None

    def bind(self, loop: asyncio.AbstractEventLoop, settings: Optional['BusSettings'] = None) -> None:
        super().bind(loop, settings)
        if self._duration is None and settings is not None:
            self._duration = settings.default_debounce_seconds

    def invoke(self, value: T) -> None:
        # Runs on the loop thread; call_later is not thread-safe
        loop = self._loop or asyncio.get_running_loop()
        with self._lock:
            if self._disposed:
                return
            if self._handle is not None:
                self._handle.cancel()
            self._handle = loop.call_later(self.duration, self._elapsed, value)

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            handle, self._handle = self._handle, None
        if handle is None:
            return
        self._cancel_handle(handle)
        logger.trace(f"{self!r}: pending timer canceled")

    def _elapsed(self, value: T) -> None:
        with self._lock:
            if self._disposed:
                return
            self._handle = None
        self._fire(value)

    def _cancel_handle(self, handle: asyncio.TimerHandle) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or not loop.is_running():
            handle.cancel()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            handle.cancel()
        else:
            loop.call_soon_threadsafe(handle.cancel)
