"""
Listener variants - Unit Tests

Listeners are exercised directly here; delivery through the bus is covered
in test_event_rule.py.
"""
import asyncio
import threading
from datetime import timedelta
import pytest

from src.atom_bus.events import (
    Immediate,
    OneOff,
    Debounced,
    ListenerKind,
    ListenerBoundError,
    DEFAULT_DEBOUNCE_SECONDS,
)
from src.atom_bus.settings import BusSettings


async def wait(ms: int):
    await asyncio.sleep(ms / 1000)


class TestListenerBase:
    """Shared listener behaviour."""

    def test_callback_must_be_callable(self):
        with pytest.raises(TypeError):
            Immediate(None)

    def test_kinds(self):
        assert Immediate(print).kind is ListenerKind.IMMEDIATE
        assert OneOff(print).kind is ListenerKind.ONE_OFF
        assert Debounced(print).kind is ListenerKind.DEBOUNCED

    def test_listener_is_callable(self):
        received = []
        listener = Immediate(received.append)

        listener(5)

        assert received == [5]

    @pytest.mark.asyncio
    async def test_bind_twice_raises(self):
        listener = Immediate(print)
        loop = asyncio.get_running_loop()

        listener.bind(loop)
        assert listener.is_bound

        with pytest.raises(ListenerBoundError):
            listener.bind(loop)

    @pytest.mark.asyncio
    async def test_callback_error_is_reported_not_raised(self, log_records):
        faults = []
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda l, context: faults.append(context))

        def broken(value):
            raise ValueError("bad value")

        listener = Immediate(broken)
        listener.bind(loop)

        listener.invoke(1)  # must not raise

        assert len(faults) == 1
        assert isinstance(faults[0]["exception"], ValueError)
        assert faults[0]["listener"] is listener
        assert any(r["level"].name == "ERROR" for r in log_records)

    @pytest.mark.asyncio
    async def test_fault_forwarding_can_be_disabled(self, log_records):
        faults = []
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda l, context: faults.append(context))

        def broken(value):
            raise ValueError("bad value")

        listener = Immediate(broken)
        listener.bind(loop, BusSettings(forward_faults_to_loop=False))

        listener.invoke(1)

        assert faults == []
        assert any("bad value" in r["message"] for r in log_records)

    @pytest.mark.asyncio
    async def test_coroutine_callback_is_scheduled(self):
        received = []

        async def handler(value):
            received.append(value)

        listener = Immediate(handler)
        listener.bind(asyncio.get_running_loop())

        listener.invoke("async")
        await wait(5)

        assert received == ["async"]

    @pytest.mark.asyncio
    async def test_coroutine_callback_error_is_reported(self):
        faults = []
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda l, context: faults.append(context))

        async def handler(value):
            raise RuntimeError("async failure")

        listener = Immediate(handler)
        listener.bind(loop)

        listener.invoke(1)
        await wait(5)

        assert len(faults) == 1
        assert isinstance(faults[0]["exception"], RuntimeError)


class TestImmediate:

    def test_fires_every_time(self):
        received = []
        listener = Immediate(received.append)

        for value in (1, 2, 3):
            listener.invoke(value)

        assert received == [1, 2, 3]


class TestOneOff:

    def test_fires_only_once(self):
        received = []
        listener = OneOff(received.append)

        assert not listener.fired
        for value in (1, 2, 3):
            listener.invoke(value)

        assert received == [1]
        assert listener.fired

    def test_failing_callback_is_not_retried(self, log_records):
        calls = []

        def broken(value):
            calls.append(value)
            raise ValueError("first call fails")

        listener = OneOff(broken)
        listener.invoke(1)
        listener.invoke(2)

        assert calls == [1]

    def test_concurrent_invocations_fire_once(self):
        received = []
        listener = OneOff(received.append)
        barrier = threading.Barrier(8)

        def worker(value):
            barrier.wait()
            for _ in range(50):
                listener.invoke(value)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(received) == 1


class TestDebounced:

    def test_default_duration(self):
        assert Debounced(print).duration == DEFAULT_DEBOUNCE_SECONDS == 1.0

    def test_timedelta_duration(self):
        assert Debounced(print, duration=timedelta(milliseconds=250)).duration == 0.25

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            Debounced(print, duration=-1)

    @pytest.mark.asyncio
    async def test_default_duration_from_bus_settings(self):
        listener = Debounced(print)
        listener.bind(asyncio.get_running_loop(), BusSettings(default_debounce_seconds=0.3))

        assert listener.duration == 0.3

    @pytest.mark.asyncio
    async def test_explicit_duration_wins_over_settings(self):
        listener = Debounced(print, duration=0.05)
        listener.bind(asyncio.get_running_loop(), BusSettings(default_debounce_seconds=0.3))

        assert listener.duration == 0.05

    @pytest.mark.asyncio
    async def test_burst_delivers_last_value(self):
        received = []
        listener = Debounced(received.append, duration=0.02)
        listener.bind(asyncio.get_running_loop())

        listener.invoke(1)
        listener.invoke(2)
        listener.invoke(3)
        assert listener.pending
        assert received == []

        await wait(60)

        assert received == [3]
        assert not listener.pending

    @pytest.mark.asyncio
    async def test_dispose_cancels_pending_timer(self):
        received = []
        listener = Debounced(received.append, duration=0.02)
        listener.bind(asyncio.get_running_loop())

        listener.invoke(1)
        listener.dispose()
        await wait(60)

        assert received == []
        assert not listener.pending

    @pytest.mark.asyncio
    async def test_invoke_after_dispose_is_ignored(self):
        received = []
        listener = Debounced(received.append, duration=0.01)
        listener.bind(asyncio.get_running_loop())

        listener.dispose()
        listener.invoke(1)
        await wait(40)

        assert received == []
        assert not listener.pending
