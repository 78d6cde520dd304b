import pytest
from loguru import logger

from src.atom_bus.events import EventBus, set_bus
from src.atom_bus.settings import BusSettings


@pytest.fixture
def bus():
    """Isolated EventBus installed as the process default for one test."""
    bus = EventBus(BusSettings(name="test"))
    previous = set_bus(bus)
    yield bus
    set_bus(previous)


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    logger.remove(handler_id)
