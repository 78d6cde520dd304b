"""
Atom Event Bus - Core.

Provides:
- Event system: Event, EventRule, listeners and the process-wide EventBus
- ConfigManager: bus/logging configuration with persistence
- setup_logging: Loguru configuration

Usage:
    from src.atom_bus import Event, EventRule, Immediate, emit
"""
from .settings import AppConfig, BusSettings, LoggingSettings
from .events import (
    Event,
    EventPayload,
    EventListener,
    ListenerKind,
    Immediate,
    OneOff,
    Debounced,
    EventBus,
    BusRegistration,
    get_bus,
    set_bus,
    emit,
    EventRule,
    RuleState,
    EventBusError,
    PayloadTypeError,
    NoEventLoopError,
    ListenerBoundError,
)
from .config import ConfigManager, ConfigChange, CONFIG_CHANGED
from .logging import setup_logging

__all__ = [
    # Events
    "Event",
    "EventPayload",
    "EventListener",
    "ListenerKind",
    "Immediate",
    "OneOff",
    "Debounced",
    "EventBus",
    "BusRegistration",
    "get_bus",
    "set_bus",
    "emit",
    "EventRule",
    "RuleState",

    # Errors
    "EventBusError",
    "PayloadTypeError",
    "NoEventLoopError",
    "ListenerBoundError",

    # Configuration
    "AppConfig",
    "BusSettings",
    "LoggingSettings",
    "ConfigManager",
    "ConfigChange",
    "CONFIG_CHANGED",

    # Logging
    "setup_logging",
]
