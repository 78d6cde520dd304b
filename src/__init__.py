"""
Atom Event Bus - typed in-process publish/subscribe.

A process-wide broadcast channel delivering typed payloads to listeners with
three disposition policies: immediate, one-off and debounced.
"""

from src.atom_bus import (
    Event,
    EventPayload,
    EventListener,
    Immediate,
    OneOff,
    Debounced,
    EventBus,
    get_bus,
    set_bus,
    emit,
    EventRule,
    RuleState,
    ConfigManager,
    AppConfig,
    BusSettings,
    LoggingSettings,
    setup_logging,
)

__version__ = "0.1.0"

__all__ = [
    "Event",
    "EventPayload",
    "EventListener",
    "Immediate",
    "OneOff",
    "Debounced",
    "EventBus",
    "get_bus",
    "set_bus",
    "emit",
    "EventRule",
    "RuleState",
    "ConfigManager",
    "AppConfig",
    "BusSettings",
    "LoggingSettings",
    "setup_logging",
]
