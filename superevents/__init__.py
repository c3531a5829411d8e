"""
SuperEvents - Publish/Subscribe Listener Registry

Named channels of listeners with sync-strict and async-tolerant dispatch,
result collection and first-result lookup.
"""

# Registry
from superevents.core.events import (
    EventRegistry,
    ListenerEntry,
    Signal,
    ABSENT,
    Immediate,
    Deferred,
    is_missing,
    SuperEventsError,
    AsyncListenerMisuseError,
    get_default_registry,
    set_default_registry,
    reset_default_registry,
)

# Systems
from superevents.core.base_system import BaseSystem
from superevents.core.locator import ServiceLocator
from superevents.core.decorators import subscribe_event
from superevents.core.config import (
    ConfigManager,
    AppConfig,
    EventsSettings,
    LoggingSettings,
)
from superevents.core.logging import setup_logging

__version__ = "1.0.0"

__all__ = [
    "EventRegistry",
    "ListenerEntry",
    "Signal",
    "ABSENT",
    "Immediate",
    "Deferred",
    "is_missing",
    "SuperEventsError",
    "AsyncListenerMisuseError",
    "get_default_registry",
    "set_default_registry",
    "reset_default_registry",
    "BaseSystem",
    "ServiceLocator",
    "subscribe_event",
    "ConfigManager",
    "AppConfig",
    "EventsSettings",
    "LoggingSettings",
    "setup_logging",
]
