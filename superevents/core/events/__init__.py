"""
Event System - Listener Registry and Dispatch.

Provides:
- EventRegistry: named channels with sync-strict and async-tolerant dispatch
- Signal: a single channel with observer-style connect/disconnect
- ABSENT: "no result" marker returned by first()/first_async()

Usage:
    from superevents.core.events import EventRegistry

    events = EventRegistry()
    events.on("order.placed", on_order)
    totals = events.call("order.placed", order)
    await events.emit_async("order.placed", order)
"""
from .errors import SuperEventsError, AsyncListenerMisuseError
from .outcome import ABSENT, Immediate, Deferred, is_missing
from .registry import (
    EventRegistry,
    ListenerEntry,
    get_default_registry,
    set_default_registry,
    reset_default_registry,
)
from .observer import Signal


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
]
