"""
Event Registry Errors.

Usage errors raised by dispatch. Exceptions thrown by listeners themselves
are never wrapped; they reach the caller as-is.
"""
from typing import Any, Callable, Optional


class SuperEventsError(Exception):
    """Base class for registry errors."""
    pass


class AsyncListenerMisuseError(SuperEventsError):
    """
    Raised when a sync-strict dispatch (emit/call/first) meets a listener
    that produces a deferred value.
    """

    def __init__(self, event: str, callback: Optional[Callable[..., Any]] = None, method: str = "call"):
        self.event = event
        self.callback = callback
        self.method = method
        name = getattr(callback, "__qualname__", repr(callback))
        super().__init__(
            f"{method}() cannot be used with async listener {name} on '{event}'. "
            f"Use {method}_async() instead."
        )
