"""
Listener invocation outcomes.

A listener call produces either an ``Immediate`` value or a ``Deferred``
awaitable. Sync-strict dispatch only accepts the former; async-tolerant
dispatch settles both the same way.
"""
import asyncio
import inspect
from typing import Any, Awaitable


class _Absent:
    """Marker for "no result", distinct from any listener return value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


def is_missing(value: Any) -> bool:
    """True for ``None`` and ``ABSENT``."""
    return value is None or value is ABSENT


class Immediate:
    """A value returned synchronously by a listener."""

    __slots__ = ("value",)
    deferred = False

    def __init__(self, value: Any):
        self.value = value

    async def settle(self) -> Any:
        return self.value

    def discard(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"Immediate({self.value!r})"


class Deferred:
    """An awaitable returned by a listener, settled later."""

    __slots__ = ("awaitable",)
    deferred = True

    def __init__(self, awaitable: Awaitable[Any]):
        self.awaitable = awaitable

    async def settle(self) -> Any:
        return await self.awaitable

    def discard(self) -> None:
        """Drop the awaitable without running it to completion."""
        if inspect.iscoroutine(self.awaitable):
            self.awaitable.close()
        elif isinstance(self.awaitable, asyncio.Future):
            self.awaitable.cancel()

    def __repr__(self) -> str:
        return f"Deferred({self.awaitable!r})"


def classify(result: Any):
    """Wrap a listener's return value in the matching outcome."""
    if inspect.isawaitable(result):
        return Deferred(result)
    return Immediate(result)
