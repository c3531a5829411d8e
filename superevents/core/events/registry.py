"""
EventRegistry - Listener Registry and Dispatch

Named channels hold listeners in registration order. Dispatch comes in
four flavours along two axes:

    fire-and-forget   collect-results
    emit()            call()            sync-strict, rejects async listeners
    emit_async()      call_async()      async-tolerant, awaits everything

Usage:
    events = EventRegistry()
    unsubscribe = events.on("hero.damage", on_damage)
    events.call("hero.damage", 10)          # -> [90]
    await events.call_async("hero.damage", 10)
    unsubscribe()
"""
import asyncio
import inspect
import threading
from contextlib import nullcontext
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING
from loguru import logger

from ..base_system import BaseSystem
from ..decorators import iter_subscriptions
from .errors import AsyncListenerMisuseError
from .outcome import ABSENT, classify, is_missing

if TYPE_CHECKING:
    from ..locator import ServiceLocator
    from ..config import ConfigManager

Listener = Callable[..., Any]
Unsubscribe = Callable[[], None]


def _is_async_callable(callback: Listener) -> bool:
    if inspect.iscoroutinefunction(callback):
        return True
    # Instances with an async __call__
    return inspect.iscoroutinefunction(getattr(type(callback), "__call__", None))


def _describe(callback: Listener) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)


class ListenerEntry:
    """A registered callback plus its once flag."""

    __slots__ = ("callback", "once", "is_async")

    def __init__(self, callback: Listener, once: bool = False):
        self.callback = callback
        self.once = once
        self.is_async = _is_async_callable(callback)

    def matches(self, callback: Listener) -> bool:
        if self.callback is callback:
            return True
        # Bound methods are rebuilt on every attribute access
        return inspect.ismethod(callback) and self.callback == callback

    def invoke(self, args: tuple, kwargs: dict):
        return classify(self.callback(*args, **kwargs))

    def __repr__(self) -> str:
        flag = ", once" if self.once else ""
        return f"ListenerEntry({_describe(self.callback)}{flag})"


def _position(listeners: List[ListenerEntry], entry: ListenerEntry, hint: int) -> Optional[int]:
    if hint < len(listeners) and listeners[hint] is entry:
        return hint
    for index, candidate in enumerate(listeners):
        if candidate is entry:
            return index
    return None


class EventRegistry(BaseSystem):
    """
    Registry of named event channels.

    No channel is ever stored empty: any mutation that drains a channel
    drops its key in the same operation.

    Listeners may re-enter the registry (on/off/emit) while being
    dispatched; they see the state as mutated so far.
    """

    def __init__(self, locator: Optional['ServiceLocator'] = None, config: Optional['ConfigManager'] = None,
                 threadsafe: Optional[bool] = None):
        super().__init__(locator, config)
        self._channels: Dict[str, List[ListenerEntry]] = {}

        settings = getattr(getattr(config, "data", None), "events", None)
        if threadsafe is None:
            threadsafe = bool(getattr(settings, "threadsafe", False))
        self._log_dispatch = bool(getattr(settings, "log_dispatch", False))
        self._lock = threading.RLock() if threadsafe else nullcontext()

    async def initialize(self):
        logger.info("EventRegistry initialized")
        await super().initialize()

    async def shutdown(self):
        self.clear()
        await super().shutdown()

    # --- Registration ---

    def on(self, event: str, callback: Listener) -> Unsubscribe:
        """
        Register a listener.

        Args:
            event: Event name
            callback: Sync or async callable

        Returns:
            Idempotent function removing exactly this registration
        """
        return self._add_listener(event, callback, once=False)

    def once(self, event: str, callback: Listener) -> Unsubscribe:
        """Register a listener removed after its first invocation."""
        return self._add_listener(event, callback, once=True)

    def off(self, event: str, callback: Listener) -> None:
        """
        Remove the first registration of ``callback`` on ``event``.
        Unknown events and callbacks are ignored.
        """
        with self._lock:
            listeners = self._channels.get(event)
            if not listeners:
                return
            for index, entry in enumerate(listeners):
                if entry.matches(callback):
                    del listeners[index]
                    logger.debug(f"Removed listener {_describe(callback)} from '{event}'")
                    break
            self._prune(event)

    def clear(self) -> None:
        """Remove every channel and listener."""
        with self._lock:
            self._channels.clear()
        logger.debug("EventRegistry cleared")

    def bind(self, obj: Any) -> Unsubscribe:
        """
        Register every @subscribe_event method of ``obj``.

        Returns:
            Function removing all registrations made by this call
        """
        removers = []
        for method, events, once in iter_subscriptions(obj):
            for event in events:
                removers.append(self._add_listener(event, method, once=once))

        def unbind() -> None:
            for remove in removers:
                remove()
        return unbind

    def _add_listener(self, event: str, callback: Listener, once: bool) -> Unsubscribe:
        if not callable(callback):
            raise TypeError(f"Listener for '{event}' must be callable, got {callback!r}")
        entry = ListenerEntry(callback, once)
        with self._lock:
            self._channels.setdefault(event, []).append(entry)
        logger.debug(f"Registered {entry!r} on '{event}'")

        removed = False

        def unsubscribe() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            self._remove_entry(event, entry)
        return unsubscribe

    def _remove_entry(self, event: str, entry: ListenerEntry) -> None:
        with self._lock:
            listeners = self._channels.get(event)
            if not listeners:
                return
            position = _position(listeners, entry, 0)
            if position is not None:
                del listeners[position]
                logger.debug(f"Unsubscribed {entry!r} from '{event}'")
            self._prune(event)

    def _prune(self, event: str) -> None:
        if event in self._channels and not self._channels[event]:
            del self._channels[event]

    # --- Introspection ---

    def listener_count(self, event: str) -> int:
        with self._lock:
            return len(self._channels.get(event, ()))

    def has_listeners(self, event: str, callback: Optional[Listener] = None) -> bool:
        """True if ``event`` has listeners (or, given ``callback``, has that one)."""
        with self._lock:
            listeners = self._channels.get(event, ())
            if callback is None:
                return bool(listeners)
            return any(entry.matches(callback) for entry in listeners)

    def event_names(self) -> List[str]:
        with self._lock:
            return list(self._channels)

    def __contains__(self, event: str) -> bool:
        return self.has_listeners(event)

    def __len__(self) -> int:
        return len(self._channels)

    # --- Dispatch ---

    def emit(self, event: str, *args, **kwargs) -> None:
        """
        Invoke every listener synchronously, discarding results.

        Raises:
            AsyncListenerMisuseError: a listener is async; use emit_async()
        """
        self._invoke_all(event, args, kwargs, strict=True, method="emit")

    def call(self, event: str, *args, **kwargs) -> List[Any]:
        """
        Invoke every listener synchronously and collect return values.

        Returns:
            Results in registration order (always a list, even for one listener)

        Raises:
            AsyncListenerMisuseError: a listener is async; use call_async()
        """
        outcomes = self._invoke_all(event, args, kwargs, strict=True, method="call")
        return [outcome.value for outcome in outcomes]

    async def emit_async(self, event: str, *args, **kwargs) -> None:
        """Invoke every listener and wait until all of them have settled."""
        await self.call_async(event, *args, **kwargs)

    async def call_async(self, event: str, *args, **kwargs) -> List[Any]:
        """
        Invoke every listener, then await all results together.

        Sync return values are treated like already-settled ones. The first
        failing listener fails the whole call; the rest are not cancelled and
        their own failures are logged.

        Returns:
            Settled results in registration order
        """
        outcomes = self._invoke_all(event, args, kwargs, strict=False, method="call")
        if not outcomes:
            return []
        tasks = [asyncio.ensure_future(outcome.settle()) for outcome in outcomes]
        for task in tasks:
            task.add_done_callback(_retrieve_failure)
        return list(await asyncio.gather(*tasks))

    def first(self, event: str, *args, **kwargs) -> Any:
        """
        Return the first result that is neither None nor ABSENT.

        Returns:
            That result, or ABSENT if there is none
        """
        return _first_present(self.call(event, *args, **kwargs))

    async def first_async(self, event: str, *args, **kwargs) -> Any:
        """
        Async counterpart of first().

        With exactly one listener its result is returned as-is, even None.
        """
        results = await self.call_async(event, *args, **kwargs)
        if len(results) == 1:
            return results[0]
        return _first_present(results)

    def _invoke_all(self, event: str, args: tuple, kwargs: dict, strict: bool, method: str) -> list:
        """
        Call each listener of ``event`` in order and return their outcomes.

        Once-listeners are spliced out right after they run and listeners may
        mutate the channel, so the next index is the first entry not yet
        visited instead of a simple increment.
        """
        with self._lock:
            listeners = self._channels.get(event)
            if not listeners:
                if self._log_dispatch:
                    logger.debug(f"Dispatching '{event}' with no listeners")
                return []
            if self._log_dispatch:
                logger.debug(f"Dispatching '{event}' to {len(listeners)} listener(s) via {method}")

            outcomes = []
            visited = set()
            index = 0
            try:
                while index < len(listeners):
                    entry = listeners[index]
                    if strict and entry.is_async:
                        raise self._misuse(event, entry.callback, method)

                    outcome = entry.invoke(args, kwargs)
                    if strict and outcome.deferred:
                        outcome.discard()
                        raise self._misuse(event, entry.callback, method)
                    outcomes.append(outcome)

                    visited.add(entry)

                    position = _position(listeners, entry, index)
                    if position is None:
                        # The listener removed itself, maybe earlier entries too
                        index = _next_unvisited(listeners, visited, 0)
                    elif entry.once:
                        del listeners[position]
                        index = _next_unvisited(listeners, visited, position)
                    else:
                        index = _next_unvisited(listeners, visited, position + 1)
            except BaseException:
                for outcome in outcomes:
                    outcome.discard()
                raise
            finally:
                self._prune(event)
            return outcomes

    @staticmethod
    def _misuse(event: str, callback: Listener, method: str) -> AsyncListenerMisuseError:
        logger.warning(f"{method}('{event}') hit async listener {_describe(callback)}")
        return AsyncListenerMisuseError(event, callback, method)


def _next_unvisited(listeners: List[ListenerEntry], visited: set, start: int) -> int:
    for index in range(start, len(listeners)):
        if listeners[index] not in visited:
            return index
    return len(listeners)


def _retrieve_failure(task: asyncio.Future) -> None:
    # Marks sibling failures as retrieved; gather only re-raises the first
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Listener failed during async dispatch: {task.exception()!r}")


def _first_present(results: List[Any]) -> Any:
    for result in results:
        if not is_missing(result):
            return result
    return ABSENT


# Process-wide default registry (optional use)
_default_registry: Optional[EventRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> EventRegistry:
    """Return the process-wide EventRegistry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = EventRegistry()
    return _default_registry


def set_default_registry(registry: Optional[EventRegistry]) -> None:
    """Install ``registry`` as the process-wide default (None resets it)."""
    global _default_registry
    with _default_lock:
        _default_registry = registry


def reset_default_registry() -> None:
    """Drop the process-wide registry; the next access builds a fresh one."""
    set_default_registry(None)
