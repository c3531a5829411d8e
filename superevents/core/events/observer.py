from typing import Any, Callable, Dict, List, Optional
from loguru import logger

from .registry import EventRegistry


class Signal:
    """
    A single named channel with observer-style connect/disconnect.
    Equivalent to Qt's Signal or C#'s event.

    Without an explicit registry the signal owns a private one; pass a
    shared EventRegistry to expose the channel to plain on()/emit() callers.
    """
    def __init__(self, name: str = "Signal", registry: Optional[EventRegistry] = None):
        self.name = name
        self.registry = registry if registry is not None else EventRegistry()
        self._connections: Dict[Callable, Callable[[], None]] = {}

    def connect(self, callback: Callable) -> Callable[[], None]:
        """Connect a callback; connecting the same callback twice is a no-op."""
        if self.is_connected(callback):
            logger.debug(f"Signal '{self.name}': {callback!r} already connected")
            existing = self._connections.get(callback)
            if existing is not None:
                return existing
            return self._guarded_off(callback)
        unsubscribe = self.registry.on(self.name, callback)
        self._connections[callback] = unsubscribe
        return unsubscribe

    def _guarded_off(self, callback: Callable) -> Callable[[], None]:
        removed = False

        def disconnect() -> None:
            nonlocal removed
            if not removed:
                removed = True
                self.registry.off(self.name, callback)
        return disconnect

    def connect_once(self, callback: Callable) -> Callable[[], None]:
        """Connect a callback for the next emission only."""
        return self.registry.once(self.name, callback)

    def disconnect(self, callback: Callable):
        """Disconnect a callback function from this signal."""
        unsubscribe = self._connections.pop(callback, None)
        if unsubscribe is not None:
            unsubscribe()
        else:
            self.registry.off(self.name, callback)

    def is_connected(self, callback: Callable) -> bool:
        return self.registry.has_listeners(self.name, callback)

    def emit(self, *args, **kwargs) -> None:
        """Broadcast arguments to all subscribers synchronously."""
        self.registry.emit(self.name, *args, **kwargs)

    async def emit_async(self, *args, **kwargs) -> None:
        await self.registry.emit_async(self.name, *args, **kwargs)

    def call(self, *args, **kwargs) -> List[Any]:
        return self.registry.call(self.name, *args, **kwargs)

    async def call_async(self, *args, **kwargs) -> List[Any]:
        return await self.registry.call_async(self.name, *args, **kwargs)

    def first(self, *args, **kwargs) -> Any:
        return self.registry.first(self.name, *args, **kwargs)

    async def first_async(self, *args, **kwargs) -> Any:
        return await self.registry.first_async(self.name, *args, **kwargs)

    def __len__(self) -> int:
        return self.registry.listener_count(self.name)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, listeners={len(self)})"
