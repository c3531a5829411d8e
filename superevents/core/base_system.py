from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional
from loguru import logger

from .decorators import iter_subscriptions

if TYPE_CHECKING:
    from .locator import ServiceLocator
    from .config import ConfigManager


class BaseSystem(ABC):
    """
    Abstract Base Class for long-lived services sharing a locator and config.

    Supports automatic listener registration via @subscribe_event:
        from superevents.core.decorators import subscribe_event

        class MyService(BaseSystem):
            @subscribe_event("order.placed")
            async def on_order(self, order):
                ...
    """
    def __init__(self, locator: Optional['ServiceLocator'] = None, config: Optional['ConfigManager'] = None):
        self.locator = locator
        self.config = config
        self._is_ready = False
        self._unbind: Optional[Callable[[], None]] = None

    @abstractmethod
    async def initialize(self):
        """
        Async initialization logic.
        Called by the ServiceLocator during startup.

        Registers methods decorated with @subscribe_event on the EventRegistry.
        """
        self._auto_subscribe_events()
        self._is_ready = True

    def _auto_subscribe_events(self) -> None:
        """Bind decorated methods into the locator's EventRegistry."""
        from .events import EventRegistry

        subscriptions: List = list(iter_subscriptions(self))
        if not subscriptions or isinstance(self, EventRegistry):
            return
        if self.locator is None:
            logger.warning(f"{self.__class__.__name__}: no locator, skipping auto-subscription")
            return

        try:
            registry = self.locator.get_system(EventRegistry)
        except KeyError:
            logger.warning(f"{self.__class__.__name__}: EventRegistry not available for auto-subscription")
            return

        self._unbind = registry.bind(self)
        for method, events, _ in subscriptions:
            logger.debug(f"{self.__class__.__name__}.{method.__name__} auto-subscribed to: {events}")

    @abstractmethod
    async def shutdown(self):
        """
        Cleanup logic. Removes auto-subscribed listeners.
        """
        if self._unbind is not None:
            self._unbind()
            self._unbind = None
        self._is_ready = False

    @property
    def is_ready(self) -> bool:
        return self._is_ready

    async def __aenter__(self):
        """Async context manager entry: Initialize system."""
        if not self._is_ready:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit: Shutdown system."""
        if self._is_ready:
            await self.shutdown()
