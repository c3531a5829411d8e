"""
ServiceLocator / BaseSystem Tests

Covers dependency-ordered startup and @subscribe_event auto-registration.
"""
import asyncio
import pytest
from unittest.mock import MagicMock

from superevents.core.base_system import BaseSystem
from superevents.core.decorators import subscribe_event
from superevents.core.events import EventRegistry
from superevents.core.locator import ServiceLocator


class Inventory(BaseSystem):
    depends_on = [EventRegistry]

    def __init__(self, locator=None, config=None):
        super().__init__(locator, config)
        self.items = []

    async def initialize(self):
        await super().initialize()

    async def shutdown(self):
        await super().shutdown()

    @subscribe_event("item.added")
    def on_item_added(self, item):
        self.items.append(item)
        return len(self.items)

    @subscribe_event("item.count", "inventory.size")
    def count(self):
        return len(self.items)

    @subscribe_event("inventory.opened", once=True)
    async def on_opened(self):
        return "opened"


class Broken(BaseSystem):
    async def initialize(self):
        raise RuntimeError("cannot start")

    async def shutdown(self):
        await super().shutdown()


@pytest.fixture
def locator():
    return ServiceLocator()


class TestLocator:

    def test_register_and_get(self, locator):
        registry = locator.register_system(EventRegistry)

        assert locator.get_system(EventRegistry) is registry
        assert locator.register_system(EventRegistry) is registry
        assert registry.locator is locator

    def test_get_missing_system(self, locator):
        with pytest.raises(KeyError):
            locator.get_system(EventRegistry)

    def test_register_instance(self, locator):
        registry = EventRegistry()

        locator.register_instance(registry)

        assert locator.get_system(EventRegistry) is registry
        assert registry.locator is locator

    def test_dependency_order(self, locator):
        inventory = locator.register_system(Inventory)
        registry = locator.register_system(EventRegistry)

        assert locator._topological_sort() == [registry, inventory]

    @pytest.mark.asyncio
    async def test_start_failure_does_not_stop_others(self, locator):
        locator.register_system(Broken)
        registry = locator.register_system(EventRegistry)

        await locator.start_all()

        assert registry.is_ready
        assert not locator.get_system(Broken).is_ready


class TestAutoSubscription:

    @pytest.mark.asyncio
    async def test_decorated_methods_are_registered(self, locator):
        registry = locator.register_system(EventRegistry)
        inventory = locator.register_system(Inventory)

        await locator.start_all()

        assert registry.call("item.added", "sword") == [1]
        assert registry.call("inventory.size") == [1]
        assert inventory.items == ["sword"]
        assert await registry.call_async("inventory.opened") == ["opened"]
        assert "inventory.opened" not in registry

    @pytest.mark.asyncio
    async def test_shutdown_removes_listeners(self, locator):
        registry = locator.register_system(EventRegistry)
        inventory = locator.register_system(Inventory)
        await inventory.initialize()

        await inventory.shutdown()

        assert registry.call("item.added", "sword") == []
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_missing_registry_is_tolerated(self, locator, log_messages):
        inventory = locator.register_system(Inventory)

        await inventory.initialize()

        assert inventory.is_ready
        assert any("EventRegistry not available" in m for m in log_messages)

    def test_bind_plain_object(self, registry):
        class Listener:
            @subscribe_event("ping")
            def pong(self, value):
                return value

        unbind = registry.bind(Listener())

        assert registry.call("ping", 1) == [1]
        unbind()
        assert "ping" not in registry

    def test_subscribe_event_requires_names(self):
        with pytest.raises(ValueError):
            subscribe_event()

    def test_stop_all_clears_registry(self, locator):
        registry = locator.register_system(EventRegistry)
        registry.on("test", MagicMock())

        asyncio.run(locator.stop_all())

        assert len(registry) == 0
