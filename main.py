import asyncio

from loguru import logger

from superevents import (
    BaseSystem,
    ConfigManager,
    EventRegistry,
    ServiceLocator,
    get_default_registry,
    setup_logging,
    subscribe_event,
)


# --- Demo Systems ---
class Hero:
    def __init__(self, name="Hero"):
        self.name = name
        self.events = get_default_registry()

    def take_damage(self, damage):
        health_left = self.events.first("hero.damage", damage=damage, sender=self)
        print(f"[Hero] I got {health_left} health left")


class HealthSystem(BaseSystem):
    depends_on = [EventRegistry]

    def __init__(self, locator=None, config=None):
        super().__init__(locator, config)
        self.max_health = 100
        self.heroes = {}

    async def initialize(self):
        await super().initialize()

    async def shutdown(self):
        await super().shutdown()

    @property
    def events(self) -> EventRegistry:
        return self.locator.get_system(EventRegistry)

    @subscribe_event("health.get")
    def get_health(self, sender):
        return self.heroes.setdefault(sender, self.max_health)

    @subscribe_event("hero.damage")
    async def take_damage(self, damage, sender):
        health_left = self.get_health(sender) - damage
        self.heroes[sender] = health_left
        if health_left <= 0:
            await self.events.emit_async("health.dead", sender=sender)
        await self.events.emit_async("health.damage", damage=damage, sender=sender, health_left=health_left)
        return health_left


class HealthBar(BaseSystem):
    depends_on = [EventRegistry]

    async def initialize(self):
        await super().initialize()

    async def shutdown(self):
        await super().shutdown()

    @subscribe_event("health.damage")
    async def show_damage(self, damage, sender, health_left):
        await asyncio.sleep(0)
        print(f"[UI] {sender.name} took {damage} damage, now has {health_left} health")


async def async_main():
    print("--- 1. Initialize Core ---")
    config = ConfigManager("settings.json")
    setup_logging(**config.data.logging.model_dump())
    locator = ServiceLocator(config)
    # Share the process-wide registry so Hero sees the same channels
    locator.register_instance(get_default_registry())
    locator.register_system(HealthSystem)
    locator.register_system(HealthBar)
    await locator.start_all()

    events = get_default_registry()
    hero = Hero()

    print("--- 2. Sync dispatch ---")
    try:
        hero.take_damage(10)
    except Exception as e:
        # Damage handling is async, so sync dispatch refuses it
        logger.warning(f"Sync dispatch failed (expected): {e}")

    print("--- 3. Async dispatch ---")
    print(await events.call_async("hero.damage", damage=15, sender=hero))
    print(f"Health: {events.first('health.get', hero)}")

    await locator.stop_all()


if __name__ == "__main__":
    asyncio.run(async_main())
