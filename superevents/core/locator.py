from typing import Dict, Optional, Type, TypeVar
from loguru import logger

from .config import ConfigManager
from .base_system import BaseSystem

T = TypeVar('T', bound=BaseSystem)


class ServiceLocator:
    """
    Registry of application services (Systems).
    Manages initialization and shutdown order.

    Construct one per application (or per test); nothing here is global.
    """

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config
        self._systems: Dict[Type[BaseSystem], BaseSystem] = {}

    def register_system(self, system_cls: Type[T]) -> T:
        """
        Instantiates and registers a system.
        """
        if system_cls in self._systems:
            return self._systems[system_cls]

        logger.debug(f"Registering system: {system_cls.__name__}")
        instance = system_cls(self, self.config)
        self._systems[system_cls] = instance
        return instance

    def register_instance(self, system: BaseSystem) -> BaseSystem:
        """
        Registers an already constructed system under its own class.
        """
        system.locator = self
        if system.config is None:
            system.config = self.config
        self._systems[type(system)] = system
        return system

    def get_system(self, system_cls: Type[T]) -> T:
        """
        Retrieves a registered system.
        """
        if system_cls not in self._systems:
            raise KeyError(f"System {system_cls.__name__} not registered.")
        return self._systems[system_cls]

    async def start_all(self):
        """
        Initialize all registered systems in dependency order.

        Systems can declare dependencies using `depends_on` class attribute:
            class Audit(BaseSystem):
                depends_on = [EventRegistry]
        """
        logger.info("Starting all systems...")

        for system in self._topological_sort():
            try:
                await system.initialize()
                logger.info(f"System {system.__class__.__name__} started.")
            except Exception as e:
                logger.error(f"Failed to start system {system.__class__.__name__}: {e}")

    def _topological_sort(self) -> list:
        """
        Sort systems by dependencies (topological order).

        Returns:
            List of systems in safe start order
        """
        systems = list(self._systems.values())
        in_degree = {s: 0 for s in systems}
        graph = {s: [] for s in systems}

        for system in systems:
            for dep_cls in getattr(system.__class__, 'depends_on', []):
                if dep_cls in self._systems:
                    graph[self._systems[dep_cls]].append(system)
                    in_degree[system] += 1

        # Kahn's algorithm
        queue = [s for s in systems if in_degree[s] == 0]
        result = []

        while queue:
            system = queue.pop(0)
            result.append(system)

            for dependent in graph[system]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        if len(result) != len(systems):
            logger.warning("Circular dependency detected, using registration order")
            return systems

        return result

    async def stop_all(self):
        """
        Shutdown all systems in reverse start order.
        """
        logger.info("Stopping all systems...")
        for system in reversed(self._topological_sort()):
            try:
                await system.shutdown()
                logger.info(f"System {system.__class__.__name__} stopped.")
            except Exception as e:
                logger.error(f"Failed to stop system {system.__class__.__name__}: {e}")
