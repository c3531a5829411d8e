import pytest
from loguru import logger

from superevents.core.events import EventRegistry, reset_default_registry


@pytest.fixture
def registry():
    """Fresh, unshared EventRegistry."""
    return EventRegistry()


@pytest.fixture(autouse=True)
def _fresh_default_registry():
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
