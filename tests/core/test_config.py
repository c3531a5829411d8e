import json
import pytest
from unittest.mock import MagicMock

from superevents.core.config import AppConfig, ConfigManager
from superevents.core.events import EventRegistry


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config.json")


def test_defaults_written_when_missing(config_path):
    manager = ConfigManager(config_path)

    assert manager.data == AppConfig()
    with open(config_path, encoding="utf-8") as f:
        saved = json.load(f)
    assert saved["events"]["threadsafe"] is False


def test_load_existing_json(config_path):
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump({"events": {"threadsafe": True, "log_dispatch": True}}, f)

    manager = ConfigManager(config_path)

    assert manager.get("events", "threadsafe") is True
    assert manager.data.events.log_dispatch is True


def test_load_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[events]\nthreadsafe = true\n\n[logging]\ndebug_mode = false\n', encoding="utf-8")

    manager = ConfigManager(str(path))

    assert manager.data.events.threadsafe is True
    assert manager.data.logging.debug_mode is False


def test_invalid_file_falls_back_to_defaults(config_path):
    with open(config_path, "w", encoding="utf-8") as f:
        f.write("{not json")

    manager = ConfigManager(config_path)

    assert manager.data == AppConfig()


def test_update_persists_and_notifies(config_path):
    manager = ConfigManager(config_path)
    listener = MagicMock()
    manager.on_changed.connect(listener)

    manager.update("events", "log_dispatch", True)

    listener.assert_called_once_with("events", "log_dispatch", True)
    assert ConfigManager(config_path).data.events.log_dispatch is True


def test_update_rejects_unknown_keys(config_path):
    manager = ConfigManager(config_path)

    with pytest.raises(ValueError):
        manager.update("nope", "threadsafe", True)
    with pytest.raises(ValueError):
        manager.update("events", "nope", True)


def test_update_rejects_invalid_value(config_path):
    manager = ConfigManager(config_path)

    with pytest.raises(ValueError):
        manager.update("events", "threadsafe", "not-a-bool")
    assert manager.data.events.threadsafe is False


def test_registry_reads_config(config_path, log_messages):
    manager = ConfigManager(config_path)
    manager.update("events", "log_dispatch", True)

    registry = EventRegistry(config=manager)
    registry.on("logged", lambda: None)
    registry.emit("logged")

    assert any("Dispatching 'logged'" in message for message in log_messages)
