from typing import Any, Optional
import json
import os
from pydantic import BaseModel, Field, ValidationError
from loguru import logger
from .events import Signal

# --- Settings Models ---
class EventsSettings(BaseModel):
    threadsafe: bool = False  # guard registry operations with an RLock
    log_dispatch: bool = False

class LoggingSettings(BaseModel):
    debug_mode: bool = True
    log_dir: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "1 week"

class AppConfig(BaseModel):
    events: EventsSettings = Field(default_factory=EventsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

# --- Manager ---
class ConfigManager:
    """
    Manages configuration with persistence and reactivity.
    """
    def __init__(self, filepath: str = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self.on_changed = Signal("config.changed")
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic, autosave, and emit change event."""
        if section not in AppConfig.model_fields:
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        raw = self._data.model_dump()
        raw[section][key] = value
        try:
            self._data = AppConfig.model_validate(raw)
        except ValidationError as e:
            raise ValueError(f"Invalid value for {section}.{key}: {value!r}") from e

        self._save()
        self.on_changed.emit(section, key, getattr(getattr(self._data, section), key))

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if os.path.isfile(self.filepath):
            try:
                if self.filepath.endswith('.toml'):
                    import tomllib
                    with open(self.filepath, "rb") as f:
                        raw = tomllib.load(f)
                else:
                    with open(self.filepath, "r", encoding="utf-8") as f:
                        raw = json.load(f)
                self._data = AppConfig.model_validate(raw)
            except Exception as e:
                logger.error(f"Failed to load config from {self.filepath}: {e}")
                self._save()
        else:
            self._save()

    def _save(self):
        """Persist current config as JSON."""
        if self.filepath.endswith('.toml'):
            # tomllib is read-only
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
