from typing import Any, NamedTuple, Optional
import json
import os
from pydantic import ValidationError
from loguru import logger

from .settings import AppConfig
from .events import Event, EventBus, get_bus


class ConfigChange(NamedTuple):
    section: str
    key: str
    value: Any


# Published on the bus after every successful ConfigManager.update()
CONFIG_CHANGED = Event("config.changed", ConfigChange)


class ConfigManager:
    """
    Manages bus and logging configuration with persistence.

    Changes are announced on the event bus as CONFIG_CHANGED payloads.
    """
    def __init__(self, filepath: Optional[str] = None, bus: Optional[EventBus] = None):
        self.filepath = filepath
        self._bus = bus
        self._data = AppConfig()
        if self.filepath:
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

        setattr(section_obj, key, value)
        self._save()

        change = ConfigChange(section, key, getattr(section_obj, key))
        (self._bus or get_bus()).emit(CONFIG_CHANGED.create_payload(change))

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
            except (OSError, ValueError, ValidationError) as e:
                logger.error(f"Failed to load config from {self.filepath}: {e}")
        else:
            self._save()

    def _save(self):
        """Persist current config to JSON file."""
        if not self.filepath or self.filepath.endswith('.toml'):
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
