from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from scrambletower.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"


@dataclass(frozen=True)
class Settings:
    """User preferences consumed by the UI and passed into rounds."""

    dark_mode: bool = False
    animations_enabled: bool = True
    vibration_enabled: bool = True

    def to_dict(self) -> dict:
        return {
            "darkMode": self.dark_mode,
            "animationsEnabled": self.animations_enabled,
            "vibrationEnabled": self.vibration_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        defaults = cls()
        return cls(
            dark_mode=bool(data.get("darkMode", defaults.dark_mode)),
            animations_enabled=bool(data.get("animationsEnabled", defaults.animations_enabled)),
            vibration_enabled=bool(data.get("vibrationEnabled", defaults.vibration_enabled)),
        )


class SettingsStore:
    """Loads and saves :class:`Settings` under the ``settings`` key."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load(self) -> Settings:
        payload = self._store.load(SETTINGS_KEY)
        if not isinstance(payload, dict):
            return Settings()
        return Settings.from_dict(payload)

    def save(self, settings: Settings) -> bool:
        return self._store.save(SETTINGS_KEY, settings.to_dict())

    def toggle(self, name: str) -> Settings:
        """Flip a single boolean preference and persist the result."""
        current = self.load()
        if name not in ("dark_mode", "animations_enabled", "vibration_enabled"):
            raise ValueError(f"Unknown setting: {name}")
        updated = replace(current, **{name: not getattr(current, name)})
        self.save(updated)
        return updated

    def reset(self) -> Settings:
        settings = Settings()
        self.save(settings)
        logger.info("Settings reset to defaults")
        return settings
