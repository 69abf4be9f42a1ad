"""Persisted front-end preferences (never mission state)."""
from __future__ import annotations

import json
from pathlib import Path

SETTINGS_DIR = Path.home() / ".orbit_trainer"
SETTINGS_PATH = SETTINGS_DIR / "settings.json"

DEFAULT_SETTINGS: dict[str, object] = {
    "difficulty": "easy",
    "show_trail": True,
    "show_vectors": True,
    "show_math_hud": True,
}


def load_user_settings(path: Path = SETTINGS_PATH) -> dict[str, object]:
    """Return persisted settings merged over the defaults."""

    settings = dict(DEFAULT_SETTINGS)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError):
        return settings
    if isinstance(data, dict):
        for key, default in DEFAULT_SETTINGS.items():
            value = data.get(key)
            if isinstance(value, type(default)):
                settings[key] = value
    return settings


def save_user_settings(settings: dict[str, object], path: Path = SETTINGS_PATH) -> None:
    """Persist settings, ignoring filesystem errors."""

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2, sort_keys=True)
    except OSError:
        # The trainer keeps running with in-memory settings.
        pass


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_PATH", "load_user_settings", "save_user_settings"]
