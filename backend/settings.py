"""Athlete preferences for the strength runner.

``data/settings.json`` holds an ordered list of ``{"key", "value", "type"}``
entries. Only ``auto_rest``, ``sound_on`` and ``athlete_id`` are read by the
app; other keys are kept untouched.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

SETTINGS_PATH = Path(__file__).resolve().parents[1] / "data" / "settings.json"

DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "auto_rest", "value": True, "type": "bool"},
    {"key": "sound_on", "value": True, "type": "bool"},
    {"key": "athlete_id", "value": 1, "type": "int"},
]

_settings_cache: Optional[List[Dict[str, Any]]] = None


def _entry(entries: List[Dict[str, Any]], key: str) -> Optional[Dict[str, Any]]:
    return next((item for item in entries if item.get("key") == key), None)


def _read_file(path: Path) -> Optional[List[Dict[str, Any]]]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logging.exception("Could not read settings from %s", path)
        return None
    if not isinstance(raw, list):
        logging.warning("Ignoring malformed settings file %s", path)
        return None
    return [item for item in raw if isinstance(item, dict)]


def load_settings() -> List[Dict[str, Any]]:
    """Read the preference entries, rewriting the file with defaults when
    it is missing or unreadable."""
    if SETTINGS_PATH.exists():
        entries = _read_file(SETTINGS_PATH)
        if entries is not None:
            return entries
    entries = [dict(item) for item in DEFAULT_SETTINGS]
    save_settings(entries)
    return entries


def save_settings(settings: List[Dict[str, Any]]) -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(json.dumps(settings, indent=2), encoding="utf-8")


def get_settings() -> List[Dict[str, Any]]:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def reset_cache() -> None:
    """Drop the in-memory copy; tests point ``SETTINGS_PATH`` elsewhere."""
    global _settings_cache
    _settings_cache = None


def get_value(key: str, default: Any = None) -> Any:
    """Stored value for ``key``, else its built-in default, else ``default``."""
    item = _entry(get_settings(), key) or _entry(DEFAULT_SETTINGS, key)
    return item.get("value") if item is not None else default


def set_value(key: str, value: Any) -> None:
    settings = get_settings()
    item = _entry(settings, key)
    if item is None:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    else:
        item["value"] = value
    save_settings(settings)
