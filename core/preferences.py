"""Per-profile preferences with defaulting and one-time legacy migration."""
from __future__ import annotations

import logging
from typing import Protocol

from core.errors import FormatError
from core.fileio import read_json, write_json
from core.paths import preferences_path
from core.registry import now_ms

LOG = logging.getLogger(__name__)

# Keys copied from the pre-profile global settings store.
MIGRATED_KEYS = (
    "screen_mode",
    "font_size",
    "column_order",
    "fade_out_seconds",
    "debug_log_enabled",
    "prerelease_updates",
    "holding_tank_mode",
)

# Layout keys that moved to state.json and must not linger in preferences.
DEPRECATED_KEYS = (
    "hotkeys",
    "holding_tank",
    "browser_width",
    "browser_height",
    "window_state",
)


class LegacyStore(Protocol):
    def has(self, key: str) -> bool: ...

    def get(self, key: str): ...


def default_preferences() -> dict:
    timestamp = now_ms()
    return {
        "fade_out_seconds": 2,
        "screen_mode": "auto",
        "font_size": 11,
        "column_order": None,
        "debug_log_enabled": False,
        "prerelease_updates": False,
        "holding_tank_mode": "storage",
        "created_at": timestamp,
        "last_used": timestamp,
    }


def unwrap_value(value):
    """Unwrap values stored as ``{"success": ..., "value": ...}``, at any depth."""
    if isinstance(value, dict) and "success" in value and "value" in value:
        return unwrap_value(value["value"])
    return value


def _migrate_from_legacy(profile_name: str, preferences: dict, legacy: LegacyStore) -> int:
    migrated = 0
    for key in MIGRATED_KEYS:
        try:
            if not legacy.has(key):
                continue
            preferences[key] = unwrap_value(legacy.get(key))
        except Exception:
            LOG.warning("[PROFILE] skipped legacy preference %r for %r", key, profile_name, exc_info=True)
            continue
        migrated += 1
        LOG.info("[PROFILE] migrated legacy preference %r to %r", key, profile_name)
    return migrated


def _synthesize(profile_name: str, legacy: LegacyStore | None, migrate: bool) -> dict:
    preferences = default_preferences()
    if not migrate:
        return preferences
    if legacy is None:
        from core.storage import LegacySettings

        legacy = LegacySettings()
    try:
        migrated = _migrate_from_legacy(profile_name, preferences, legacy)
    except Exception:
        # An unreadable legacy store is normal for fresh installs.
        LOG.warning("[PROFILE] legacy settings unavailable for %r", profile_name, exc_info=True)
        return preferences
    if migrated:
        preferences["_migrated"] = True
        preferences["_migration_date"] = now_ms()
        preferences["_migrated_count"] = migrated
        LOG.info("[PROFILE] completed preference migration for %r (%d keys)", profile_name, migrated)
    return preferences


def load_preferences(profile_name: str, *, legacy: LegacyStore | None = None, migrate: bool = True) -> dict:
    """Return a profile's preferences, creating the file on first use.

    A missing file is synthesized from defaults, optionally seeded from the
    legacy global store, and written back. An existing file is normalized:
    deprecated layout keys are dropped and wrapped values unwrapped.
    """
    path = preferences_path(profile_name)
    if not path.exists():
        preferences = _synthesize(profile_name, legacy, migrate)
        save_preferences(profile_name, preferences)
        LOG.info(
            "[PROFILE] created preferences for %r (migrated=%s)",
            profile_name,
            preferences.get("_migrated", False),
        )
        return preferences

    data = read_json(path)
    if not isinstance(data, dict):
        raise FormatError(f"Preferences for {profile_name!r} must be a JSON object")
    for key in DEPRECATED_KEYS:
        data.pop(key, None)
    return {key: unwrap_value(value) for key, value in data.items()}


def save_preferences(profile_name: str, preferences: dict) -> None:
    """Write a profile's preferences, creating its directory if needed."""
    path = preferences_path(profile_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    write_json(path, preferences)
    LOG.debug("[PROFILE] preferences saved for %r", profile_name)
