"""Filesystem layout for user data, the profile registry and profile directories.

Every per-profile path is derived through ``sanitize_profile_name``; nothing
else may turn a profile name into a directory name.
"""
from __future__ import annotations

import os
import re
import sys
from pathlib import Path

APP_NAME = "CueDeck"
USER_DATA_ENV = "CUEDECK_USER_DATA"

REGISTRY_FILE = "profiles.json"
PROFILES_DIRNAME = "profiles"
PREFERENCES_FILE = "preferences.json"
STATE_FILE = "state.json"
BACKUP_SUFFIX = ".backup"

# Plain space only; tabs and newlines are stripped like any other character.
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9 _-]")


def sanitize_profile_name(name: str) -> str:
    """Return the filesystem-safe directory name for a profile."""
    return _UNSAFE_CHARS.sub("", name or "").strip()


def user_data_dir() -> Path:
    """Resolve the user data root from environment or platform default."""
    override = os.environ.get(USER_DATA_ENV)
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        base = Path(os.getenv("APPDATA", str(Path.home() / "AppData/Roaming")))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.getenv("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return base / APP_NAME


def registry_path() -> Path:
    return user_data_dir() / REGISTRY_FILE


def profiles_dir() -> Path:
    return user_data_dir() / PROFILES_DIRNAME


def logs_dir() -> Path:
    return user_data_dir() / "logs"


def profile_dir(name: str) -> Path:
    """Return the directory holding a profile's preferences and state."""
    return profiles_dir() / sanitize_profile_name(name)


def preferences_path(name: str) -> Path:
    return profile_dir(name) / PREFERENCES_FILE


def state_path(name: str) -> Path:
    return profile_dir(name) / STATE_FILE


def state_backup_path(name: str) -> Path:
    return profile_dir(name) / (STATE_FILE + BACKUP_SUFFIX)


def is_inside_profiles_dir(path: Path) -> bool:
    """Return True when ``path`` resolves strictly below the profiles root."""
    base = os.path.realpath(profiles_dir())
    target = os.path.realpath(path)
    return target.startswith(base + os.path.sep)
