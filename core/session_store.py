"""On-disk session state files for a profile.

Every function takes the profile name explicitly; callers resolve the active
profile once and pass it down so the target directory cannot change between
extracting a layout and writing it.
"""
from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from core.fileio import write_text_atomic
from core.paths import profile_dir, state_backup_path, state_path

LOG = logging.getLogger(__name__)


def ensure_state_dir(profile_name: str) -> Path:
    """Create the profile directory if needed (idempotent)."""
    directory = profile_dir(profile_name)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def read_state(profile_name: str) -> str | None:
    """Return the raw state file text, or None when the profile has none."""
    if not profile_dir(profile_name).is_dir():
        return None
    path = state_path(profile_name)
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def backup_state(profile_name: str) -> bool:
    """Copy the current state file byte-for-byte to its .backup sibling."""
    source = state_path(profile_name)
    if not source.is_file():
        return False
    try:
        shutil.copyfile(source, state_backup_path(profile_name))
    except OSError:
        LOG.warning("[PROFILE_STATE] backup of %s failed; continuing with save", source, exc_info=True)
        return False
    return True


def write_state(profile_name: str, payload: dict) -> Path:
    """Back up the previous state, then write ``payload`` for ``profile_name``."""
    ensure_state_dir(profile_name)
    path = state_path(profile_name)
    backup_state(profile_name)
    write_text_atomic(path, json.dumps(payload, indent=2))
    LOG.info("[PROFILE_STATE] state saved for %r at %s", profile_name, path)
    return path
