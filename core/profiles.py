"""Profile lifecycle: create, delete, duplicate, list and validate profiles.

Design:
- profiles.json (the registry) records which profiles exist.
- Each profile owns userData/profiles/<sanitized-name>/ holding
  preferences.json and the session state files.
- Storage is always prepared before a registry entry is written, and removed
  before a registry entry is dropped, so a crash never leaves a registered
  profile without its directory.
"""
import logging
import os
import shutil

from core import preferences as prefs
from core.errors import NotFoundError, ProfileError, ValidationError
from core.paths import is_inside_profiles_dir, profile_dir, sanitize_profile_name
from core.registry import (
    DEFAULT_PROFILE_NAME,
    ProfileRecord,
    load_registry,
    now_ms,
    registry_lock,
    save_registry,
)

LOG = logging.getLogger(__name__)

MAX_PROFILE_NAME_LENGTH = 50


def list_profiles():
    """Return registered profiles sorted by name, seeding the registry if absent."""
    registry = load_registry()
    return sorted(registry.profiles.values(), key=lambda record: record.name.lower())


def get_profile(name):
    """Return the profile registered under exactly ``name``, or None."""
    if not name:
        return None
    return load_registry().profiles.get(name)


def profile_exists(name):
    return get_profile(name) is not None


def validate_profile_name(profile_name, registry=None):
    """Validate a new profile name. Returns (valid, message)."""
    if not profile_name or not isinstance(profile_name, str):
        return False, "Profile name is required."
    name = profile_name.strip()
    if not name:
        return False, "Profile name cannot be empty."
    if len(name) > MAX_PROFILE_NAME_LENGTH:
        return False, f"Profile name cannot exceed {MAX_PROFILE_NAME_LENGTH} characters."
    safe_name = sanitize_profile_name(name)
    if not safe_name:
        return False, "Profile name must include letters, numbers, spaces, _ or -."

    registry = registry or load_registry()
    if registry.find_casefold(name):
        return False, "Profile name already exists."
    for record in registry.profiles.values():
        if sanitize_profile_name(record.name).casefold() == safe_name.casefold():
            return False, f"Profile name conflicts with existing profile '{record.name}'."
    return True, ""


def _require_valid_name(name, registry):
    valid, message = validate_profile_name(name, registry)
    if not valid:
        raise ValidationError(message)
    return name.strip()


def _safe_profile_dir(name):
    target = profile_dir(name)
    if not is_inside_profiles_dir(target):
        raise ValidationError("Invalid profile path.")
    return target


def _clear_orphan_dir(target):
    """Remove a directory left behind by an earlier failed delete."""
    if target.exists():
        LOG.warning("[PROFILE] removing unregistered directory %s", target)
        shutil.rmtree(target)


def create_profile(profile_name, description=""):
    """Create a profile with default preferences. Returns its ProfileRecord."""
    with registry_lock:
        registry = load_registry()
        name = _require_valid_name(profile_name, registry)
        target = _safe_profile_dir(name)

        _clear_orphan_dir(target)
        target.mkdir(parents=True, exist_ok=True)
        prefs.save_preferences(name, prefs.default_preferences())

        record = ProfileRecord(name=name, description=description or "")
        registry.profiles[name] = record
        save_registry(registry)

    LOG.info("[PROFILE] created %r at %s", name, target)
    return record


def delete_profile(profile_name):
    """Remove a profile's directory, then its registry entry."""
    if profile_name == DEFAULT_PROFILE_NAME:
        raise ValidationError(f"Cannot delete the {DEFAULT_PROFILE_NAME} profile.")

    with registry_lock:
        registry = load_registry()
        if profile_name not in registry.profiles:
            raise NotFoundError(f"Profile '{profile_name}' does not exist.")
        if len(registry.profiles) <= 1:
            raise ValidationError("Cannot delete the last profile.")

        target = _safe_profile_dir(profile_name)
        if target.exists():
            shutil.rmtree(target)
        if target.exists():
            raise ProfileError(f"Profile directory {target} could not be removed.")

        del registry.profiles[profile_name]
        save_registry(registry)

    LOG.info("[PROFILE] deleted %r", profile_name)


def _copy_tree(source, destination):
    """Copy ``source`` into ``destination`` one file at a time."""
    os.makedirs(destination, exist_ok=True)
    for entry in os.scandir(source):
        dest_path = os.path.join(destination, entry.name)
        if entry.is_dir(follow_symlinks=False):
            _copy_tree(entry.path, dest_path)
        else:
            shutil.copy2(entry.path, dest_path)


def duplicate_profile(source_name, target_name, description=""):
    """Copy an existing profile's data into a newly registered profile."""
    if source_name == DEFAULT_PROFILE_NAME:
        raise ValidationError(f"Cannot duplicate the {DEFAULT_PROFILE_NAME} profile.")

    with registry_lock:
        registry = load_registry()
        if source_name not in registry.profiles:
            raise NotFoundError(f"Profile '{source_name}' does not exist.")
        source_dir = _safe_profile_dir(source_name)
        if not source_dir.is_dir():
            raise NotFoundError(f"Profile directory for '{source_name}' is missing.")

        name = _require_valid_name(target_name, registry)
        target = _safe_profile_dir(name)
        _clear_orphan_dir(target)
        try:
            _copy_tree(source_dir, target)
        except Exception:
            LOG.error("[PROFILE] duplicate %r -> %r failed; removing partial copy", source_name, name)
            shutil.rmtree(target, ignore_errors=True)
            raise

        record = ProfileRecord(name=name, description=description or "")
        registry.profiles[name] = record
        save_registry(registry)

    LOG.info("[PROFILE] duplicated %r -> %r", source_name, name)
    return record


def update_last_used(profile_name):
    """Bump ``last_used`` for a registered profile. Returns False if unknown."""
    with registry_lock:
        registry = load_registry()
        record = registry.profiles.get(profile_name)
        if record is None:
            return False
        record.last_used = now_ms()
        save_registry(registry)
    return True


def resolve_startup_profile(requested=None, persisted=None):
    """Pick the profile to open: requested, then persisted, then the default."""
    registry = load_registry()
    for candidate in (requested, persisted):
        if not candidate:
            continue
        if candidate in registry.profiles:
            return candidate
        LOG.warning("[PROFILE] %r is not a registered profile; ignoring", candidate)
    return DEFAULT_PROFILE_NAME
