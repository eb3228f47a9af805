"""Profile registry: the single source of truth for which profiles exist.

The registry lives in ``profiles.json`` at the user data root. A missing file is
seeded with the default profile; a corrupt file is reported, never recreated,
because recreating it would forget which profile directories hold real data.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import asdict, dataclass, field

from core.errors import FormatError
from core.fileio import read_json, write_json
from core.paths import registry_path

LOG = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "Default User"
DEFAULT_PROFILE_DESCRIPTION = "Default profile"
REGISTRY_VERSION = "1.0.0"

# Serialises read-modify-write cycles on profiles.json within the process.
registry_lock = threading.RLock()


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class ProfileRecord:
    name: str
    description: str = ""
    created_at: int = field(default_factory=now_ms)
    last_used: int = field(default_factory=now_ms)

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "ProfileRecord":
        return cls(
            name=str(data.get("name") or name),
            description=str(data.get("description") or ""),
            created_at=int(data.get("created_at") or 0),
            last_used=int(data.get("last_used") or 0),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProfileRegistry:
    profiles: dict[str, ProfileRecord] = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)

    def names(self) -> list[str]:
        return list(self.profiles)

    def find_casefold(self, name: str) -> ProfileRecord | None:
        """Return a profile whose name matches ``name`` ignoring case."""
        wanted = name.casefold()
        for record in self.profiles.values():
            if record.name.casefold() == wanted:
                return record
        return None

    def to_dict(self) -> dict:
        return {
            "profiles": {key: record.to_dict() for key, record in self.profiles.items()},
            "metadata": dict(self.metadata),
        }


def _default_profile() -> ProfileRecord:
    return ProfileRecord(name=DEFAULT_PROFILE_NAME, description=DEFAULT_PROFILE_DESCRIPTION)


def default_registry() -> ProfileRegistry:
    return ProfileRegistry(
        profiles={DEFAULT_PROFILE_NAME: _default_profile()},
        metadata={"version": REGISTRY_VERSION, "created_at": now_ms()},
    )


def _parse(data: object) -> ProfileRegistry:
    if not isinstance(data, dict):
        raise FormatError(f"Profile registry must be a JSON object, not {type(data).__name__}")
    raw_profiles = data.get("profiles", {})
    if not isinstance(raw_profiles, dict):
        raise FormatError("Profile registry 'profiles' must be a JSON object")
    profiles = {}
    for key, value in raw_profiles.items():
        if not isinstance(value, dict):
            raise FormatError(f"Profile registry entry {key!r} must be a JSON object")
        profiles[key] = ProfileRecord.from_dict(key, value)
    metadata = data.get("metadata")
    return ProfileRegistry(profiles=profiles, metadata=metadata if isinstance(metadata, dict) else {})


def _warn_case_variants(registry: ProfileRegistry) -> None:
    seen: dict[str, str] = {}
    for name in registry.profiles:
        folded = name.casefold()
        if folded in seen:
            LOG.warning(
                "[PROFILE] registry holds case-variant names %r and %r; lookups stay exact",
                seen[folded],
                name,
            )
        else:
            seen[folded] = name


def load_registry() -> ProfileRegistry:
    """Read the registry, seeding a default one when the file is absent."""
    path = registry_path()
    with registry_lock:
        if not path.exists():
            registry = default_registry()
            save_registry(registry)
            LOG.info("[PROFILE] created default profile registry at %s", path)
            return registry

        registry = _parse(read_json(path))
        if DEFAULT_PROFILE_NAME not in registry.profiles:
            registry.profiles[DEFAULT_PROFILE_NAME] = _default_profile()
            registry.metadata.setdefault("version", REGISTRY_VERSION)
            save_registry(registry)
            LOG.warning("[PROFILE] registry was missing %r; re-seeded it", DEFAULT_PROFILE_NAME)
        _warn_case_variants(registry)
        return registry


def save_registry(registry: ProfileRegistry) -> None:
    """Persist the registry atomically."""
    path = registry_path()
    with registry_lock:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_json(path, registry.to_dict())
    LOG.debug("[PROFILE] registry saved (%d profiles)", len(registry.profiles))
