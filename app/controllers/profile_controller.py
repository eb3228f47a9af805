import logging

from app.app_state import app_state
from core import profiles
from core.errors import ProfileError

LOG = logging.getLogger(__name__)


class ProfileController:
    def __init__(self, switcher=None):
        self.switcher = switcher

    def list_profiles(self):
        """
        Mutates: none (seeds the registry on first run).
        Does NOT mutate: app_state.
        Returns: (bool, list[str], str)
        """
        try:
            names = [record.name for record in profiles.list_profiles()]
        except (ProfileError, OSError) as exc:
            LOG.error("[PROFILE] could not list profiles: %s", exc)
            return False, [], f"Could not load profiles: {exc}"
        return True, names, "Profiles loaded"

    def select_profile(self, name):
        """Mutates: active_profile (and the view, via the switcher). Returns: (bool, str)."""
        try:
            if self.switcher is not None:
                self.switcher.switch_to(name)
            else:
                if not profiles.profile_exists(name):
                    return False, f"Profile '{name}' does not exist."
                app_state.activate_profile(name)
                profiles.update_last_used(name)
        except ProfileError as exc:
            return False, str(exc)
        except OSError as exc:
            LOG.error("[SWITCH] switching to %r failed: %s", name, exc)
            return False, f"Could not switch profile: {exc}"
        return True, f"Switched to '{name}'."

    def create_profile(self, name, description=""):
        """Mutates: registry and profile storage. Does NOT mutate: app_state. Returns: (bool, str)."""
        try:
            record = profiles.create_profile(name, description)
        except ProfileError as exc:
            return False, str(exc)
        except OSError as exc:
            LOG.error("[PROFILE] creating %r failed: %s", name, exc)
            return False, f"Could not create profile: {exc}"
        return True, f"Profile '{record.name}' created."

    def delete_profile(self, name):
        """Mutates: registry and profile storage. Does NOT mutate: app_state. Returns: (bool, str)."""
        if app_state.active_profile == name:
            return False, "You cannot delete the active profile."
        try:
            profiles.delete_profile(name)
        except ProfileError as exc:
            return False, str(exc)
        except OSError as exc:
            LOG.error("[PROFILE] deleting %r failed: %s", name, exc)
            return False, f"Could not delete profile: {exc}"
        return True, f"Profile '{name}' deleted."

    def duplicate_profile(self, source, target, description=""):
        """Mutates: registry and profile storage. Does NOT mutate: app_state. Returns: (bool, str)."""
        try:
            record = profiles.duplicate_profile(source, target, description)
        except ProfileError as exc:
            return False, str(exc)
        except OSError as exc:
            LOG.error("[PROFILE] duplicating %r -> %r failed: %s", source, target, exc)
            return False, f"Could not duplicate profile: {exc}"
        return True, f"Profile '{record.name}' created from '{source}'."
