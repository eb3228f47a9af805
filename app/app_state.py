"""In-memory app state with persisted profile selection."""

from core import storage

ACTIVE_PROFILE_KEY = "active_profile"


class AppState:
    """Global UI state: the active profile pointer.

    The persisted value is read on first access so importing this module
    never touches the database.
    """

    def __init__(self):
        self._active_profile = None
        self._loaded = False

    @property
    def active_profile(self):
        if not self._loaded:
            self._active_profile = storage.get_app_state(ACTIVE_PROFILE_KEY)
            self._loaded = True
        return self._active_profile

    @active_profile.setter
    def active_profile(self, name):
        self._active_profile = name
        self._loaded = True

    def activate_profile(self, name):
        """Point the process at ``name`` and remember it for the next launch."""
        self.active_profile = name
        storage.set_app_state(ACTIVE_PROFILE_KEY, name)

    def reset(self):
        self._active_profile = None
        self._loaded = False

app_state = AppState()
