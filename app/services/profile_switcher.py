"""Switch the running session to another profile without losing the current layout."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from app.services.session_persistence import RESTORE_IN_PROGRESS
from core import profiles
from core.errors import NotFoundError, ProfileError

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwitchOutcome:
    previous: str | None
    target: str
    switched: bool
    saved: bool = False
    restored: bool = False


class ProfileSwitcher:
    """Runs save -> activate -> restore -> hooks -> unlock for a profile change.

    ``after_restore`` callables run after the new layout is applied and before
    the restoration lock is released, so anything they trigger cannot save a
    half-restored layout.
    """

    def __init__(self, persistence, after_restore=()):
        self.persistence = persistence
        self.after_restore = list(after_restore)

    def add_after_restore(self, hook):
        self.after_restore.append(hook)

    def switch_to(self, target):
        if not profiles.profile_exists(target):
            raise NotFoundError(f"Profile '{target}' does not exist.")

        current = self.persistence.state.active_profile
        if current == target:
            LOG.info("[SWITCH] %r is already active", target)
            return SwitchOutcome(previous=current, target=target, switched=False)
        if self.persistence.is_restoring():
            raise ProfileError("A profile is still being restored; try switching again shortly.")

        switch = self.persistence.switch_with_save(target)
        profiles.update_last_used(target)
        result = self.persistence.load(reset_view=True)
        try:
            for hook in self.after_restore:
                try:
                    hook(target)
                except Exception:
                    LOG.error("[SWITCH] post-restore hook %r failed", hook, exc_info=True)
        finally:
            # Only a load that restored something still holds the lock.
            if result.loaded:
                self.persistence.unlock()
            elif result.reason == RESTORE_IN_PROGRESS:
                LOG.error("[SWITCH] another restore owns the lock; %r view was not reset", target)

        LOG.info("[SWITCH] now on %r (restored=%s)", target, result.loaded)
        return SwitchOutcome(
            previous=current,
            target=target,
            switched=True,
            saved=switch.saved,
            restored=result.loaded,
        )
