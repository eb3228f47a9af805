"""Session state persistence: save, restore, save-before-switch and save-on-quit.

The restoration lock is taken at the start of ``load`` and released only by
``unlock``, which the owner calls after its whole startup (or reactivation)
sequence. Until then every save is refused, so a save triggered by half-built
UI cannot overwrite the stored layout with an empty one.

Writes always target a profile name resolved once per operation and passed
down explicitly; the active-profile pointer is never re-read at write time.
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from app.app_state import app_state
from app.services.restoration_lock import RestorationLock
from core import session_state as codec
from core import session_store
from core.errors import FormatError
from core.session_state import ApplyReport, SessionState

LOG = logging.getLogger(__name__)

SAVE_ON_QUIT_TIMEOUT_SEC = 3.0
RESTORE_IN_PROGRESS = "restore already in progress"


@dataclass(frozen=True)
class SaveResult:
    saved: bool
    profile: str | None = None
    path: Path | None = None
    reason: str = ""


@dataclass(frozen=True)
class LoadResult:
    loaded: bool
    profile: str | None = None
    reason: str = ""
    report: ApplyReport | None = None
    error: str | None = None


@dataclass(frozen=True)
class SwitchResult:
    target: str
    saved: bool
    previous: str | None = None


class SessionPersistence:
    def __init__(self, view, catalog, state=None, lock=None):
        self.view = view
        self.catalog = catalog
        self.state = state or app_state
        self.lock = lock or RestorationLock()

    # -- lock -------------------------------------------------------------

    def is_restoring(self) -> bool:
        return self.lock.is_restoring()

    def unlock(self) -> None:
        """Leave RESTORING once the owner's startup sequence has finished."""
        self.lock.release()

    # -- saving -----------------------------------------------------------

    def _current_profile(self) -> str | None:
        return self.state.active_profile

    def _write(self, profile_name: str, state: SessionState) -> Path:
        return session_store.write_state(profile_name, state.to_payload())

    def save(self) -> SaveResult:
        """Extract the layout and write it to the active profile."""
        with self.lock.idle_section() as idle:
            if not idle:
                LOG.info("[PROFILE_STATE] save refused: restoration in progress")
                return SaveResult(saved=False, reason="restoring")
            profile_name = self._current_profile()
            if not profile_name:
                LOG.warning("[PROFILE_STATE] save skipped: no active profile")
                return SaveResult(saved=False, reason="no active profile")
            state = codec.extract(self.view)
            path = self._write(profile_name, state)
        return SaveResult(saved=True, profile=profile_name, path=path)

    def switch_with_save(self, target: str) -> SwitchResult:
        """Save the current layout to the current profile, then activate ``target``."""
        saved = False
        previous = None
        with self.lock.idle_section() as idle:
            if not idle:
                LOG.info("[SWITCH] restoration in progress; switching to %r without saving", target)
            else:
                state = codec.extract(self.view)
                previous = self._current_profile()
                if not previous:
                    LOG.warning("[SWITCH] no active profile to save before switching")
                else:
                    try:
                        self._write(previous, state)
                        saved = True
                    except Exception:
                        LOG.error("[SWITCH] failed to save %r before switch", previous, exc_info=True)
        self.state.activate_profile(target)
        LOG.info("[SWITCH] active profile %r -> %r (saved=%s)", previous, target, saved)
        return SwitchResult(target=target, saved=saved, previous=previous)

    def save_on_quit(self, timeout: float = SAVE_ON_QUIT_TIMEOUT_SEC) -> bool:
        """Save during teardown, blocking the caller for at most ``timeout`` seconds."""
        if self.lock.is_restoring():
            LOG.info("[PROFILE_STATE] quit save refused: restoration in progress")
            return False
        state = codec.extract(self.view)
        profile_name = self._current_profile()
        if not profile_name:
            LOG.warning("[PROFILE_STATE] quit save skipped: no active profile")
            return False

        done = threading.Event()
        outcome = {"saved": False}

        def _write_on_quit():
            try:
                with self.lock.idle_section() as idle:
                    if not idle:
                        LOG.info("[PROFILE_STATE] quit save refused: restoration started")
                        return
                    self._write(profile_name, state)
                    outcome["saved"] = True
            except Exception:
                LOG.error("[PROFILE_STATE] failed to save state on quit for %r", profile_name, exc_info=True)
            finally:
                done.set()

        worker = threading.Thread(target=_write_on_quit, name="save-on-quit", daemon=True)
        worker.start()
        if not done.wait(timeout):
            LOG.warning("[PROFILE_STATE] quit save for %r did not finish within %.1fs", profile_name, timeout)
            return False
        return outcome["saved"]

    # -- loading ----------------------------------------------------------

    def _finish_unloaded(self, profile_name, reason, error=None) -> LoadResult:
        self.lock.release()
        LOG.info("[PROFILE_STATE] nothing restored for %r: %s", profile_name, reason)
        return LoadResult(loaded=False, profile=profile_name, reason=reason, error=error)

    def load(self, view=None, catalog=None, *, reset_view=False) -> LoadResult:
        """Restore the active profile's layout into the view.

        Leaves the lock RESTORING when something was restored; the caller must
        call ``unlock`` after the rest of its startup. Every other outcome
        releases the lock before returning.
        """
        view = view or self.view
        catalog = catalog or self.catalog
        if not self.lock.acquire():
            return LoadResult(loaded=False, reason=RESTORE_IN_PROGRESS)

        profile_name = None
        try:
            profile_name = self._current_profile()
            LOG.info("[PROFILE_STATE] starting state load for %r (restoration lock enabled)", profile_name)
            if reset_view:
                codec.apply(SessionState.empty(), view, catalog)
            if not profile_name:
                return self._finish_unloaded(None, "no active profile")

            try:
                text = session_store.read_state(profile_name)
            except OSError as exc:
                LOG.error("[PROFILE_STATE] could not read state for %r", profile_name, exc_info=True)
                return self._finish_unloaded(profile_name, "state file unreadable", str(exc))
            if text is None:
                return self._finish_unloaded(profile_name, "no state file")
            if not text.strip():
                return self._finish_unloaded(profile_name, "state file empty")

            try:
                state = SessionState.from_payload(json.loads(text))
            except (json.JSONDecodeError, FormatError) as exc:
                LOG.error("[PROFILE_STATE] malformed state for %r: %s", profile_name, exc)
                return self._finish_unloaded(profile_name, "state file malformed", str(exc))
            if state.is_empty():
                return self._finish_unloaded(profile_name, "state empty")

            report = codec.apply(state, view, catalog)
        except Exception as exc:
            self.lock.release()
            LOG.error("[PROFILE_STATE] failed to load state for %r", profile_name, exc_info=True)
            return LoadResult(loaded=False, profile=profile_name, reason="error", error=str(exc))

        LOG.info(
            "[PROFILE_STATE] restored %d items for %r (dropped=%d); lock held until unlock()",
            report.restored,
            profile_name,
            report.dropped,
        )
        return LoadResult(loaded=True, profile=profile_name, report=report)
