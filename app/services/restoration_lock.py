"""Two-state restoration lock gating session saves while a restore is in flight."""
from __future__ import annotations

import contextlib
import logging
import threading
from enum import Enum
from typing import Iterator

LOG = logging.getLogger(__name__)


class RestorationState(str, Enum):
    IDLE = "IDLE"
    RESTORING = "RESTORING"


class RestorationLock:
    """IDLE permits saves; RESTORING refuses them. One RESTORING owner at a time."""

    def __init__(self):
        self._state = RestorationState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> RestorationState:
        with self._lock:
            return self._state

    def is_restoring(self) -> bool:
        return self.state is RestorationState.RESTORING

    def acquire(self) -> bool:
        """IDLE -> RESTORING. Returns False if another restore already owns it."""
        with self._lock:
            if self._state is RestorationState.RESTORING:
                LOG.warning("[RESTORE_LOCK] restore already in progress")
                return False
            self._state = RestorationState.RESTORING
        LOG.info("[RESTORE_LOCK] enabled")
        return True

    def release(self) -> None:
        """RESTORING -> IDLE. Releasing an idle lock is a logged no-op."""
        with self._lock:
            if self._state is RestorationState.IDLE:
                LOG.debug("[RESTORE_LOCK] release requested while already idle")
                return
            self._state = RestorationState.IDLE
        LOG.info("[RESTORE_LOCK] cleared")

    @contextlib.contextmanager
    def idle_section(self) -> Iterator[bool]:
        """Hold the lock's mutex; yields True when saves are permitted.

        No transition can happen while the section is open, so a restore
        cannot start halfway through a write.
        """
        with self._lock:
            yield self._state is RestorationState.IDLE
