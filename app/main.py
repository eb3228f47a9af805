import argparse
import logging
import sys

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QApplication

from app.app_state import app_state
from app.ui.app_shell import AppShell, apply_profile_preferences
from core import profiles
from core.logging_setup import setup_logging
from core.paths import APP_NAME

LOG = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="cuedeck", description=f"{APP_NAME} sound cue board")
    parser.add_argument("--profile", help="profile to open instead of the last used one")
    args, _ = parser.parse_known_args(argv)
    return args


def activate_startup_profile(requested=None):
    """Resolve which profile this launch uses and make it active."""
    profile_name = profiles.resolve_startup_profile(requested, app_state.active_profile)
    app_state.activate_profile(profile_name)
    profiles.update_last_used(profile_name)
    LOG.info("[PROFILE] starting with profile %r", profile_name)
    return profile_name


def main(argv=None):
    args = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging()

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    profile_name = activate_startup_profile(args.profile)
    apply_profile_preferences(profile_name)

    window = AppShell()
    window.persistence.load()
    window.profile_panel.refresh_profiles()
    window.show()
    # Saves stay refused until the event loop is running and the window is built.
    QTimer.singleShot(0, window.persistence.unlock)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
