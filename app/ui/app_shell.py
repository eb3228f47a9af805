import logging

from PyQt6.QtWidgets import QHBoxLayout, QVBoxLayout, QWidget

from app.app_state import app_state
from app.controllers.profile_controller import ProfileController
from app.services.profile_switcher import ProfileSwitcher
from app.services.session_persistence import SessionPersistence
from app.ui.assignment_tabs import AssignmentTabs, QtLayoutView
from app.ui.panels.profile_selector import ProfileSelectorPanel
from app.ui.widget_utils import make_section_label
from core import preferences
from core.errors import ProfileError
from core.logging_setup import set_debug_logging
from core.paths import APP_NAME
from core.session_state import AssignmentKind
from core.storage import SongCatalog

LOG = logging.getLogger(__name__)

SECTION_TITLES = {
    AssignmentKind.HOTKEYS: "Hotkeys",
    AssignmentKind.HOLDING_TANK: "Holding Tank",
    AssignmentKind.SOUNDBOARD: "Soundboard",
}


def apply_profile_preferences(profile_name):
    """Load a profile's preferences and apply the ones the shell owns."""
    try:
        prefs = preferences.load_preferences(profile_name)
    except (ProfileError, OSError):
        LOG.error("[PROFILE] could not load preferences for %r", profile_name, exc_info=True)
        return None
    set_debug_logging(bool(prefs.get("debug_log_enabled")))
    return prefs


class AppShell(QWidget):
    def __init__(self, catalog=None, persistence=None):
        super().__init__()
        self.setGeometry(200, 200, 900, 520)

        self.catalog = catalog or SongCatalog()
        self.view = QtLayoutView(self.catalog)
        self.sections = {}

        sections_layout = QVBoxLayout()
        for kind in AssignmentKind:
            tabs = AssignmentTabs(kind)
            self.sections[kind] = tabs
            self.view.register(tabs)
            sections_layout.addWidget(make_section_label(SECTION_TITLES[kind]))
            sections_layout.addWidget(tabs)

        self.persistence = persistence or SessionPersistence(self.view, self.catalog)
        self.switcher = ProfileSwitcher(self.persistence, after_restore=[self.on_profile_restored])
        self.profile_panel = ProfileSelectorPanel(ProfileController(self.switcher))
        self.profile_panel.setFixedWidth(240)

        root_layout = QHBoxLayout()
        root_layout.addWidget(self.profile_panel)
        root_layout.addLayout(sections_layout, 1)
        self.setLayout(root_layout)

        self.update_title()

    def update_title(self):
        profile_name = app_state.active_profile
        self.setWindowTitle(f"{APP_NAME} - {profile_name}" if profile_name else APP_NAME)

    def on_profile_restored(self, profile_name):
        apply_profile_preferences(profile_name)
        self.update_title()

    def closeEvent(self, event):
        # Teardown waits here until the layout is written or the save times out.
        saved = self.persistence.save_on_quit()
        LOG.info("[PROFILE_STATE] window closing (state saved=%s)", saved)
        event.accept()
