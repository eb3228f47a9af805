"""UI behavior tests for assignment tabs, the profile panel and window teardown."""
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path


def _module_importable(module: str) -> bool:
    """Return True when module can be imported in a subprocess."""
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return result.returncode == 0


QT_AVAILABLE = _module_importable("PyQt6.QtWidgets")


class AnyCatalog:
    def lookup(self, item_id):
        return None if item_id.endswith("404") else item_id


@unittest.skipUnless(QT_AVAILABLE, "PyQt6 unavailable in test environment")
class UiBehaviorTests(unittest.TestCase):
    """Validate widget-backed layout extraction and restore."""
    @classmethod
    def setUpClass(cls):
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        from PyQt6.QtWidgets import QApplication

        cls._app = QApplication.instance() or QApplication([])

    def setUp(self):
        from app.app_state import app_state
        from app.ui.assignment_tabs import AssignmentTabs, QtLayoutView
        from core import profiles
        from core.session_state import AssignmentKind, extract

        self.app_state = app_state
        self.AssignmentTabs = AssignmentTabs
        self.QtLayoutView = QtLayoutView
        self.AssignmentKind = AssignmentKind
        self.extract = extract
        self.profiles = profiles

        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.root = Path(self.temp_dir.name)
        os.environ["CUEDECK_USER_DATA"] = self.temp_dir.name
        os.environ["APP_DB_PATH"] = str(self.root / "Data" / "app.db")
        app_state.reset()

    def tearDown(self):
        os.environ.pop("APP_DB_PATH", None)
        os.environ.pop("CUEDECK_USER_DATA", None)
        self.app_state.reset()

    def build_view(self):
        view = self.QtLayoutView(AnyCatalog())
        sections = {}
        for kind in self.AssignmentKind:
            sections[kind] = self.AssignmentTabs(kind)
            view.register(sections[kind])
        return view, sections

    def test_tabs_report_assignments(self):
        """Tab contents and custom names are read back from the widgets."""
        view, sections = self.build_view()
        hotkeys = sections[self.AssignmentKind.HOTKEYS]
        self.assertEqual(hotkeys.count(), 5)
        hotkeys.add_item(1, "song-1", slot="f1")
        hotkeys.add_item(1, "song-2", slot="f1")
        hotkeys.rename_tab(1, "Openers")
        sections[self.AssignmentKind.HOLDING_TANK].add_item(3, "song-3")

        state = self.extract(view)
        self.assertEqual(state.tabs[self.AssignmentKind.HOTKEYS][1].entries, {"f1": "song-2"})
        self.assertEqual(state.tabs[self.AssignmentKind.HOTKEYS][1].tab_name, "Openers")
        self.assertIsNone(state.tabs[self.AssignmentKind.HOTKEYS][2].tab_name)
        self.assertEqual(state.tabs[self.AssignmentKind.HOLDING_TANK][3].entries, ["song-3"])

    def test_numeric_tab_names_survive(self):
        """A tab renamed to a number other than its own keeps that name."""
        from app.services.session_persistence import SessionPersistence

        self.profiles.create_profile("Band")
        self.app_state.activate_profile("Band")
        view, sections = self.build_view()
        hotkeys = sections[self.AssignmentKind.HOTKEYS]
        hotkeys.rename_tab(2, "2024")
        hotkeys.rename_tab(3, " 3 ")

        state = self.extract(view)
        self.assertEqual(state.tabs[self.AssignmentKind.HOTKEYS][2].tab_name, "2024")
        self.assertIsNone(state.tabs[self.AssignmentKind.HOTKEYS][3].tab_name)
        SessionPersistence(view, AnyCatalog()).save()

        fresh_view, fresh_sections = self.build_view()
        persistence = SessionPersistence(fresh_view, AnyCatalog())
        self.assertTrue(persistence.load().loaded)
        persistence.unlock()
        fresh_hotkeys = fresh_sections[self.AssignmentKind.HOTKEYS]
        self.assertEqual(fresh_hotkeys.tab_name(2), "2024")
        self.assertEqual(fresh_hotkeys.tabText(1), "2024")

    def test_restore_into_widgets(self):
        """A saved layout restores into a freshly built widget tree."""
        from app.services.session_persistence import SessionPersistence

        self.profiles.create_profile("Band")
        self.app_state.activate_profile("Band")
        view, sections = self.build_view()
        sections[self.AssignmentKind.SOUNDBOARD].add_item(2, "song-7", slot="1-1")
        sections[self.AssignmentKind.SOUNDBOARD].add_item(2, "song-404", slot="1-2")
        SessionPersistence(view, AnyCatalog()).save()

        fresh_view, fresh_sections = self.build_view()
        persistence = SessionPersistence(fresh_view, AnyCatalog())
        result = persistence.load()
        self.assertTrue(result.loaded)
        persistence.unlock()
        board = fresh_sections[self.AssignmentKind.SOUNDBOARD].list_for(2)
        self.assertEqual(board.count(), 1)
        self.assertEqual(board.item(0).text(), "1-1: song-7")

    def test_partial_view_skips_missing_sections(self):
        """Kinds without widgets yet are skipped instead of failing."""
        view = self.QtLayoutView(AnyCatalog())
        view.register(self.AssignmentTabs(self.AssignmentKind.HOTKEYS, tab_numbers=(1, 2)))
        self.assertFalse(view.supports(self.AssignmentKind.SOUNDBOARD))
        self.assertTrue(view.has_tab(self.AssignmentKind.HOTKEYS, 2))
        self.assertFalse(view.has_tab(self.AssignmentKind.HOTKEYS, 3))

    def test_profile_panel_marks_active_profile(self):
        """The profile list highlights the active profile."""
        from app.ui.panels.profile_selector import ProfileSelectorPanel

        self.profiles.create_profile("Band")
        self.app_state.activate_profile("Band")
        panel = ProfileSelectorPanel()
        self.assertEqual(set(panel.profile_buttons), {"Band", "Default User"})
        self.assertIs(panel.selected_btn, panel.profile_buttons["Band"])

    def test_close_saves_layout(self):
        """Closing the window writes the current layout to the active profile."""
        from app.ui.app_shell import AppShell

        self.profiles.create_profile("Band")
        self.app_state.activate_profile("Band")
        window = AppShell(catalog=AnyCatalog())
        self.assertEqual(window.windowTitle(), "CueDeck - Band")
        window.show()
        window.sections[self.AssignmentKind.HOLDING_TANK].add_item(1, "song-1")
        window.close()
        state_file = self.root / "profiles" / "Band" / "state.json"
        self.assertTrue(state_file.exists())
        self.assertIn("song-1", state_file.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
