"""Profile switching tests: layouts follow their profile across switches."""
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from core import profiles
from core.errors import NotFoundError, ProfileError
from core.session_state import AssignmentKind, InMemoryView, extract


class AnyCatalog:
    def lookup(self, item_id):
        return item_id


class ProfileSwitchingTests(unittest.TestCase):
    """Validate profile switching behavior."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.root = Path(self.temp_dir.name)
        os.environ["CUEDECK_USER_DATA"] = self.temp_dir.name
        os.environ["APP_DB_PATH"] = str(self.root / "Data" / "app.db")
        from app.app_state import app_state
        from app.services.profile_switcher import ProfileSwitcher
        from app.services.session_persistence import SessionPersistence

        self.app_state = app_state
        app_state.reset()
        profiles.create_profile("One")
        profiles.create_profile("Two")
        app_state.activate_profile("One")

        self.view = InMemoryView()
        self.persistence = SessionPersistence(self.view, AnyCatalog())
        self.hook_calls = []
        self.switcher = ProfileSwitcher(self.persistence, after_restore=[self.hook])

    def tearDown(self):
        os.environ.pop("APP_DB_PATH", None)
        os.environ.pop("CUEDECK_USER_DATA", None)
        self.app_state.reset()

    def hook(self, name):
        self.hook_calls.append((name, self.persistence.is_restoring()))

    def test_layouts_follow_their_profile(self):
        """Each profile gets back the layout it had when it was left."""
        self.view.assign(AssignmentKind.HOLDING_TANK, 1, "one-song")
        outcome = self.switcher.switch_to("Two")
        self.assertTrue(outcome.switched)
        self.assertTrue(outcome.saved)
        self.assertFalse(outcome.restored)
        self.assertEqual(self.app_state.active_profile, "Two")
        self.assertTrue(extract(self.view).is_empty())

        self.view.assign(AssignmentKind.HOTKEYS, 1, "two-song", slot="f2")
        self.switcher.switch_to("One")
        state = extract(self.view)
        self.assertEqual(state.tabs[AssignmentKind.HOLDING_TANK][1].entries, ["one-song"])
        self.assertEqual(state.tabs[AssignmentKind.HOTKEYS][1].entries, {})

        self.switcher.switch_to("Two")
        state = extract(self.view)
        self.assertEqual(state.tabs[AssignmentKind.HOTKEYS][1].entries, {"f2": "two-song"})
        self.assertFalse(self.persistence.is_restoring())

    def test_hooks_run_before_unlock(self):
        """Post-restore hooks see the lock held, and it is released afterwards."""
        self.view.assign(AssignmentKind.HOLDING_TANK, 1, "song")
        self.switcher.switch_to("Two")
        self.switcher.switch_to("One")
        self.assertEqual(self.hook_calls, [("Two", False), ("One", True)])
        self.assertFalse(self.persistence.is_restoring())

    def test_failing_hook_still_unlocks(self):
        """A failing hook is logged and the lock is released."""
        self.view.assign(AssignmentKind.HOLDING_TANK, 1, "song")
        self.persistence.save()
        self.app_state.activate_profile("Two")

        def broken(name):
            raise RuntimeError("boom")

        self.switcher.add_after_restore(broken)
        with self.assertLogs("app.services.profile_switcher", level="ERROR"):
            self.switcher.switch_to("One")
        self.assertFalse(self.persistence.is_restoring())

    def test_switch_refused_while_startup_restore_holds_lock(self):
        """A switch during another restore leaves that restore's lock and layout alone."""
        self.view.assign(AssignmentKind.HOLDING_TANK, 1, "one-song")
        self.persistence.save()
        self.assertTrue(self.persistence.load().loaded)

        with self.assertRaises(ProfileError):
            self.switcher.switch_to("Two")
        self.assertTrue(self.persistence.is_restoring())
        self.assertEqual(self.app_state.active_profile, "One")
        self.assertFalse((self.root / "profiles" / "Two" / "state.json").exists())

        self.persistence.unlock()
        result = self.persistence.save()
        self.assertEqual(result.profile, "One")
        self.assertFalse((self.root / "profiles" / "Two" / "state.json").exists())

    def test_switch_does_not_release_lock_it_never_took(self):
        """If another restore grabs the lock mid-switch, the switcher leaves it held."""
        from app.services.session_persistence import RESTORE_IN_PROGRESS, LoadResult

        def foreign_restore(**kwargs):
            self.persistence.lock.acquire()
            return LoadResult(loaded=False, reason=RESTORE_IN_PROGRESS)

        with mock.patch.object(self.persistence, "load", side_effect=foreign_restore):
            with self.assertLogs("app.services.profile_switcher", level="ERROR"):
                self.switcher.switch_to("Two")
        self.assertTrue(self.persistence.is_restoring())
        self.assertFalse(self.persistence.save().saved)

    def test_controller_reports_switch_during_restore(self):
        """The controller turns a refused switch into a message."""
        from app.controllers.profile_controller import ProfileController

        self.view.assign(AssignmentKind.HOLDING_TANK, 1, "one-song")
        self.persistence.save()
        self.persistence.load()
        success, message = ProfileController(self.switcher).select_profile("Two")
        self.assertFalse(success)
        self.assertIn("restored", message)
        self.persistence.unlock()

    def test_switch_to_same_profile_is_noop(self):
        """Switching to the active profile does nothing."""
        with mock.patch.object(self.persistence, "switch_with_save") as switch:
            outcome = self.switcher.switch_to("One")
        self.assertFalse(outcome.switched)
        switch.assert_not_called()

    def test_switch_to_unknown_profile(self):
        """Unknown targets raise and leave the pointer alone."""
        with self.assertRaises(NotFoundError):
            self.switcher.switch_to("Nobody")
        self.assertEqual(self.app_state.active_profile, "One")

    def test_switch_updates_last_used(self):
        """The target's last_used timestamp moves forward."""
        before = profiles.get_profile("Two").last_used
        with mock.patch("core.profiles.now_ms", return_value=before + 5000):
            self.switcher.switch_to("Two")
        self.assertEqual(profiles.get_profile("Two").last_used, before + 5000)

    def test_controller_select_uses_switcher(self):
        """The controller routes selection through the switcher."""
        from app.controllers.profile_controller import ProfileController

        controller = ProfileController(self.switcher)
        success, _ = controller.select_profile("Two")
        self.assertTrue(success)
        self.assertEqual(self.app_state.active_profile, "Two")
        success, message = controller.select_profile("Nobody")
        self.assertFalse(success)
        self.assertIn("Nobody", message)


class ProfileControllerTests(unittest.TestCase):
    """Controller results for lifecycle operations."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        os.environ["CUEDECK_USER_DATA"] = self.temp_dir.name
        os.environ["APP_DB_PATH"] = str(Path(self.temp_dir.name) / "Data" / "app.db")
        from app.app_state import app_state
        from app.controllers.profile_controller import ProfileController

        self.app_state = app_state
        app_state.reset()
        self.controller = ProfileController()

    def tearDown(self):
        os.environ.pop("APP_DB_PATH", None)
        os.environ.pop("CUEDECK_USER_DATA", None)
        self.app_state.reset()

    def test_create_list_duplicate(self):
        self.assertTrue(self.controller.create_profile("Band")[0])
        success, message = self.controller.create_profile("band")
        self.assertFalse(success)
        self.assertIn("exists", message)
        self.assertTrue(self.controller.duplicate_profile("Band", "Band Copy")[0])
        success, names, _ = self.controller.list_profiles()
        self.assertTrue(success)
        self.assertEqual(names, ["Band", "Band Copy", "Default User"])

    def test_delete_refuses_active_profile(self):
        self.controller.create_profile("Band")
        self.app_state.activate_profile("Band")
        success, message = self.controller.delete_profile("Band")
        self.assertFalse(success)
        self.assertIn("active", message)
        self.app_state.activate_profile("Default User")
        self.assertTrue(self.controller.delete_profile("Band")[0])

    def test_os_errors_become_messages(self):
        with mock.patch("core.profiles.create_profile", side_effect=PermissionError("denied")):
            success, message = self.controller.create_profile("Band")
        self.assertFalse(success)
        self.assertIn("denied", message)

    def test_select_without_switcher(self):
        self.controller.create_profile("Band")
        self.assertTrue(self.controller.select_profile("Band")[0])
        self.assertEqual(self.app_state.active_profile, "Band")
        self.assertFalse(self.controller.select_profile("Missing")[0])


if __name__ == "__main__":
    unittest.main()
