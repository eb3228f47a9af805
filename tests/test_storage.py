"""Storage tests for the SQLite catalog, app state and legacy settings."""
import os
import tempfile
import unittest
from pathlib import Path

from core import storage


class StorageTests(unittest.TestCase):
    """Validate SQLite storage behavior."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        os.environ["CUEDECK_USER_DATA"] = self.temp_dir.name
        os.environ["APP_DB_PATH"] = str(Path(self.temp_dir.name) / "Data" / "app.db")

    def tearDown(self):
        os.environ.pop("APP_DB_PATH", None)
        os.environ.pop("CUEDECK_USER_DATA", None)

    def test_catalog_lookup(self):
        """Songs added to the catalog resolve through SongCatalog.lookup."""
        storage.add_song("song-1", "Intro", "House Band", "0:42", "intro.mp3")
        catalog = storage.SongCatalog()
        record = catalog.lookup("song-1")
        self.assertEqual(record.title, "Intro")
        self.assertEqual(record.label, "Intro by House Band (0:42)")
        self.assertIsNone(catalog.lookup("song-404"))

    def test_delete_songs(self):
        """Deleted songs no longer resolve."""
        storage.add_song("a")
        storage.add_song("b")
        storage.delete_songs(["a"])
        self.assertIsNone(storage.get_song("a"))
        self.assertIsNotNone(storage.get_song("b"))
        self.assertEqual(storage.get_song("b").label, "[Unknown Title] by [Unknown Artist] ([??:??])")

    def test_app_state_round_trip(self):
        """App state values persist and can be cleared."""
        storage.set_app_state("active_profile", "Band")
        self.assertEqual(storage.get_app_state("active_profile"), "Band")
        storage.set_app_state("active_profile", None)
        self.assertIsNone(storage.get_app_state("active_profile"))

    def test_default_db_lives_in_user_data(self):
        """Without APP_DB_PATH the database sits in the user data root."""
        os.environ.pop("APP_DB_PATH")
        self.assertEqual(storage._db_path(), Path(self.temp_dir.name) / "library.db")

    def test_legacy_settings(self):
        """Legacy settings decode JSON and report bad values."""
        legacy = storage.LegacySettings()
        self.assertFalse(legacy.has("font_size"))
        self.assertEqual(legacy.get("font_size", None), None)
        with self.assertRaises(KeyError):
            legacy.get("font_size")

        storage.set_legacy_setting("font_size", {"success": True, "value": 13})
        self.assertTrue(legacy.has("font_size"))
        self.assertEqual(legacy.get("font_size"), {"success": True, "value": 13})

        storage.set_app_state("screen_mode", "not-json")
        with self.assertRaises(ValueError):
            legacy.get("screen_mode")


if __name__ == "__main__":
    unittest.main()
