"""Settings controller tests: change origins, selection and the add-application flow."""
import tempfile
import unittest
from pathlib import Path

from app.app_state import AppState
from app.controllers.settings_controller import NAME_PROMPT, ChangeOrigin, SettingsController
from core.applications import ApplicationCatalog
from core.errors import StoreUnavailableError
from core.hive import SqliteHive
from core.settings_store import SettingsRecord, SettingsStore


class RecordingHive(SqliteHive):
    """SQLite hive that counts writes and can be switched offline."""

    def __init__(self, db_path):
        super().__init__(db_path)
        self.writes = 0
        self.offline = False

    def _check(self):
        if self.offline:
            raise StoreUnavailableError("registry unavailable")

    def get_value(self, path, name):
        self._check()
        return super().get_value(path, name)

    def set_values(self, path, values):
        self._check()
        self.writes += 1
        super().set_values(path, values)

    def create_key(self, path):
        self._check()
        super().create_key(path)


class SettingsControllerTests(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.hive = RecordingHive(Path(self.temp_dir.name) / "Data" / "app.db")
        self.store = SettingsStore(self.hive)
        self.catalog = ApplicationCatalog(self.store)
        self.state = AppState()
        self.controller = SettingsController(self.store, self.catalog, state=self.state)

    def test_reload_never_writes(self):
        self.store.save("FS2020", SettingsRecord(True, 70, 30))
        writes = self.hive.writes
        success, _message = self.controller.select(1)
        self.assertTrue(success)
        self.assertEqual(self.state.application_key, "FS2020")
        self.assertEqual(self.state.settings, SettingsRecord(True, 70, 30))
        self.controller.apply_settings(SettingsRecord(False, 99, 1), ChangeOrigin.RELOAD)
        self.assertEqual(self.hive.writes, writes)

    def test_user_edit_writes_through_clamped(self):
        self.controller.select(1)
        success, _message = self.controller.update_settings(ChangeOrigin.USER_EDIT, scaling_percent=20)
        self.assertTrue(success)
        self.assertEqual(self.store.load("FS2020").scaling_percent, 50)
        self.assertEqual(self.state.settings.scaling_percent, 50)

    def test_global_selection_edits_root_record(self):
        self.controller.select(0)
        self.controller.update_settings(ChangeOrigin.USER_EDIT, enabled=True)
        self.assertTrue(self.store.load(None).enabled)
        self.assertFalse(self.store.load("FS2020").enabled)

    def test_screenshots_user_edit(self):
        self.controller.apply_screenshots(True, ChangeOrigin.USER_EDIT)
        self.assertTrue(self.store.screenshots_enabled())
        self.assertTrue(self.state.screenshots_enabled)

    def test_sentinel_asks_for_name_and_cancel_reverts_to_global(self):
        self.controller.select(1)
        success, message = self.controller.select(self.catalog.add_index)
        self.assertTrue(success)
        self.assertEqual(message, NAME_PROMPT)
        self.assertTrue(self.state.awaiting_name)
        self.controller.cancel_add()
        self.assertFalse(self.state.awaiting_name)
        self.assertEqual(self.state.selected_index, 0)
        self.assertIsNone(self.state.application_key)

    def test_add_application_selects_new_entry(self):
        self.controller.select(self.catalog.add_index)
        success, _message = self.controller.add_application("Hello XR")
        self.assertTrue(success)
        self.assertFalse(self.state.awaiting_name)
        self.assertEqual(self.state.application_key, "Hello XR")
        self.assertEqual(self.controller.list_entries()[self.state.selected_index], "Hello XR")
        self.assertEqual(self.state.settings, SettingsRecord())

    def test_invalid_name_keeps_prompt_open(self):
        self.controller.select(self.catalog.add_index)
        success, message = self.controller.add_application("   ")
        self.assertFalse(success)
        self.assertTrue(message)
        self.assertTrue(self.state.awaiting_name)

    def test_store_failure_after_key_created_closes_prompt(self):
        self.controller.select(self.catalog.add_index)
        original_create_key = self.hive.create_key

        def create_then_go_offline(path):
            original_create_key(path)
            self.hive.offline = True

        self.hive.create_key = create_then_go_offline
        success, message = self.controller.add_application("MyGame")
        self.assertFalse(success)
        self.assertIn("Error loading settings", message)
        self.assertFalse(self.state.awaiting_name)
        self.assertIn("MyGame", self.controller.list_entries())
        self.assertEqual(self.state.selected_index, 0)

    def test_store_failure_while_creating_key_closes_prompt(self):
        self.controller.select(self.catalog.add_index)
        self.hive.offline = True
        success, _message = self.controller.add_application("MyGame")
        self.assertFalse(success)
        self.assertFalse(self.state.awaiting_name)
        self.assertNotIn("MyGame", self.controller.list_entries())

    def test_store_failure_on_select_leaves_state_unchanged(self):
        self.controller.select(1)
        self.hive.offline = True
        success, message = self.controller.select(0)
        self.assertFalse(success)
        self.assertIn("Error loading settings", message)
        self.assertEqual(self.state.selected_index, 1)
        self.assertEqual(self.state.application_key, "FS2020")

    def test_store_failure_on_edit_keeps_previous_settings(self):
        self.controller.select(1)
        self.hive.offline = True
        success, _message = self.controller.update_settings(ChangeOrigin.USER_EDIT, sharpness_percent=5)
        self.assertFalse(success)
        self.assertEqual(self.state.settings.sharpness_percent, 50)

    def test_delete_selected(self):
        self.controller.add_application("Hello XR")
        success, _message = self.controller.delete_selected()
        self.assertTrue(success)
        self.assertNotIn("Hello XR", self.controller.list_entries())
        self.assertEqual(self.state.selected_index, 0)

    def test_delete_protected_entry_is_refused(self):
        for index in (0, 1):
            with self.subTest(index=index):
                self.controller.select(index)
                success, _message = self.controller.delete_selected()
                self.assertFalse(success)
                self.assertEqual(self.state.selected_index, index)

    def test_control_states_follow_layer_and_enable(self):
        self.controller.select(0)
        states = self.controller.control_states(layer_active=False)
        self.assertFalse(states.picker or states.enable_checkbox or states.sliders or states.delete)
        states = self.controller.control_states(layer_active=True)
        self.assertTrue(states.picker)
        self.assertFalse(states.sliders)
        self.assertFalse(states.delete)
        self.controller.add_application("Hello XR")
        self.controller.update_settings(ChangeOrigin.USER_EDIT, enabled=True)
        states = self.controller.control_states(layer_active=True)
        self.assertTrue(states.sliders)
        self.assertTrue(states.delete)
