"""UI behavior tests for the settings panel."""
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock


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


class IdleClient:
    """Runtime client stand-in; the tests feed probe results directly."""

    def probe(self):
        raise AssertionError("probe() must not run in UI tests")


@unittest.skipUnless(QT_AVAILABLE, "PyQt6 unavailable in test environment")
class UiBehaviorTests(unittest.TestCase):
    """Validate label text and control enablement driven by runtime results."""
    @classmethod
    def setUpClass(cls):
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        from PyQt6.QtWidgets import QApplication

        cls._app = QApplication.instance() or QApplication([])

    def setUp(self):
        from app.app_state import app_state
        from app.ui.panels.settings_panel import SettingsPanel
        from core.applications import ApplicationCatalog
        from core.hive import SqliteHive
        from core.settings_store import SettingsStore

        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        app_state.reset()
        self.addCleanup(app_state.reset)
        self.app_state = app_state

        self.store = SettingsStore(SqliteHive(Path(self.temp_dir.name) / "Data" / "app.db"))
        self.catalog = ApplicationCatalog(self.store)
        self.panel = SettingsPanel(self.store, self.catalog, IdleClient(), auto_refresh=False)
        self.addCleanup(self.panel.deleteLater)

    def runtime_state(self, active=True, width=2016, height=2224):
        from core import config
        from core.runtime_client import DisplayResolution, LiveRuntimeState

        layers = {"XR_APILAYER_other"}
        if active:
            layers.add(config.LAYER_NAME)
        return LiveRuntimeState(active_layers=frozenset(layers), resolution=DisplayResolution(width, height))

    def deliver(self, runtime_state):
        ticket = self.panel.runtime_controller.begin_refresh(explicit=True)
        self.panel.on_probe_succeeded(ticket, runtime_state)

    def test_initial_state_before_first_result(self):
        self.assertEqual(self.panel.layer_label.text(), "Layer state is not known")
        self.assertEqual(self.panel.resolution_label.text(), "OpenXR resolution: Please turn on headset")
        self.assertFalse(self.panel.application_list.isEnabled())
        self.assertFalse(self.panel.scaling_slider.isEnabled())
        self.assertEqual(self.panel.application_list.currentIndex(), 0)
        self.assertEqual(self.panel.application_list.itemText(0), "All other applications")

    def test_active_layer_enables_controls_and_shows_resolution(self):
        self.deliver(self.runtime_state(active=True))
        self.assertEqual(self.panel.layer_label.text(), "NIS Scaler layer is active")
        self.assertEqual(self.panel.resolution_label.text(), "OpenXR resolution: 2016 x 2224")
        self.assertEqual(self.panel.scaling_label.text(), "80%\n1612 x 1779")
        self.assertTrue(self.panel.application_list.isEnabled())
        self.assertTrue(self.panel.enable_checkbox.isEnabled())
        self.assertFalse(self.panel.scaling_slider.isEnabled())
        self.assertFalse(self.panel.delete_btn.isEnabled())

    def test_headset_off_shows_prompt(self):
        self.deliver(self.runtime_state(active=False, width=0))
        self.assertEqual(self.panel.layer_label.text(), "NIS Scaler layer is NOT active")
        self.assertEqual(self.panel.resolution_label.text(), "OpenXR resolution: Please turn on headset")
        self.assertFalse(self.panel.application_list.isEnabled())

    def test_user_edits_write_through(self):
        self.deliver(self.runtime_state(active=True))
        self.panel.application_list.setCurrentIndex(1)
        self.assertEqual(self.app_state.application_key, "FS2020")
        self.panel.enable_checkbox.setChecked(True)
        self.assertTrue(self.panel.scaling_slider.isEnabled())
        self.panel.scaling_slider.setValue(60)
        stored = self.store.load("FS2020")
        self.assertTrue(stored.enabled)
        self.assertEqual(stored.scaling_percent, 60)
        self.assertFalse(self.store.load(None).enabled)

    def test_selecting_application_loads_its_values(self):
        from core.settings_store import SettingsRecord

        self.store.save("FS2020", SettingsRecord(True, 55, 15))
        self.deliver(self.runtime_state(active=True))
        self.panel.application_list.setCurrentIndex(1)
        self.assertEqual(self.panel.scaling_slider.value(), 55)
        self.assertEqual(self.panel.sharpness_slider.value(), 15)
        self.assertEqual(self.panel.sharpness_label.text(), "15%")
        self.assertTrue(self.panel.enable_checkbox.isChecked())

    def test_stale_result_is_ignored(self):
        ticket = self.panel.runtime_controller.begin_refresh(explicit=True)
        self.panel.runtime_controller.shutdown()
        self.panel.on_probe_succeeded(ticket, self.runtime_state(active=True))
        self.assertEqual(self.panel.layer_label.text(), "Layer state is not known")

    def test_runtime_failure_is_shown_once(self):
        with mock.patch("app.ui.panels.settings_panel.QMessageBox.critical") as critical:
            ticket = self.panel.runtime_controller.begin_refresh(explicit=True)
            self.panel.on_probe_failed(ticket, "no runtime")
            ticket = self.panel.runtime_controller.begin_refresh(explicit=True)
            self.panel.on_probe_failed(ticket, "no runtime")
        self.assertEqual(critical.call_count, 1)
        self.assertEqual(self.panel.layer_label.text(), "OpenXR runtime is not available")

    def test_labels_are_not_focusable(self):
        from PyQt6.QtCore import Qt
        from PyQt6.QtWidgets import QLabel

        for label in self.panel.findChildren(QLabel):
            with self.subTest(text=label.text()):
                self.assertEqual(label.focusPolicy(), Qt.FocusPolicy.NoFocus)
                self.assertEqual(label.textInteractionFlags(), Qt.TextInteractionFlag.NoTextInteraction)


class BlockingClient:
    """Runtime client whose probe blocks until released."""

    def __init__(self):
        import threading

        self.started = threading.Event()
        self.release = threading.Event()

    def probe(self):
        from core.errors import RuntimeUnavailableError

        self.started.set()
        self.release.wait(10)
        raise RuntimeUnavailableError("released")


@unittest.skipUnless(QT_AVAILABLE, "PyQt6 unavailable in test environment")
class PanelShutdownTests(unittest.TestCase):
    """Closing the panel while a runtime query is blocked."""
    @classmethod
    def setUpClass(cls):
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        from PyQt6.QtWidgets import QApplication

        cls._app = QApplication.instance() or QApplication([])

    def setUp(self):
        from app.app_state import app_state
        from core.applications import ApplicationCatalog
        from core.hive import SqliteHive
        from core.settings_store import SettingsStore

        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        app_state.reset()
        self.addCleanup(app_state.reset)
        self.store = SettingsStore(SqliteHive(Path(self.temp_dir.name) / "Data" / "app.db"))
        self.catalog = ApplicationCatalog(self.store)

    def test_blocked_worker_is_detached_from_closing_panel(self):
        from app.ui.panels import settings_panel

        client = BlockingClient()
        self.addCleanup(client.release.set)
        panel = settings_panel.SettingsPanel(self.store, self.catalog, client, auto_refresh=False)
        panel.SHUTDOWN_WAIT_MS = 10
        panel.refresh_runtime(explicit=True)
        worker = panel.worker
        self.assertTrue(client.started.wait(5))

        panel.on_panel_close()

        self.assertIsNone(panel.worker)
        self.assertIsNone(worker.parent())
        self.assertIn(worker, settings_panel._detached_workers)
        panel.deleteLater()
        self._app.processEvents()

        client.release.set()
        self.assertTrue(worker.wait(5000))
        self._app.processEvents()
        self.assertNotIn(worker, settings_panel._detached_workers)
