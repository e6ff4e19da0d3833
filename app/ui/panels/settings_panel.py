import logging

from PyQt6.QtCore import QTimer, QUrl, Qt
from PyQt6.QtGui import QDesktopServices
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QGridLayout,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMessageBox,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from app.app_state import app_state
from app.controllers.runtime_controller import RuntimeStatusController
from app.controllers.settings_controller import ChangeOrigin, SettingsController
from app.services import display_text
from app.ui.theme import Colors, Styles
from app.ui.widget_utils import disable_button_focus_rect, disable_widget_interaction, set_silently
from app.workers.runtime_workers import RuntimeProbeWorker
from core import config
from core.layer_log import discover_application_names

_detached_workers = set()


def _release_worker(worker):
    _detached_workers.discard(worker)
    worker.deleteLater()


class SettingsPanel(QWidget):
    SHUTDOWN_WAIT_MS = 5000

    def __init__(self, store, catalog, client, auto_refresh=True):
        super().__init__()
        self.client = client
        self.settings_controller = SettingsController(store, catalog)
        self.runtime_controller = RuntimeStatusController()
        self.worker = None

        header = QLabel("OpenXR NIS Scaler")
        disable_widget_interaction(header)
        header.setStyleSheet(Styles.header())

        self.layer_label = QLabel()
        disable_widget_interaction(self.layer_label)
        self.recheck_btn = QPushButton("Re-check")
        self.recheck_btn.setStyleSheet(Styles.button())
        disable_button_focus_rect(self.recheck_btn)

        self.resolution_label = QLabel()
        disable_widget_interaction(self.resolution_label)
        self.resolution_label.setStyleSheet(Styles.info_label())

        select_label = QLabel("Select application:")
        disable_widget_interaction(select_label)
        select_label.setStyleSheet(Styles.info_label())
        self.application_list = QComboBox()
        self.delete_btn = QPushButton("Delete application profile")
        self.delete_btn.setStyleSheet(Styles.button())
        disable_button_focus_rect(self.delete_btn)

        self.enable_checkbox = QCheckBox("Enable NIS Scaling")
        self.enable_checkbox.setStyleSheet(Styles.checkbox())

        scaling_title = QLabel("Scaling")
        disable_widget_interaction(scaling_title)
        scaling_title.setStyleSheet(Styles.info_label())
        self.scaling_slider = QSlider(Qt.Orientation.Horizontal)
        self.scaling_slider.setRange(config.MIN_SCALING, config.MAX_SCALING)
        self.scaling_slider.setStyleSheet(Styles.slider())
        self.scaling_label = QLabel()
        disable_widget_interaction(self.scaling_label)
        self.scaling_label.setStyleSheet(Styles.info_label())

        sharpness_title = QLabel("Sharpness")
        disable_widget_interaction(sharpness_title)
        sharpness_title.setStyleSheet(Styles.info_label())
        self.sharpness_slider = QSlider(Qt.Orientation.Horizontal)
        self.sharpness_slider.setRange(config.MIN_SHARPNESS, config.MAX_SHARPNESS)
        self.sharpness_slider.setStyleSheet(Styles.slider())
        self.sharpness_label = QLabel()
        disable_widget_interaction(self.sharpness_label)
        self.sharpness_label.setStyleSheet(Styles.info_label())

        self.screenshot_checkbox = QCheckBox("Enable screenshots")
        self.screenshot_checkbox.setStyleSheet(Styles.checkbox())

        restart_note = QLabel("Modifying settings require the VR session to be restarted.")
        disable_widget_interaction(restart_note)
        restart_note.setStyleSheet(Styles.info_label(Colors.FG_MUTED))

        self.report_btn = QPushButton("Report issues")
        self.report_btn.setStyleSheet(Styles.link_button())
        disable_button_focus_rect(self.report_btn)

        status_row = QHBoxLayout()
        status_row.addWidget(self.layer_label)
        status_row.addStretch()
        status_row.addWidget(self.recheck_btn)

        picker_row = QHBoxLayout()
        picker_row.addWidget(self.application_list, 1)
        picker_row.addWidget(self.delete_btn)

        sliders = QGridLayout()
        sliders.addWidget(scaling_title, 0, 0)
        sliders.addWidget(self.scaling_slider, 0, 1)
        sliders.addWidget(self.scaling_label, 0, 2)
        sliders.addWidget(sharpness_title, 1, 0)
        sliders.addWidget(self.sharpness_slider, 1, 1)
        sliders.addWidget(self.sharpness_label, 1, 2)
        sliders.setColumnStretch(1, 1)

        layout = QVBoxLayout()
        layout.addWidget(header)
        layout.addLayout(status_row)
        layout.addWidget(self.resolution_label)
        layout.addWidget(select_label)
        layout.addLayout(picker_row)
        layout.addWidget(self.enable_checkbox)
        layout.addLayout(sliders)
        layout.addWidget(self.screenshot_checkbox)
        layout.addStretch()
        layout.addWidget(restart_note)
        layout.addWidget(self.report_btn)
        self.setLayout(layout)

        self.application_list.currentIndexChanged.connect(self.on_application_changed)
        self.delete_btn.clicked.connect(self.delete_application)
        self.enable_checkbox.toggled.connect(self.on_enabled_toggled)
        self.scaling_slider.valueChanged.connect(self.on_scaling_changed)
        self.sharpness_slider.valueChanged.connect(self.on_sharpness_changed)
        self.screenshot_checkbox.toggled.connect(self.on_screenshots_toggled)
        self.recheck_btn.clicked.connect(lambda: self.refresh_runtime(explicit=True))
        self.report_btn.clicked.connect(self.open_issues_page)

        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(config.refresh_interval_ms())
        self.refresh_timer.timeout.connect(self.refresh_runtime)

        self.reload_entries()
        self.select_application(0)
        self.render_runtime()
        if auto_refresh:
            self.refresh_runtime(explicit=True)
            self.refresh_timer.start()

    # ---- application selection ----
    def reload_entries(self):
        set_silently(self.application_list, self._fill_entries, self.settings_controller.list_entries())

    def _fill_entries(self, entries):
        self.application_list.clear()
        self.application_list.addItems(entries)
        self.application_list.setCurrentIndex(app_state.selected_index)

    def select_application(self, index):
        success, message = self.settings_controller.select(index)
        if not success:
            QMessageBox.warning(self, "Error", message)
        elif app_state.awaiting_name:
            self.prompt_for_application(message)
        set_silently(self.application_list, self.application_list.setCurrentIndex, app_state.selected_index)
        self.render_settings()

    def on_application_changed(self, index):
        if index < 0:
            return
        self.select_application(index)

    def prompt_for_application(self, message):
        QMessageBox.information(self, "Important", message)
        suggestions = [
            name for name in discover_application_names()
            if name not in self.settings_controller.catalog.identities()
        ]
        while True:
            if suggestions:
                name, ok = QInputDialog.getItem(self, "Name", "Application name:", suggestions, 0, True)
            else:
                name, ok = QInputDialog.getText(self, "Name", "Application name:")
            if not ok:
                self.settings_controller.cancel_add()
                return
            success, message = self.settings_controller.add_application(name)
            if success or not app_state.awaiting_name:
                break
            QMessageBox.warning(self, "Add application", message)
        if not success:
            QMessageBox.warning(self, "Add application", message)
        self.reload_entries()

    def delete_application(self):
        success, message = self.settings_controller.delete_selected()
        if not success:
            QMessageBox.warning(self, "Delete application profile", message)
            return
        self.reload_entries()
        self.render_settings()

    # ---- settings edits ----
    def on_enabled_toggled(self, checked):
        self._report(self.settings_controller.update_settings(ChangeOrigin.USER_EDIT, enabled=checked))

    def on_scaling_changed(self, value):
        self._report(self.settings_controller.update_settings(ChangeOrigin.USER_EDIT, scaling_percent=value))

    def on_sharpness_changed(self, value):
        self._report(self.settings_controller.update_settings(ChangeOrigin.USER_EDIT, sharpness_percent=value))

    def on_screenshots_toggled(self, checked):
        self._report(self.settings_controller.apply_screenshots(checked, ChangeOrigin.USER_EDIT))

    def _report(self, outcome):
        success, message = outcome
        if not success:
            QMessageBox.warning(self, "Error", message)
        self.render_settings()

    def render_settings(self):
        settings = app_state.settings
        set_silently(self.enable_checkbox, self.enable_checkbox.setChecked, settings.enabled)
        set_silently(self.scaling_slider, self.scaling_slider.setValue, settings.scaling_percent)
        set_silently(self.sharpness_slider, self.sharpness_slider.setValue, settings.sharpness_percent)
        set_silently(self.screenshot_checkbox, self.screenshot_checkbox.setChecked, app_state.screenshots_enabled)
        self.scaling_label.setText(display_text.scaling_text(settings.scaling_percent, app_state.resolution))
        self.sharpness_label.setText(display_text.sharpness_text(settings.sharpness_percent))
        self._apply_control_states()

    def _apply_control_states(self):
        states = self.settings_controller.control_states(self.runtime_controller.layer_active)
        self.application_list.setEnabled(states.picker)
        self.enable_checkbox.setEnabled(states.enable_checkbox)
        self.screenshot_checkbox.setEnabled(states.screenshots)
        self.scaling_slider.setEnabled(states.sliders)
        self.sharpness_slider.setEnabled(states.sliders)
        self.delete_btn.setEnabled(states.delete)

    # ---- runtime status ----
    def refresh_runtime(self, explicit=False):
        ticket = self.runtime_controller.begin_refresh(explicit=explicit)
        if ticket is None:
            return
        self.worker = RuntimeProbeWorker(self.client, ticket, parent=self)
        self.worker.finished.connect(self._on_worker_finished)
        self.worker.probeSucceeded.connect(self.on_probe_succeeded)
        self.worker.probeFailed.connect(self.on_probe_failed)
        self.worker.start()

    def _on_worker_finished(self):
        worker = self.sender()
        if worker is self.worker:
            self.worker = None
        if worker is not None:
            worker.deleteLater()

    def on_probe_succeeded(self, ticket, runtime_state):
        if not self.runtime_controller.apply_result(ticket, runtime_state):
            return
        self.render_runtime()

    def on_probe_failed(self, ticket, message):
        if not self.runtime_controller.apply_failure(ticket, message):
            return
        self.render_runtime()
        if self.runtime_controller.take_failure_report():
            QMessageBox.critical(self, "Error", "Failed to initialize OpenXR")

    def render_runtime(self):
        text, color = display_text.layer_status_text(self.runtime_controller.status)
        self.layer_label.setText(text)
        self.layer_label.setStyleSheet(Styles.info_label(color, bold=True))
        runtime_state = app_state.runtime_state
        self.layer_label.setToolTip(
            display_text.layer_tooltip(runtime_state.active_layers if runtime_state else ())
        )
        self.resolution_label.setText(display_text.resolution_text(app_state.resolution))
        self.render_settings()

    def open_issues_page(self):
        QDesktopServices.openUrl(QUrl(config.ISSUES_URL))

    def on_panel_close(self):
        self.refresh_timer.stop()
        self.runtime_controller.shutdown()
        worker = self.worker
        if worker is None or not worker.isRunning():
            return
        if worker.wait(self.SHUTDOWN_WAIT_MS):
            return
        # Still blocked in the runtime; it must outlive this panel.
        logging.warning("Runtime query still running at close; detaching worker")
        self.worker = None
        worker.finished.disconnect(self._on_worker_finished)
        worker.setParent(None)
        _detached_workers.add(worker)
        worker.finished.connect(lambda: _release_worker(worker))
