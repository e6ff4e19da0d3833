from pathlib import Path

from PyQt6.QtCore import QSettings
from PyQt6.QtGui import QIcon
from PyQt6.QtWidgets import QApplication, QStyle, QVBoxLayout, QWidget

from app.ui.panels.settings_panel import SettingsPanel


class AppShell(QWidget):
    def __init__(self, store, catalog, client, auto_refresh=True):
        super().__init__()

        self.settings = QSettings()

        self.setWindowTitle("OpenXR NIS Scaler configuration tool")
        self.setGeometry(300, 300, 616, 616)
        geometry = self.settings.value("ui/geometry")
        if geometry is not None:
            self.restoreGeometry(geometry)

        self.load_app_icon()

        self.panel = SettingsPanel(store, catalog, client, auto_refresh=auto_refresh)

        root_layout = QVBoxLayout()
        root_layout.addWidget(self.panel)
        self.setLayout(root_layout)

    def load_app_icon(self):
        app = QApplication.instance()
        bundled_icon_path = Path(__file__).resolve().parents[1] / "assets" / "app_icon.png"
        icon = QIcon(str(bundled_icon_path))
        if icon.isNull():
            icon = self.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon)
        self.setWindowIcon(icon)
        if app:
            app.setWindowIcon(icon)

    def closeEvent(self, event):
        self.settings.setValue("ui/geometry", self.saveGeometry())
        self.panel.on_panel_close()
        super().closeEvent(event)
