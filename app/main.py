import logging
import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from app.ui.app_shell import AppShell
from core.applications import ApplicationCatalog
from core.errors import StoreUnavailableError
from core.logging_setup import setup_logging
from core.runtime_client import RuntimeIntrospectionClient
from core.settings_store import SettingsStore


def main():
    setup_logging()
    app = QApplication(sys.argv)
    app.setOrganizationName("OpenXR_NIS_Scaler")
    app.setApplicationName("NIS Scaler Config Tool")

    try:
        store = SettingsStore()
        catalog = ApplicationCatalog(store)
    except StoreUnavailableError as exc:
        logging.error("Settings store unavailable: %s", exc)
        QMessageBox.critical(None, "Error", f"Error loading settings: {exc}")
        return 1

    window = AppShell(store, catalog, RuntimeIntrospectionClient())
    window.show()
    return app.exec()


# ---------------- ENTRY ----------------
if __name__ == "__main__":
    sys.exit(main())
