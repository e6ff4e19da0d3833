"""Worker thread for OpenXR runtime queries."""
import logging

from PyQt6.QtCore import QThread, pyqtSignal

from core.errors import RuntimeUnavailableError


class RuntimeProbeWorker(QThread):
    """Query active layers and headset resolution off the UI thread."""
    probeSucceeded = pyqtSignal(int, object)
    probeFailed = pyqtSignal(int, str)

    def __init__(self, client, ticket, parent=None):
        super().__init__(parent)
        self.client = client
        self.ticket = ticket

    def run(self):
        """Emit a LiveRuntimeState or an error message tagged with the ticket."""
        try:
            state = self.client.probe()
        except RuntimeUnavailableError as exc:
            logging.warning("OpenXR runtime unavailable: %s", exc)
            self.probeFailed.emit(self.ticket, str(exc))
            return
        except Exception as exc:
            logging.error("OpenXR runtime query failed", exc_info=True)
            self.probeFailed.emit(self.ticket, f"Runtime query failed ({exc})")
            return
        self.probeSucceeded.emit(self.ticket, state)
