"""In-memory UI state: selected application, loaded settings and last runtime snapshot."""

from core.settings_store import SettingsRecord


class AppState:
    """Global UI state shared by the controllers and the settings panel."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.selected_index = 0
        self.application_key = None
        self.settings = SettingsRecord()
        self.screenshots_enabled = False
        self.awaiting_name = False

        self.runtime_state = None
        self.resolution = None

app_state = AppState()
