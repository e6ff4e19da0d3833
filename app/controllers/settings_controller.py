"""Application selection and settings edits for the settings panel.

Every settings change carries an explicit ChangeOrigin. USER_EDIT writes
through to the store; RELOAD only updates the in-memory state, so populating
the widgets from storage never writes anything back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from app.app_state import app_state
from core import config
from core.applications import ApplicationCatalog
from core.errors import ProtectedEntryError, StoreUnavailableError, ValidationError
from core.settings_store import SettingsRecord, SettingsStore

LOG = logging.getLogger(__name__)

NAME_PROMPT = (
    "IMPORTANT: The name to enter at the following prompt is the name that the application "
    "passes to OpenXR. This name is very likely not identical to the name of the "
    "program/shortcut. Please take a look at the "
    f"%LocalAppData%\\{config.LAYER_NAME}.log file after starting up the application."
)


class ChangeOrigin(str, Enum):
    USER_EDIT = "user_edit"
    RELOAD = "reload"


@dataclass(frozen=True)
class ControlStates:
    picker: bool
    enable_checkbox: bool
    screenshots: bool
    sliders: bool
    delete: bool


class SettingsController:
    def __init__(self, store: SettingsStore, catalog: ApplicationCatalog, state=None):
        self.store = store
        self.catalog = catalog
        self.state = state or app_state

    def list_entries(self):
        """
        Mutates: none.
        Returns: list[str]
        """
        return self.catalog.display_entries()

    def select(self, index):
        """Mutates: selection, settings, awaiting_name. Returns: (bool, str)."""
        entries = self.catalog.display_entries()
        if index < 0 or index >= len(entries):
            index = 0
        if index == self.catalog.add_index:
            self.state.awaiting_name = True
            return True, NAME_PROMPT

        key = self.catalog.resolve_key(entries[index])
        try:
            record = self.store.load(key)
            screenshots = self.store.screenshots_enabled()
        except StoreUnavailableError as exc:
            LOG.error("Error loading settings for %s: %s", key or "<global>", exc)
            return False, f"Error loading settings: {exc}"

        self.state.awaiting_name = False
        self.state.selected_index = index
        self.state.application_key = key
        self.apply_settings(record, ChangeOrigin.RELOAD)
        self.apply_screenshots(screenshots, ChangeOrigin.RELOAD)
        return True, "Settings loaded."

    def add_application(self, raw_name):
        """Mutates: catalog, selection. Returns: (bool, str). Keeps awaiting_name on bad input."""
        try:
            identity = self.catalog.add_identity(raw_name)
        except ValidationError as exc:
            return False, str(exc)
        except StoreUnavailableError as exc:
            LOG.error("Error adding application %r: %s", raw_name, exc)
            self._abort_add()
            return False, f"Error updating settings: {exc}"
        success, message = self.select(self.catalog.index_of(identity))
        if not success:
            self._abort_add()
            return False, message
        return True, f"Application '{identity}' selected."

    def _abort_add(self):
        """Store failure during add: close the prompt and fall back to the global entry."""
        self.state.awaiting_name = False
        self.select(0)

    def cancel_add(self):
        """Mutates: selection (back to the global default). Returns: (bool, str)."""
        self.state.awaiting_name = False
        return self.select(0)

    def delete_selected(self):
        """Mutates: catalog, selection. Returns: (bool, str)."""
        key = self.state.application_key
        try:
            self.catalog.remove_identity(key)
        except (ProtectedEntryError, ValidationError) as exc:
            return False, str(exc)
        except StoreUnavailableError as exc:
            LOG.error("Error deleting %s: %s", key, exc)
            return False, f"Error updating settings: {exc}"
        self.select(0)
        return True, f"Application '{key}' deleted."

    def apply_settings(self, record: SettingsRecord, origin: ChangeOrigin):
        """Single write path for per-application settings. Returns: (bool, str)."""
        record = record.clamped()
        if origin is ChangeOrigin.RELOAD:
            self.state.settings = record
            return True, "Settings reloaded."
        try:
            stored = self.store.save(self.state.application_key, record)
        except StoreUnavailableError as exc:
            LOG.error("Error updating settings: %s", exc)
            return False, f"Error updating settings: {exc}"
        self.state.settings = stored
        return True, "Settings saved."

    def update_settings(self, origin: ChangeOrigin, **changes):
        return self.apply_settings(self.state.settings.with_changes(**changes), origin)

    def apply_screenshots(self, enabled: bool, origin: ChangeOrigin):
        if origin is ChangeOrigin.RELOAD:
            self.state.screenshots_enabled = bool(enabled)
            return True, "Settings reloaded."
        try:
            self.store.set_screenshots_enabled(bool(enabled))
        except StoreUnavailableError as exc:
            LOG.error("Error updating screenshot setting: %s", exc)
            return False, f"Error updating settings: {exc}"
        self.state.screenshots_enabled = bool(enabled)
        return True, "Settings saved."

    def control_states(self, layer_active: bool) -> ControlStates:
        can_delete = not self.catalog.is_protected(self.state.application_key)
        return ControlStates(
            picker=layer_active,
            enable_checkbox=layer_active,
            screenshots=layer_active,
            sliders=layer_active and self.state.settings.enabled,
            delete=layer_active and can_delete,
        )
