"""Catalog of application identities shown in the application picker.

Order: global default, presets, user-added applications (as discovered under
the settings root), then the "add new" sentinel.
"""
from __future__ import annotations

import logging

from core import config
from core.errors import ProtectedEntryError, ValidationError
from core.settings_store import SettingsStore

LOG = logging.getLogger(__name__)


def identity_of(entry: str) -> str:
    """Return the identity part of "identity -- friendly name"."""
    return entry.split(config.FRIENDLY_SEPARATOR, 1)[0]


def validate_identity(raw_name):
    """Return (valid, message) for a name typed by the user."""
    name = identity_of(raw_name or "").strip()
    if not name:
        return False, "Application name cannot be empty."
    if "\\" in name:
        return False, "Application name cannot include backslashes."
    if name in {config.GLOBAL_ENTRY, config.ADD_ENTRY}:
        return False, "Application name is not allowed."
    return True, ""


class ApplicationCatalog:
    def __init__(self, store: SettingsStore, presets=config.PRESET_ENTRIES):
        self.store = store
        self.presets = list(presets)
        self.user_entries: list[str] = []
        self.reload()

    def reload(self) -> None:
        """Rediscover user-added applications from the settings root."""
        known = {identity_of(entry) for entry in self.presets}
        discovered = []
        for name in self.store.list_application_keys():
            if name in known:
                continue
            known.add(name)
            discovered.append(name)
        self.user_entries = discovered
        LOG.info("Loaded %d user-added applications", len(discovered))

    def display_entries(self) -> list[str]:
        return [config.GLOBAL_ENTRY, *self.presets, *self.user_entries, config.ADD_ENTRY]

    def identities(self) -> list[str]:
        return [identity_of(entry) for entry in (*self.presets, *self.user_entries)]

    @property
    def add_index(self) -> int:
        return len(self.display_entries()) - 1

    def is_add_entry(self, selection: str) -> bool:
        return selection == config.ADD_ENTRY

    def is_preset(self, identity: str | None) -> bool:
        return identity in {identity_of(entry) for entry in self.presets}

    def is_protected(self, identity: str | None) -> bool:
        return identity is None or self.is_preset(identity)

    def resolve_key(self, selection: str) -> str | None:
        """Map a display entry to its settings key; None is the global default."""
        if selection == config.GLOBAL_ENTRY:
            return None
        if self.is_add_entry(selection):
            raise ValidationError("The add entry is not an application.")
        return identity_of(selection)

    def index_of(self, identity: str | None) -> int:
        if identity is None:
            return 0
        for index, entry in enumerate(self.display_entries()):
            if index in (0, self.add_index):
                continue
            if identity_of(entry) == identity:
                return index
        raise ValidationError(f"Unknown application '{identity}'.")

    def add_identity(self, raw_name: str) -> str:
        """Add a user application, or return the existing one with the same identity."""
        valid, message = validate_identity(raw_name)
        if not valid:
            raise ValidationError(message)
        identity = identity_of(raw_name).strip()
        if identity in self.identities():
            LOG.info("Application %s already exists; selecting it", identity)
            return identity
        self.store.ensure_key(identity)
        self.user_entries.append(identity)
        LOG.info("Added application %s", identity)
        return identity

    def remove_identity(self, identity: str | None) -> None:
        if self.is_protected(identity):
            raise ProtectedEntryError(f"'{identity or config.GLOBAL_ENTRY}' cannot be deleted.")
        if identity not in self.user_entries:
            raise ValidationError(f"Unknown application '{identity}'.")
        self.store.delete(identity)
        self.user_entries.remove(identity)
        LOG.info("Removed application %s", identity)
