"""Per-application NIS settings layered over the global default.

Layout under SETTINGS_ROOT:
 - root values: enabled / scaling / sharpness for "all other applications",
   plus enable_screenshots (global only).
 - one child key per application identity holding enabled / scaling / sharpness.

A missing value always falls back to its hard-coded default, never to the
global record.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from core import config
from core.errors import ProtectedEntryError
from core.hive import Hive, join_path, open_hive

LOG = logging.getLogger(__name__)

ENABLED_VALUE = "enabled"
SCALING_VALUE = "scaling"
SHARPNESS_VALUE = "sharpness"
SCREENSHOTS_VALUE = "enable_screenshots"


def _clamp(value, low, high, default):
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        numeric = default
    return max(low, min(high, numeric))


def clamp_scaling(value):
    """Clamp scaling percent within bounds."""
    return _clamp(value, config.MIN_SCALING, config.MAX_SCALING, config.DEFAULT_SCALING)


def clamp_sharpness(value):
    """Clamp sharpness percent within bounds."""
    return _clamp(value, config.MIN_SHARPNESS, config.MAX_SHARPNESS, config.DEFAULT_SHARPNESS)


@dataclass(frozen=True)
class SettingsRecord:
    enabled: bool = config.DEFAULT_ENABLED
    scaling_percent: int = config.DEFAULT_SCALING
    sharpness_percent: int = config.DEFAULT_SHARPNESS

    def clamped(self) -> "SettingsRecord":
        return SettingsRecord(
            enabled=bool(self.enabled),
            scaling_percent=clamp_scaling(self.scaling_percent),
            sharpness_percent=clamp_sharpness(self.sharpness_percent),
        )

    def with_changes(self, **changes) -> "SettingsRecord":
        return replace(self, **changes).clamped()


class SettingsStore:
    """Reads and writes SettingsRecords; key None is the global default."""

    def __init__(self, hive: Hive | None = None, root: str = config.SETTINGS_ROOT):
        self.hive = hive or open_hive()
        self.root = root

    def key_path(self, key: str | None) -> str:
        return join_path(self.root, key)

    def load(self, key: str | None) -> SettingsRecord:
        path = self.key_path(key)
        enabled = self.hive.get_value(path, ENABLED_VALUE)
        scaling = self.hive.get_value(path, SCALING_VALUE)
        sharpness = self.hive.get_value(path, SHARPNESS_VALUE)
        return SettingsRecord(
            enabled=config.DEFAULT_ENABLED if enabled is None else enabled == 1,
            scaling_percent=config.DEFAULT_SCALING if scaling is None else scaling,
            sharpness_percent=config.DEFAULT_SHARPNESS if sharpness is None else sharpness,
        ).clamped()

    def save(self, key: str | None, record: SettingsRecord) -> SettingsRecord:
        """Persist all three fields in one write and return what was stored."""
        record = record.clamped()
        self.hive.set_values(
            self.key_path(key),
            {
                ENABLED_VALUE: 1 if record.enabled else 0,
                SCALING_VALUE: record.scaling_percent,
                SHARPNESS_VALUE: record.sharpness_percent,
            },
        )
        LOG.info(
            "Saved settings for %s: enabled=%s scaling=%d%% sharpness=%d%%",
            key or "<global>",
            record.enabled,
            record.scaling_percent,
            record.sharpness_percent,
        )
        return record

    def delete(self, key: str | None) -> None:
        """Remove an application's key and everything beneath it."""
        if not key:
            raise ProtectedEntryError("The global settings cannot be deleted.")
        self.hive.delete_tree(self.key_path(key))
        LOG.info("Deleted settings for %s", key)

    def ensure_key(self, key: str | None) -> None:
        self.hive.create_key(self.key_path(key))

    def list_application_keys(self) -> list[str]:
        return self.hive.list_subkeys(self.root)

    def screenshots_enabled(self) -> bool:
        return self.hive.get_value(self.root, SCREENSHOTS_VALUE) == 1

    def set_screenshots_enabled(self, enabled: bool) -> None:
        self.hive.set_value(self.root, SCREENSHOTS_VALUE, 1 if enabled else 0)
        LOG.info("Screenshots %s", "enabled" if enabled else "disabled")
