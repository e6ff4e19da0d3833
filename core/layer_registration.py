"""Registration of the layer manifest in the OpenXR implicit layer list.

The list is shared with other layers. Every scan and delete here is limited to
entries whose file name is our manifest name; foreign entries are never touched.
The loader evaluates the list in order, and we install last so the layer runs
after every other layer.
"""
from __future__ import annotations

import logging
import re

from core import config
from core.errors import ValidationError
from core.hive import Hive, open_hive

LOG = logging.getLogger(__name__)


def manifest_file_name(path: str) -> str:
    """Last component of a Windows or POSIX style path."""
    return re.split(r"[\\/]", path.rstrip("\\/"))[-1]


class LayerRegistrar:
    def __init__(
        self,
        hive: Hive | None = None,
        list_key: str = config.IMPLICIT_LAYERS_KEY,
        manifest_name: str = config.MANIFEST_NAME,
    ):
        self.hive = hive or open_hive()
        self.list_key = list_key
        self.manifest_name = manifest_name

    def is_ours(self, entry: str) -> bool:
        return manifest_file_name(entry).casefold() == self.manifest_name.casefold()

    def registered_manifests(self) -> list[str]:
        return [name for name, _data in self.hive.list_values(self.list_key) if self.is_ours(name)]

    def install(self, manifest_path: str) -> None:
        """Purge stale registrations of this layer, then append manifest_path last."""
        if not manifest_path or not self.is_ours(manifest_path):
            raise ValidationError(f"Manifest path must end with {self.manifest_name}.")
        self.hive.create_key(self.list_key)
        for entry in self.registered_manifests():
            self.hive.delete_value(self.list_key, entry)
            LOG.info("Removed previous layer registration %s", entry)
        self.hive.set_value(self.list_key, manifest_path, 0)
        LOG.info("Registered layer manifest %s", manifest_path)

    def uninstall(self, manifest_path: str) -> bool:
        """Remove exactly manifest_path; absent entries are not an error."""
        self.hive.create_key(self.list_key)
        removed = self.hive.delete_value(self.list_key, manifest_path)
        if removed:
            LOG.info("Unregistered layer manifest %s", manifest_path)
        else:
            LOG.info("Layer manifest %s was not registered", manifest_path)
        return removed
