"""Read-only queries against the OpenXR runtime.

Every call here may block on the runtime; callers run it off the UI thread.
"""
from __future__ import annotations

import contextlib
import logging
import os
from dataclasses import dataclass
from typing import Callable, Iterator

from core import config
from core.errors import DisplayNotReadyError, RuntimeUnavailableError
from core.openxr_loader import XR_ERROR_FORM_FACTOR_UNSUPPORTED, OpenXRError, OpenXRLoader

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayResolution:
    width: int
    height: int


@dataclass(frozen=True)
class LiveRuntimeState:
    active_layers: frozenset[str]
    resolution: DisplayResolution | None
    layer_name: str = config.LAYER_NAME

    @property
    def layer_active(self) -> bool:
        return self.layer_name in self.active_layers


class RuntimeIntrospectionClient:
    def __init__(
        self,
        loader_factory: Callable[[], OpenXRLoader] = OpenXRLoader,
        application_name: str = config.APPLICATION_NAME,
        layer_name: str = config.LAYER_NAME,
    ):
        self._loader_factory = loader_factory
        self._loader = None
        self.application_name = application_name
        self.layer_name = layer_name

    def _get_loader(self):
        if self._loader is None:
            try:
                self._loader = self._loader_factory()
            except (OSError, OpenXRError) as exc:
                raise RuntimeUnavailableError(f"Failed to initialize OpenXR: {exc}") from exc
        return self._loader

    def list_active_layers(self) -> frozenset[str]:
        """Return the names of every API layer the loader reports as active."""
        loader = self._get_loader()
        try:
            layers = frozenset(loader.enumerate_api_layers())
        except OpenXRError as exc:
            raise RuntimeUnavailableError(f"Failed to query API layers: {exc}") from exc
        if self.layer_name in layers:
            self.disable_layer_in_process()
        return layers

    def disable_layer_in_process(self) -> None:
        """Keep the layer from loading into this tool's own OpenXR instances."""
        env_name = f"DISABLE_{self.layer_name}"
        if os.environ.get(env_name) != "1":
            os.environ[env_name] = "1"
            LOG.info("Set %s=1 for this process", env_name)

    @contextlib.contextmanager
    def _instance(self, loader) -> Iterator[int]:
        try:
            instance = loader.create_instance(self.application_name)
        except OpenXRError as exc:
            raise RuntimeUnavailableError(f"Failed to create an OpenXR instance: {exc}") from exc
        try:
            yield instance
        finally:
            loader.destroy_instance(instance)

    def query_display_resolution(self) -> DisplayResolution | None:
        """Recommended per-eye render size, or None when the headset is off."""
        loader = self._get_loader()
        with self._instance(loader) as instance:
            try:
                system_id = loader.get_hmd_system(instance)
            except DisplayNotReadyError:
                LOG.info("Headset is not available")
                return None
            except OpenXRError as exc:
                if exc.result == XR_ERROR_FORM_FACTOR_UNSUPPORTED:
                    LOG.warning("Runtime has no head-mounted display system: %s", exc)
                    return None
                raise RuntimeUnavailableError(f"Failed to query the HMD system: {exc}") from exc
            try:
                views = loader.enumerate_primary_stereo_views(instance, system_id)
            except DisplayNotReadyError:
                LOG.info("Headset is not available")
                return None
            except OpenXRError as exc:
                raise RuntimeUnavailableError(f"Failed to query the view configuration: {exc}") from exc
        if not views:
            return None
        width, height = views[0]
        if width <= 0 or height <= 0:
            return None
        return DisplayResolution(int(width), int(height))

    def probe(self) -> LiveRuntimeState:
        """Layer list first (it sets the self-exclusion flag), then the resolution."""
        layers = self.list_active_layers()
        resolution = self.query_display_resolution()
        return LiveRuntimeState(
            active_layers=layers,
            resolution=resolution,
            layer_name=self.layer_name,
        )
