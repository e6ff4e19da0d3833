"""Label text derived from settings and runtime state."""
from __future__ import annotations

from app.services.layer_status_machine import LayerStatus
from core.runtime_client import DisplayResolution

RESOLUTION_PREFIX = "OpenXR resolution: "
HEADSET_OFF_TEXT = "Please turn on headset"

STATUS_TEXT = {
    LayerStatus.UNKNOWN: ("Layer state is not known", "#444444"),
    LayerStatus.ACTIVE: ("NIS Scaler layer is active", "#2e7d32"),
    LayerStatus.INACTIVE: ("NIS Scaler layer is NOT active", "#c62828"),
    LayerStatus.UNREACHABLE: ("OpenXR runtime is not available", "#c62828"),
}


def _known(resolution: DisplayResolution | None) -> bool:
    return resolution is not None and resolution.width > 0 and resolution.height > 0


def resolution_text(resolution: DisplayResolution | None) -> str:
    if not _known(resolution):
        return RESOLUTION_PREFIX + HEADSET_OFF_TEXT
    return f"{RESOLUTION_PREFIX}{resolution.width} x {resolution.height}"


def scaled_size(resolution: DisplayResolution, percent: int) -> tuple[int, int]:
    return (resolution.width * percent) // 100, (resolution.height * percent) // 100


def scaling_text(percent: int, resolution: DisplayResolution | None) -> str:
    text = f"{percent}%"
    if _known(resolution):
        width, height = scaled_size(resolution, percent)
        text += f"\n{width} x {height}"
    return text


def sharpness_text(percent: int) -> str:
    return f"{percent}%"


def layer_status_text(status: LayerStatus) -> tuple[str, str]:
    """Return (text, color) for the layer status label."""
    return STATUS_TEXT[status]


def layer_tooltip(active_layers) -> str:
    if not active_layers:
        return "No API layers are active"
    return "\n".join(sorted(active_layers))
