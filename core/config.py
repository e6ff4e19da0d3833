import os
import sys
from pathlib import Path

# Base directory (works in dev + PyInstaller)
if getattr(sys, "frozen", False):
    BASE_DIR = Path(sys.executable).parent
else:
    BASE_DIR = Path(__file__).resolve().parent.parent

# Must match the layer DLL.
LAYER_NAME = "XR_APILAYER_NOVENDOR_nis_scaler"
MANIFEST_NAME = f"{LAYER_NAME}.json"
DISABLE_LAYER_ENV = f"DISABLE_{LAYER_NAME}"
APPLICATION_NAME = "NIS-Scaler-Config-Tool"

SETTINGS_ROOT = r"SOFTWARE\OpenXR_NIS_Scaler"
IMPLICIT_LAYERS_KEY = r"SOFTWARE\Khronos\OpenXR\1\ApiLayers\Implicit"

GLOBAL_ENTRY = "All other applications"
ADD_ENTRY = "Add a new application..."
FRIENDLY_SEPARATOR = " -- "
PRESET_ENTRIES = (
    "FS2020 -- Microsoft Flight Simulator 2020",
)

DEFAULT_ENABLED = False
DEFAULT_SCALING = 80
MIN_SCALING = 50
MAX_SCALING = 100
DEFAULT_SHARPNESS = 50
MIN_SHARPNESS = 0
MAX_SHARPNESS = 100
DEFAULT_SCREENSHOTS = False

DEFAULT_REFRESH_INTERVAL_MS = 10000

ISSUES_URL = "https://github.com/mbucchia/XR_APILAYER_NOVENDOR_nis_scaler/issues"


def refresh_interval_ms() -> int:
    """Return the runtime refresh interval, honoring NIS_REFRESH_INTERVAL_MS."""
    raw = os.environ.get("NIS_REFRESH_INTERVAL_MS", "").strip()
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_REFRESH_INTERVAL_MS
    return value if value > 0 else DEFAULT_REFRESH_INTERVAL_MS


def hive_backend() -> str:
    """Return "winreg" or "sqlite" from NIS_CONFIG_HIVE or the platform."""
    forced = os.environ.get("NIS_CONFIG_HIVE", "").strip().lower()
    if forced in {"winreg", "sqlite"}:
        return forced
    return "winreg" if sys.platform == "win32" else "sqlite"


def layer_log_path() -> Path:
    """Return the log file the layer writes under %LOCALAPPDATA%."""
    override = os.environ.get("NIS_LAYER_LOG_PATH")
    if override:
        return Path(override)
    base = os.environ.get("LOCALAPPDATA") or str(Path.home())
    return Path(base) / f"{LAYER_NAME}.log"
