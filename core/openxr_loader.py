"""Minimal ctypes binding of the OpenXR loader.

Only the calls the configuration tool needs are bound: API layer enumeration,
instance creation/destruction, HMD system lookup and the primary stereo view
configuration. All of them are exported by the loader itself.
"""
from __future__ import annotations

import ctypes
import ctypes.util
import logging
import os
import sys
from ctypes import POINTER, Structure, byref, c_char, c_char_p, c_int32, c_uint32, c_uint64, c_void_p

from core.errors import DisplayNotReadyError, RuntimeUnavailableError

LOG = logging.getLogger(__name__)

XR_MAX_API_LAYER_NAME_SIZE = 256
XR_MAX_API_LAYER_DESCRIPTION_SIZE = 256
XR_MAX_APPLICATION_NAME_SIZE = 128
XR_MAX_ENGINE_NAME_SIZE = 128

XR_TYPE_API_LAYER_PROPERTIES = 1
XR_TYPE_INSTANCE_CREATE_INFO = 3
XR_TYPE_SYSTEM_GET_INFO = 4
XR_TYPE_VIEW_CONFIGURATION_VIEW = 41

XR_FORM_FACTOR_HEAD_MOUNTED_DISPLAY = 1
XR_VIEW_CONFIGURATION_TYPE_PRIMARY_STEREO = 2

XR_SUCCESS = 0
XR_ERROR_RUNTIME_FAILURE = -2
XR_ERROR_FORM_FACTOR_UNSUPPORTED = -34
XR_ERROR_FORM_FACTOR_UNAVAILABLE = -35
XR_ERROR_RUNTIME_UNAVAILABLE = -51

_RESULT_NAMES = {
    XR_ERROR_RUNTIME_FAILURE: "XR_ERROR_RUNTIME_FAILURE",
    XR_ERROR_FORM_FACTOR_UNSUPPORTED: "XR_ERROR_FORM_FACTOR_UNSUPPORTED",
    XR_ERROR_FORM_FACTOR_UNAVAILABLE: "XR_ERROR_FORM_FACTOR_UNAVAILABLE",
    XR_ERROR_RUNTIME_UNAVAILABLE: "XR_ERROR_RUNTIME_UNAVAILABLE",
}

_LIBRARY_NAMES = {
    "win32": ("openxr_loader.dll", "openxr_loader-1_0.dll"),
    "darwin": ("libopenxr_loader.dylib",),
}
_DEFAULT_LIBRARY_NAMES = ("libopenxr_loader.so.1", "libopenxr_loader.so")


def xr_make_version(major: int, minor: int, patch: int) -> int:
    return ((major & 0xFFFF) << 48) | ((minor & 0xFFFF) << 32) | (patch & 0xFFFFFFFF)


XR_API_VERSION_1_0 = xr_make_version(1, 0, 0)


class OpenXRError(RuntimeError):
    def __init__(self, result: int, context: str):
        self.result = result
        name = _RESULT_NAMES.get(result, str(result))
        super().__init__(f"{context} failed ({name})")


class XrApiLayerProperties(Structure):
    _fields_ = [
        ("type", c_int32),
        ("next", c_void_p),
        ("layerName", c_char * XR_MAX_API_LAYER_NAME_SIZE),
        ("specVersion", c_uint64),
        ("layerVersion", c_uint32),
        ("description", c_char * XR_MAX_API_LAYER_DESCRIPTION_SIZE),
    ]


class XrApplicationInfo(Structure):
    _fields_ = [
        ("applicationName", c_char * XR_MAX_APPLICATION_NAME_SIZE),
        ("applicationVersion", c_uint32),
        ("engineName", c_char * XR_MAX_ENGINE_NAME_SIZE),
        ("engineVersion", c_uint32),
        ("apiVersion", c_uint64),
    ]


class XrInstanceCreateInfo(Structure):
    _fields_ = [
        ("type", c_int32),
        ("next", c_void_p),
        ("createFlags", c_uint64),
        ("applicationInfo", XrApplicationInfo),
        ("enabledApiLayerCount", c_uint32),
        ("enabledApiLayerNames", POINTER(c_char_p)),
        ("enabledExtensionCount", c_uint32),
        ("enabledExtensionNames", POINTER(c_char_p)),
    ]


class XrSystemGetInfo(Structure):
    _fields_ = [
        ("type", c_int32),
        ("next", c_void_p),
        ("formFactor", c_int32),
    ]


class XrViewConfigurationView(Structure):
    _fields_ = [
        ("type", c_int32),
        ("next", c_void_p),
        ("recommendedImageRectWidth", c_uint32),
        ("maxImageRectWidth", c_uint32),
        ("recommendedImageRectHeight", c_uint32),
        ("maxImageRectHeight", c_uint32),
        ("recommendedSwapchainSampleCount", c_uint32),
        ("maxSwapchainSampleCount", c_uint32),
    ]


# XrInstance handles are 64-bit on every platform.
XrInstance = c_uint64
XrSystemId = c_uint64


def _check_result(result: int, context: str) -> None:
    if result >= XR_SUCCESS:
        return
    if result == XR_ERROR_FORM_FACTOR_UNAVAILABLE:
        raise DisplayNotReadyError(f"{context}: headset is not available")
    if result == XR_ERROR_RUNTIME_UNAVAILABLE:
        raise RuntimeUnavailableError(f"{context}: no OpenXR runtime is available")
    raise OpenXRError(result, context)


def _candidate_libraries(library_path: str | None) -> list[str]:
    candidates = []
    for explicit in (library_path, os.environ.get("OPENXR_LOADER_PATH")):
        if explicit:
            candidates.append(explicit)
    found = ctypes.util.find_library("openxr_loader")
    if found:
        candidates.append(found)
    candidates.extend(_LIBRARY_NAMES.get(sys.platform, _DEFAULT_LIBRARY_NAMES))
    return candidates


def _load_library(library_path: str | None):
    loader_cls = getattr(ctypes, "WinDLL", ctypes.CDLL) if sys.platform == "win32" else ctypes.CDLL
    errors = []
    for candidate in _candidate_libraries(library_path):
        try:
            lib = loader_cls(candidate)
        except OSError as exc:
            errors.append(f"{candidate}: {exc}")
            continue
        LOG.info("Loaded OpenXR loader from %s", candidate)
        return lib
    raise RuntimeUnavailableError("OpenXR loader not found (" + "; ".join(errors) + ")")


def _configure_api(lib) -> None:
    lib.xrEnumerateApiLayerProperties.argtypes = [c_uint32, POINTER(c_uint32), POINTER(XrApiLayerProperties)]
    lib.xrEnumerateApiLayerProperties.restype = c_int32
    lib.xrCreateInstance.argtypes = [POINTER(XrInstanceCreateInfo), POINTER(XrInstance)]
    lib.xrCreateInstance.restype = c_int32
    lib.xrDestroyInstance.argtypes = [XrInstance]
    lib.xrDestroyInstance.restype = c_int32
    lib.xrGetSystem.argtypes = [XrInstance, POINTER(XrSystemGetInfo), POINTER(XrSystemId)]
    lib.xrGetSystem.restype = c_int32
    lib.xrEnumerateViewConfigurationViews.argtypes = [
        XrInstance,
        XrSystemId,
        c_int32,
        c_uint32,
        POINTER(c_uint32),
        POINTER(XrViewConfigurationView),
    ]
    lib.xrEnumerateViewConfigurationViews.restype = c_int32


class OpenXRLoader:
    """Thin wrapper over the loader; use one instance from one thread at a time."""

    def __init__(self, library_path: str | None = None):
        self._lib = _load_library(library_path)
        try:
            _configure_api(self._lib)
        except AttributeError as exc:
            raise RuntimeUnavailableError(f"OpenXR loader is missing an entry point: {exc}") from exc

    def enumerate_api_layers(self) -> list[str]:
        count = c_uint32(0)
        _check_result(
            self._lib.xrEnumerateApiLayerProperties(0, byref(count), None),
            "xrEnumerateApiLayerProperties",
        )
        if count.value == 0:
            return []
        layers = (XrApiLayerProperties * count.value)()
        for layer in layers:
            layer.type = XR_TYPE_API_LAYER_PROPERTIES
        _check_result(
            self._lib.xrEnumerateApiLayerProperties(count.value, byref(count), layers),
            "xrEnumerateApiLayerProperties",
        )
        return [layers[i].layerName.decode("utf-8", "replace") for i in range(count.value)]

    def create_instance(self, application_name: str) -> int:
        info = XrInstanceCreateInfo()
        info.type = XR_TYPE_INSTANCE_CREATE_INFO
        info.applicationInfo.applicationName = application_name.encode("utf-8")[: XR_MAX_APPLICATION_NAME_SIZE - 1]
        info.applicationInfo.engineName = b""
        info.applicationInfo.apiVersion = XR_API_VERSION_1_0
        instance = XrInstance(0)
        _check_result(self._lib.xrCreateInstance(byref(info), byref(instance)), "xrCreateInstance")
        return instance.value

    def get_hmd_system(self, instance: int) -> int:
        info = XrSystemGetInfo()
        info.type = XR_TYPE_SYSTEM_GET_INFO
        info.formFactor = XR_FORM_FACTOR_HEAD_MOUNTED_DISPLAY
        system_id = XrSystemId(0)
        _check_result(self._lib.xrGetSystem(instance, byref(info), byref(system_id)), "xrGetSystem")
        return system_id.value

    def enumerate_primary_stereo_views(self, instance: int, system_id: int) -> list[tuple[int, int]]:
        """Return (recommended width, recommended height) per view."""
        count = c_uint32(0)
        _check_result(
            self._lib.xrEnumerateViewConfigurationViews(
                instance, system_id, XR_VIEW_CONFIGURATION_TYPE_PRIMARY_STEREO, 0, byref(count), None
            ),
            "xrEnumerateViewConfigurationViews",
        )
        if count.value == 0:
            return []
        views = (XrViewConfigurationView * count.value)()
        for view in views:
            view.type = XR_TYPE_VIEW_CONFIGURATION_VIEW
        _check_result(
            self._lib.xrEnumerateViewConfigurationViews(
                instance, system_id, XR_VIEW_CONFIGURATION_TYPE_PRIMARY_STEREO, count.value, byref(count), views
            ),
            "xrEnumerateViewConfigurationViews",
        )
        return [
            (views[i].recommendedImageRectWidth, views[i].recommendedImageRectHeight)
            for i in range(count.value)
        ]

    def destroy_instance(self, instance: int) -> None:
        result = self._lib.xrDestroyInstance(instance)
        if result < XR_SUCCESS:
            LOG.warning("xrDestroyInstance returned %s", _RESULT_NAMES.get(result, result))
