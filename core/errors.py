"""Error taxonomy shared by the store, the registrar and the runtime client."""


class ConfigToolError(Exception):
    pass


class ValidationError(ConfigToolError):
    """Bad user input, e.g. an empty application name."""


class ProtectedEntryError(ConfigToolError):
    """Attempt to delete a preset application or the global default."""


class StoreUnavailableError(ConfigToolError):
    """The persistence backend could not be read or written."""


class RuntimeUnavailableError(ConfigToolError):
    """The OpenXR loader or runtime is missing or failed to initialize."""


class DisplayNotReadyError(ConfigToolError):
    """The headset is not powered on or not connected."""
