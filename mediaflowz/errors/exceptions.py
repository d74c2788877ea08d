class MediaFlowzError(Exception):
    """Base exception for all media upload errors."""


class ConfigError(MediaFlowzError):
    """Raised when a provider is missing required settings, before any I/O."""


class NetworkError(MediaFlowzError):
    """Raised when a provider could not be reached (no usable response)."""


class UploadError(MediaFlowzError):
    """Raised when a provider answered but reported a failure."""


class EditorError(MediaFlowzError):
    """Raised when inserting an uploaded media reference fails."""


class UnsupportedProviderError(ConfigError):
    """Raised when settings select a provider with no registered adapter."""
