"""Autoreload error hierarchy.

All autoreload-specific errors inherit from AutoreloadError for easy catching.
"""


class AutoreloadError(Exception):
    """Base error for all autoreload operations."""


class ConfigError(AutoreloadError):
    """Invalid or missing configuration."""


class AssetError(AutoreloadError):
    """The bundled client script is missing or unreadable."""


class ProtocolError(AutoreloadError):
    """A wire message could not be decoded."""
