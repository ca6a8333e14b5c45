"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class OtakuTrackError(Exception):
    """Base exception for all application-specific errors."""


class CatalogError(OtakuTrackError):
    """Raised when a request to the remote catalog API fails."""


class MalformedResponseError(CatalogError):
    """Raised when the catalog API returns a document of an unexpected shape."""


class StorageError(OtakuTrackError):
    """Raised when the local key-value storage cannot be read or written."""


class ConfigurationError(OtakuTrackError):
    """Raised for issues related to configuration loading or validation."""
