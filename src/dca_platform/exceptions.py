"""Exception hierarchy for the DCA platform.

All platform-specific exceptions derive from :class:`DcaPlatformError` so
callers can catch every simulation or data error uniformly.
"""

from __future__ import annotations


class DcaPlatformError(Exception):
    """Base class for platform-related exceptions.

    Derived exceptions should extend this class so that callers can catch all
    platform-specific errors uniformly.
    """


class ConfigError(DcaPlatformError):
    """Raised when configuration files or parameters are invalid."""


class DataSourceError(DcaPlatformError):
    """Raised when fetching or decoding quotes for a symbol fails."""


class DataValidationError(DcaPlatformError):
    """Raised when a quote series fails validation checks.

    Named DataValidationError to avoid conflict with pydantic's ValidationError.
    """


class InvalidParameterError(DcaPlatformError):
    """Raised when a strategy parameter is out of range or malformed."""


__all__ = [
    "DcaPlatformError",
    "ConfigError",
    "DataSourceError",
    "DataValidationError",
    "InvalidParameterError",
]
