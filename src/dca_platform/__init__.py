"""DCA platform package root."""

from dca_platform.exceptions import DcaPlatformError, InvalidParameterError

__all__ = ["DcaPlatformError", "InvalidParameterError"]
