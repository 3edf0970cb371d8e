"""Custom exceptions for bucket-lifecycle."""


class LifecycleError(Exception):
    """Base exception for all bucket-lifecycle errors."""


class ParseError(LifecycleError):
    """Exception raised when a rule string cannot be compiled."""


class FormatError(LifecycleError):
    """Exception raised when a rule cannot be rendered as a string."""


class StorageAPIError(LifecycleError):
    """Exception raised for S3 API related errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ConfigurationError(LifecycleError):
    """Exception raised for configuration related errors."""


class UnsupportedPolicyError(LifecycleError):
    """Exception raised when a stored policy uses settings this package cannot represent."""
