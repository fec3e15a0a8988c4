"""
Custom exceptions for the relay bot.
"""


class RelayError(Exception):
    """Base class for relay bot errors."""

    pass


class ConfigError(RelayError):
    """Raised when startup configuration is missing or malformed."""

    pass


class InferenceError(RelayError):
    """Raised when the inference backend call fails or returns an unusable body."""

    pass
