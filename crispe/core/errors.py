"""Exceptions raised while generating optimized prompts."""

from typing import Optional

# Fixed user-facing message for a missing provider credential, shared by the
# relay response and the clients that recognize it
MISSING_KEY_MESSAGE = "Server configuration error: API Key missing"


class CrispeError(Exception):
    """Base class for every error surfaced to the front end.

    The message is always fit for display to the user. Raw provider output
    or HTTP bodies belong in ``details`` and in the logs, never in the message.

    Attributes:
        details: Additional debugging information (optional)
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.details = details


class ConfigurationError(CrispeError):
    """Raised when a required provider credential is missing or rejected.

    Raised before any network call is attempted whenever the key is absent.
    """


class TransportError(CrispeError):
    """Raised on network failure or a non-success HTTP status.

    Attributes:
        status_code: HTTP status returned by the provider or relay, if any
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code


class InitializationError(CrispeError):
    """Raised when the local inference engine fails to load its model."""


class GenerationError(CrispeError):
    """Single descriptive error raised by the adapter for failed generations."""
