from __future__ import annotations

from typing import Optional


class ScriptGenerationError(RuntimeError):
    """Base class for failures surfaced by the script gateway."""

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message


class ConfigurationError(ScriptGenerationError):
    """Raised before any network call when the request cannot be sent."""


class GenerationBusyError(ScriptGenerationError):
    """Raised when a generation is already in flight."""


class TransportError(ScriptGenerationError):
    """Raised when the provider could not be reached."""


class GenerationTimeout(TransportError):
    """Raised when the provider did not answer within the configured timeout."""


class ProviderError(ScriptGenerationError):
    """Raised on a non-success HTTP status or an API-level error payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        user_message: Optional[str] = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.status_code = status_code


class ParseError(ScriptGenerationError):
    """Raised when the provider body is not valid JSON."""


class ValidationError(ScriptGenerationError):
    """Raised when the provider JSON does not have the expected shape."""
