"""Domain errors raised by the services and mapped to JSON responses by the routes."""
from __future__ import annotations

from typing import Any, Optional


class VoicePathError(Exception):
    """Base class for errors that carry an HTTP status for the API layer."""

    status_code = 500

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFoundError(VoicePathError):
    status_code = 404


class ValidationError(VoicePathError):
    status_code = 400


class LLMError(VoicePathError):
    """The language model call failed."""

    status_code = 500


class LLMRateLimitError(LLMError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later.", **kwargs: Any):
        super().__init__(message, **kwargs)


class LLMResponseError(LLMError):
    """The model answered, but not with the JSON shape we asked for."""


class LLMNotConfiguredError(LLMError):
    status_code = 503
