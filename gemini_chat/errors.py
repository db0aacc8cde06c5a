"""Errors raised by the client."""

from typing import Any


class GeminiError(Exception):
    """Base class for every error raised by gemini_chat."""


class ConfigurationError(GeminiError):
    """No API key was given and none is configured."""


class EncodingError(GeminiError):
    """The request is internally inconsistent, e.g. it has no contents."""


class TransportError(GeminiError):
    """Connection, timeout or protocol failure below the API level."""


class ServiceError(GeminiError):
    """A well-formed error response from the API.

    ``code`` is the HTTP status and ``status`` the API status name, such as
    ``RESOURCE_EXHAUSTED`` for rate limiting.
    """

    def __init__(
        self,
        code: int,
        message: str,
        status: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ):
        super().__init__(f"{code} {status or 'ERROR'}: {message}")
        self.code = code
        self.message = message
        self.status = status
        self.details = details or []


class DecodeError(GeminiError):
    """A response body or stream element is not valid JSON for its model."""


class ProjectionError(GeminiError):
    """The response does not have the shape the caller asked for."""
