"""Async client for the Gemini generate content API.

Basic usage::

    session = gemini_chat.chat("gemini-2.0-flash")
    response = await session.send("What is Python's GIL?")
    print(response.text)

The library logs through structlog and leaves setup to the application;
``gemini_chat.configure_logging()`` installs a JSON renderer.
"""

from gemini_chat.chat import ChatSession
from gemini_chat.client import Client
from gemini_chat.errors import (
    ConfigurationError,
    DecodeError,
    EncodingError,
    GeminiError,
    ProjectionError,
    ServiceError,
    TransportError,
)
from gemini_chat.logging_config import configure_logging

__all__ = [
    "ChatSession",
    "Client",
    "ConfigurationError",
    "DecodeError",
    "EncodingError",
    "GeminiError",
    "ProjectionError",
    "ServiceError",
    "TransportError",
    "chat",
    "client",
    "configure_logging",
]


def client() -> Client:
    """Return the default client, configured from the environment."""
    return Client.instance()


def chat(model: str, **options) -> ChatSession:
    """Start a chat session on the default client."""
    return client().chat(model, **options)
