"""Gemini client facade."""

from contextlib import aclosing
from typing import Any, AsyncIterator, Sequence

import structlog
from pydantic import ValidationError

from gemini_chat.adapters.gemini_adapter import GeminiAdapter
from gemini_chat.chat import ChatSession
from gemini_chat.config import Settings, get_settings
from gemini_chat.converters.request_encoder import build_request, encode_request
from gemini_chat.errors import ConfigurationError, DecodeError
from gemini_chat.models import gemini as gem
from gemini_chat.streaming import decode_stream, parse_response

logger = structlog.get_logger(__name__)


def _as_contents(contents: "str | gem.Content | Sequence[gem.Content]") -> list[gem.Content]:
    if isinstance(contents, str):
        return [gem.Content.user(contents)]
    if isinstance(contents, gem.Content):
        return [contents]
    return list(contents)


class Client:
    """Entry point for talking to the Gemini API.

    The API key is taken from ``api_key`` or, failing that, from the
    ``GEMINI_API_KEY`` setting. Pass ``adapter`` to supply a preconfigured
    transport, e.g. one built on an ``httpx.MockTransport`` in tests.
    """

    _instance: "Client | None" = None

    def __init__(
        self,
        api_key: str | None = None,
        *,
        settings: Settings | None = None,
        adapter: GeminiAdapter | None = None,
    ):
        settings = settings or get_settings()
        if adapter is None:
            if api_key is None and settings.gemini_api_key is not None:
                api_key = settings.gemini_api_key.get_secret_value()
            if not api_key:
                raise ConfigurationError(
                    "API key must be passed explicitly or set via GEMINI_API_KEY"
                )
            adapter = GeminiAdapter(
                api_key,
                base_url=settings.gemini_base_url,
                timeout=settings.request_timeout,
            )
        self.adapter = adapter

    @classmethod
    def instance(cls) -> "Client":
        """Return the process-wide client, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.adapter.aclose()

    # ============ Transport level ============

    async def send(
        self, model: str, req: gem.GenerateContentRequest
    ) -> gem.GenerateContentResponse:
        """Send one request and wait for the complete response."""
        data = await self.adapter.generate_content(model, encode_request(req))
        return parse_response(data)

    async def send_streaming(
        self, model: str, req: gem.GenerateContentRequest
    ) -> AsyncIterator[gem.GenerateContentResponse]:
        """Send one request and yield response chunks as they are decoded."""
        chunks = self.adapter.generate_content_stream(model, encode_request(req))
        async with aclosing(chunks), aclosing(decode_stream(chunks)) as responses:
            async for resp in responses:
                yield resp

    # ============ One-shot calls ============

    async def generate_content(
        self,
        model: str,
        contents: "str | gem.Content | Sequence[gem.Content]",
        **options: Any,
    ) -> gem.GenerateContentResponse:
        """Generate a response without keeping any conversation state.

        ``options`` are the keyword arguments of ``build_request``.
        """
        return await self.send(model, build_request(_as_contents(contents), **options))

    def stream_generate_content(
        self,
        model: str,
        contents: "str | gem.Content | Sequence[gem.Content]",
        **options: Any,
    ) -> AsyncIterator[gem.GenerateContentResponse]:
        """Streaming counterpart of ``generate_content``.

        The request is built immediately, so encoding errors are raised here
        rather than on first iteration.
        """
        return self.send_streaming(model, build_request(_as_contents(contents), **options))

    async def list_models(
        self, page_size: int | None = None, page_token: str | None = None
    ) -> gem.ModelList:
        data = await self.adapter.list_models(page_size=page_size, page_token=page_token)
        try:
            return gem.ModelList.model_validate(data)
        except ValidationError as exc:
            raise DecodeError(f"unexpected models listing: {exc}") from exc

    def chat(self, model: str, **options: Any) -> ChatSession:
        """Start a chat session; ``options`` are passed to ChatSession."""
        return ChatSession(self, model, **options)
