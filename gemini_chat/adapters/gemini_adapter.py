"""Gemini adapter."""

from typing import Any, AsyncIterator

import httpx
import structlog

from gemini_chat.config import get_settings
from gemini_chat.utils.http_client import get_request, post_request, stream_request

logger = structlog.get_logger(__name__)


class GeminiAdapter:
    """Adapter for Google Gemini API.

    Owns the HTTP connection pool. Timeouts are configured here and nowhere
    else; nothing is retried.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or get_settings().gemini_base_url).rstrip("/")
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else get_settings().request_timeout
        )

    def _get_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

    def _get_url(self, model: str, stream: bool = False) -> str:
        action = "streamGenerateContent" if stream else "generateContent"
        if not model.startswith(("models/", "tunedModels/")):
            model = f"models/{model}"
        return f"{self.base_url}/{model}:{action}"

    async def generate_content(self, model: str, request_data: dict) -> dict[str, Any]:
        """Send generate content request. Returns the response JSON."""
        url = self._get_url(model, stream=False)
        logger.debug("gemini.generate_content", model=model, turns=len(request_data["contents"]))
        return await post_request(self.http_client, url, self._get_headers(), request_data)

    async def generate_content_stream(
        self, model: str, request_data: dict
    ) -> AsyncIterator[bytes]:
        """Send streaming generate content request.

        The body is a single JSON array delivered incrementally; chunks are
        yielded as they arrive, without regard to element boundaries.
        """
        url = self._get_url(model, stream=True)
        logger.debug("gemini.stream_generate_content", model=model, turns=len(request_data["contents"]))
        async for chunk in stream_request(
            self.http_client, "POST", url, self._get_headers(), request_data
        ):
            yield chunk

    async def list_models(
        self, page_size: int | None = None, page_token: str | None = None
    ) -> dict[str, Any]:
        """List available models, one page at a time."""
        params: dict[str, Any] = {}
        if page_size is not None:
            params["pageSize"] = page_size
        if page_token is not None:
            params["pageToken"] = page_token
        return await get_request(
            self.http_client, f"{self.base_url}/models", self._get_headers(), params
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()
