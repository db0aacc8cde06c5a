import json
from typing import Any, AsyncIterator

import pytest

from gemini_chat.client import Client
from gemini_chat.errors import GeminiError


def text_chunk(text: str, finish_reason: str | None = None, index: int = 0) -> dict[str, Any]:
    candidate: dict[str, Any] = {
        "content": {"role": "model", "parts": [{"text": text}]},
        "index": index,
    }
    if finish_reason is not None:
        candidate["finishReason"] = finish_reason
    return {"candidates": [candidate]}


def array_bytes(elements: list[dict[str, Any]]) -> bytes:
    """Serialize elements the way the streaming endpoint does."""
    return ("[" + ",\r\n".join(json.dumps(e, ensure_ascii=False) for e in elements) + "]").encode()


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


class FakeAdapter:
    """Stands in for GeminiAdapter and records every request body."""

    def __init__(
        self,
        responses: list[dict[str, Any] | Exception] | None = None,
        streams: list[list[bytes]] | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.streams = list(streams or [])
        self.requests: list[tuple[str, dict]] = []
        self.closed_streams = 0
        self.closed = False

    async def generate_content(self, model: str, request_data: dict) -> dict[str, Any]:
        self.requests.append((model, request_data))
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def generate_content_stream(self, model: str, request_data: dict) -> AsyncIterator[bytes]:
        self.requests.append((model, request_data))
        chunks = self.streams.pop(0)
        try:
            for chunk in chunks:
                yield chunk
        finally:
            self.closed_streams += 1

    async def list_models(self, page_size=None, page_token=None) -> dict[str, Any]:
        raise GeminiError("not used")

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def client(fake_adapter: FakeAdapter) -> Client:
    return Client(adapter=fake_adapter)
