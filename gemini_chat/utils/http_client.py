"""HTTP client utilities."""

from typing import Any, AsyncIterator

import httpx
from pydantic import ValidationError

from gemini_chat.errors import DecodeError, ServiceError, TransportError
from gemini_chat.models.gemini import ApiError


def service_error(status_code: int, body: bytes) -> ServiceError:
    """Build a ServiceError from an error response body."""
    try:
        detail = ApiError.model_validate_json(body).error
    except ValidationError:
        text = body.decode("utf-8", errors="replace")
        return ServiceError(code=status_code, message=text or "empty error body")
    return ServiceError(
        code=status_code,
        message=detail.message,
        status=detail.status,
        details=detail.details,
    )


def _json_body(response: httpx.Response) -> dict[str, Any]:
    if response.status_code >= 400:
        raise service_error(response.status_code, response.content)
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"response body is not valid JSON: {exc}") from exc


async def stream_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: dict[str, str],
    json_data: dict | None = None,
) -> AsyncIterator[bytes]:
    """Make a streaming HTTP request and yield raw body chunks."""
    try:
        async with client.stream(
            method,
            url,
            headers=headers,
            json=json_data,
        ) as response:
            if response.status_code >= 400:
                body = await response.aread()
                raise service_error(response.status_code, body)
            async for chunk in response.aiter_bytes():
                yield chunk
    except httpx.HTTPError as exc:
        raise TransportError(str(exc) or type(exc).__name__) from exc


async def post_request(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str],
    json_data: dict | None = None,
) -> dict[str, Any]:
    """Make a POST request and return the decoded JSON body."""
    try:
        response = await client.post(url, headers=headers, json=json_data)
    except httpx.HTTPError as exc:
        raise TransportError(str(exc) or type(exc).__name__) from exc
    return _json_body(response)


async def get_request(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str],
    params: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Make a GET request and return the decoded JSON body."""
    try:
        response = await client.get(url, headers=headers, params=params)
    except httpx.HTTPError as exc:
        raise TransportError(str(exc) or type(exc).__name__) from exc
    return _json_body(response)
