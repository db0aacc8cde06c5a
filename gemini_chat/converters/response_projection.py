"""Project generate content responses into the shape the caller asked for."""

import json
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from gemini_chat.errors import ProjectionError
from gemini_chat.models import gemini as gem

T = TypeVar("T")


def response_text(resp: gem.GenerateContentResponse) -> str:
    """Concatenate the text parts of the first candidate, in order."""
    return resp.text


def require_schema(config: gem.GenerationConfig | None) -> gem.Schema:
    """Return the response schema, or fail if structured output was not requested."""
    if config is None or config.responseSchema is None:
        raise ProjectionError(
            "structured output requires a responseSchema on the generation config"
        )
    return config.responseSchema


def response_structured(
    resp: gem.GenerateContentResponse,
    target_type: type[T] | Any,
    config: gem.GenerationConfig | None,
) -> T:
    """Parse the response text as JSON and validate it into ``target_type``.

    ``target_type`` is anything pydantic can validate: a BaseModel, a
    dataclass, a TypedDict or a plain ``list[int]``.
    """
    require_schema(config)
    text = response_text(resp)
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ProjectionError(f"response text is not valid JSON: {text[:200]!r}") from exc
    try:
        return TypeAdapter(target_type).validate_python(data)
    except ValidationError as exc:
        raise ProjectionError(f"response JSON does not match {target_type!r}: {exc}") from exc


def function_calls(resp: gem.GenerateContentResponse) -> list[gem.FunctionCall]:
    """Return every function call of the first candidate, verbatim.

    Names are not checked against the declared functions; executing the
    call is up to the caller.
    """
    return resp.function_calls


def function_call(resp: gem.GenerateContentResponse) -> gem.FunctionCall | None:
    calls = function_calls(resp)
    return calls[0] if calls else None
