import pytest
from pydantic import BaseModel

from gemini_chat.converters.response_projection import (
    function_call,
    function_calls,
    require_schema,
    response_structured,
    response_text,
)
from gemini_chat.errors import ProjectionError
from gemini_chat.models import gemini as gem

AGE_SCHEMA = gem.Schema(
    type="object",
    properties={"age": gem.Schema(type="integer")},
    required=["age"],
)
JSON_CONFIG = gem.GenerationConfig(responseMimeType="application/json", responseSchema=AGE_SCHEMA)


class Person(BaseModel):
    age: int


def _response(*parts: dict) -> gem.GenerateContentResponse:
    return gem.GenerateContentResponse.model_validate(
        {"candidates": [{"content": {"role": "model", "parts": list(parts)}, "finishReason": "STOP"}]}
    )


def test_text_concatenates_parts_and_skips_thoughts():
    resp = _response({"text": "planning", "thought": True}, {"text": "Hello, "}, {"text": "world"})
    assert response_text(resp) == "Hello, world"


def test_text_of_response_without_candidates_is_empty():
    assert response_text(gem.GenerateContentResponse()) == ""


def test_structured_output_into_model():
    resp = _response({"text": '{"age": 30}'})
    assert response_structured(resp, Person, JSON_CONFIG) == Person(age=30)


def test_structured_output_into_plain_type():
    resp = _response({"text": "[1, 2, 3]"})
    config = gem.GenerationConfig(
        responseSchema=gem.Schema(type="array", items=gem.Schema(type="integer"))
    )
    assert response_structured(resp, list[int], config) == [1, 2, 3]


def test_structured_output_requires_a_schema():
    resp = _response({"text": '{"age": 30}'})
    with pytest.raises(ProjectionError):
        response_structured(resp, Person, gem.GenerationConfig(responseMimeType="application/json"))
    with pytest.raises(ProjectionError):
        require_schema(None)
    assert require_schema(JSON_CONFIG) is AGE_SCHEMA


@pytest.mark.parametrize("text", ["not json", '{"age": "thirty"}', '{"name": "Ada"}', ""])
def test_structured_output_failures(text):
    with pytest.raises(ProjectionError) as excinfo:
        response_structured(_response({"text": text}), Person, JSON_CONFIG)
    assert excinfo.value.__cause__ is not None


def test_function_calls_are_returned_verbatim():
    resp = _response(
        {"text": "Let me check."},
        {"functionCall": {"name": "get_weather", "args": {"city": "Paris"}, "id": "c1"}},
        {"functionCall": {"name": "never_declared", "args": {}}},
    )
    calls = function_calls(resp)
    assert [c.name for c in calls] == ["get_weather", "never_declared"]
    assert calls[0].args == {"city": "Paris"}
    assert calls[0].id == "c1"
    assert function_call(resp) == calls[0]


def test_function_call_absent():
    assert function_call(_response({"text": "no tools needed"})) is None
