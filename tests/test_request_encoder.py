import pytest

from gemini_chat.converters.request_encoder import build_request, encode_request
from gemini_chat.errors import EncodingError
from gemini_chat.models import gemini as gem


def test_empty_history_is_rejected():
    with pytest.raises(EncodingError):
        build_request([])


def test_unset_temperature_is_omitted_and_max_tokens_sent():
    req = build_request(
        [gem.Content.user("hi")],
        generation_config=gem.GenerationConfig(maxOutputTokens=100),
    )
    body = encode_request(req)
    assert body["generationConfig"] == {"maxOutputTokens": 100}
    assert "temperature" not in body["generationConfig"]


def test_minimal_request_has_only_contents():
    body = encode_request(build_request([gem.Content.user("hi")]))
    assert body == {"contents": [{"role": "user", "parts": [{"text": "hi"}]}]}


def test_empty_tool_and_safety_lists_are_omitted():
    body = encode_request(
        build_request([gem.Content.user("hi")], tools=[], safety_settings=[])
    )
    assert "tools" not in body
    assert "safetySettings" not in body


def test_full_request_encoding():
    declaration = gem.FunctionDeclaration(
        name="set_alarm",
        description="Set an alarm for a specific time.",
        parameters={
            "type": "object",
            "properties": {"time": {"type": "string"}},
            "required": ["time"],
        },
    )
    req = build_request(
        [gem.Content.user("Wake me at 7")],
        generation_config=gem.GenerationConfig(temperature=0.0, stopSequences=["END"]),
        system_instruction="You set alarms.",
        tools=[gem.Tool(functionDeclarations=[declaration]), gem.Tool(codeExecution=gem.CodeExecution())],
        tool_config=gem.ToolConfig(
            functionCallingConfig=gem.FunctionCallingConfig(
                mode="ANY", allowedFunctionNames=["set_alarm"]
            )
        ),
        safety_settings=[
            gem.SafetySetting(
                category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"
            )
        ],
    )
    body = encode_request(req)
    assert body["systemInstruction"] == {"parts": [{"text": "You set alarms."}]}
    assert body["generationConfig"] == {"temperature": 0.0, "stopSequences": ["END"]}
    assert body["tools"] == [
        {"functionDeclarations": [declaration.model_dump(exclude_none=True)]},
        {"codeExecution": {}},
    ]
    assert body["toolConfig"] == {
        "functionCallingConfig": {"mode": "ANY", "allowedFunctionNames": ["set_alarm"]}
    }
    assert body["safetySettings"] == [
        {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"}
    ]


def test_response_schema_is_encoded_without_mutation():
    schema = gem.Schema(
        type="object",
        properties={"age": gem.Schema(type="integer")},
        required=["age"],
    )
    before = schema.model_copy(deep=True)
    config = gem.GenerationConfig(responseMimeType="application/json", responseSchema=schema)
    body = encode_request(build_request([gem.Content.user("age?")], generation_config=config))
    assert body["generationConfig"]["responseSchema"] == {
        "type": "object",
        "properties": {"age": {"type": "integer"}},
        "required": ["age"],
    }
    assert schema == before


def test_request_copies_history():
    history = [gem.Content.user("one")]
    req = build_request(history)
    history.append(gem.Content.model("two"))
    assert len(req.contents) == 1


def test_function_turns_are_encoded():
    history = [
        gem.Content.user("Set the theme to dark."),
        gem.Content.model(
            gem.FunctionCallPart(functionCall=gem.FunctionCall(name="set_theme", args={"theme": "dark"}))
        ),
        gem.Content.user(
            gem.FunctionResponsePart(
                functionResponse=gem.FunctionResponse(name="set_theme", response={"ok": True})
            )
        ),
    ]
    body = encode_request(build_request(history))
    assert body["contents"][1]["parts"] == [
        {"functionCall": {"name": "set_theme", "args": {"theme": "dark"}}}
    ]
    assert body["contents"][2]["parts"] == [
        {"functionResponse": {"name": "set_theme", "response": {"ok": True}}}
    ]
