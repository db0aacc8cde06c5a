"""Build Gemini generate content requests from conversation state."""

from typing import Any, Sequence

from gemini_chat.errors import EncodingError
from gemini_chat.models import gemini as gem


def build_request(
    contents: Sequence[gem.Content],
    *,
    generation_config: gem.GenerationConfig | None = None,
    system_instruction: str | None = None,
    tools: Sequence[gem.Tool] | None = None,
    tool_config: gem.ToolConfig | None = None,
    safety_settings: Sequence[gem.SafetySetting] | None = None,
) -> gem.GenerateContentRequest:
    """Assemble a request from history and the optional request settings.

    Empty tool and safety lists are treated as unset. The contents are
    copied, so later appends to a history do not leak into this request.
    """
    if not contents:
        raise EncodingError("a generate content request needs at least one turn")

    system = None
    if system_instruction is not None:
        system = gem.SystemInstruction(parts=[gem.TextPart(text=system_instruction)])

    return gem.GenerateContentRequest(
        contents=list(contents),
        systemInstruction=system,
        generationConfig=generation_config,
        tools=list(tools) if tools else None,
        toolConfig=tool_config,
        safetySettings=list(safety_settings) if safety_settings else None,
    )


def encode_request(req: gem.GenerateContentRequest) -> dict[str, Any]:
    """Convert a request to its wire form.

    Fields left as None are omitted; everything else, including 0, False
    and empty strings, is emitted.
    """
    return req.model_dump(mode="json", exclude_none=True)
