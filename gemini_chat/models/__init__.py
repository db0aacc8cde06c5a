"""Models module."""

from gemini_chat.models.gemini import (
    Candidate,
    Content,
    FunctionCall,
    FunctionCallingConfig,
    FunctionDeclaration,
    FunctionResponse,
    FunctionResponsePart,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationConfig,
    Part,
    SafetySetting,
    Schema,
    TextPart,
    Tool,
    ToolConfig,
)

__all__ = [
    "Candidate",
    "Content",
    "FunctionCall",
    "FunctionCallingConfig",
    "FunctionDeclaration",
    "FunctionResponse",
    "FunctionResponsePart",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "GenerationConfig",
    "Part",
    "SafetySetting",
    "Schema",
    "TextPart",
    "Tool",
    "ToolConfig",
]
