"""Gemini API models.

Attribute names match the wire field names, so ``model_dump(exclude_none=True)``
yields a request body as-is. ``None`` means "unset" and is never sent.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


Role = Literal["user", "model"]

SchemaType = Literal["string", "integer", "number", "boolean", "object", "array"]

FunctionCallingMode = Literal["MODE_UNSPECIFIED", "AUTO", "ANY", "NONE", "VALIDATED"]

HarmCategory = Literal[
    "HARM_CATEGORY_UNSPECIFIED",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_CIVIC_INTEGRITY",
]

HarmBlockThreshold = Literal[
    "HARM_BLOCK_THRESHOLD_UNSPECIFIED",
    "BLOCK_LOW_AND_ABOVE",
    "BLOCK_MEDIUM_AND_ABOVE",
    "BLOCK_ONLY_HIGH",
    "BLOCK_NONE",
    "OFF",
]


# ============ Parts ============


class Blob(BaseModel):
    """Inline media bytes, base64 encoded."""

    mimeType: str
    data: str


class FileData(BaseModel):
    """URI based data."""

    mimeType: str | None = None
    fileUri: str


class FunctionCall(BaseModel):
    """A function invocation requested by the model."""

    name: str
    args: dict[str, Any] | None = None
    id: str | None = None


class FunctionResponse(BaseModel):
    """The result of a function call, sent back by the caller."""

    name: str
    response: dict[str, Any]
    id: str | None = None


class ExecutableCode(BaseModel):
    """Code generated by the model for the code execution tool."""

    language: str
    code: str


class CodeExecutionResult(BaseModel):
    """Outcome of running ExecutableCode."""

    outcome: str
    output: str | None = None


class _PartBase(BaseModel):
    # opaque token from thinking models; sent back unchanged with the part
    thoughtSignature: str | None = None


class TextPart(_PartBase):
    """Text part."""

    text: str
    thought: bool | None = None


class InlineDataPart(_PartBase):
    """Inline binary part."""

    inlineData: Blob


class FileDataPart(_PartBase):
    """File reference part."""

    fileData: FileData


class FunctionCallPart(_PartBase):
    """Function call part (in model response)."""

    functionCall: FunctionCall


class FunctionResponsePart(_PartBase):
    """Function response part (in user message)."""

    functionResponse: FunctionResponse


class ExecutableCodePart(_PartBase):
    """Executable code part (in model response)."""

    executableCode: ExecutableCode


class CodeExecutionResultPart(_PartBase):
    """Code execution result part (in model response)."""

    codeExecutionResult: CodeExecutionResult


Part = (
    TextPart
    | InlineDataPart
    | FileDataPart
    | FunctionCallPart
    | FunctionResponsePart
    | ExecutableCodePart
    | CodeExecutionResultPart
)


def _as_parts(message: "str | Part | list[Part]") -> list[Part]:
    if isinstance(message, str):
        return [TextPart(text=message)]
    if isinstance(message, list):
        return list(message)
    return [message]


class Content(BaseModel):
    """One turn of a conversation: a role and its ordered parts."""

    role: Role
    parts: list[Part] = Field(default_factory=list)

    @classmethod
    def user(cls, message: "str | Part | list[Part]") -> "Content":
        return cls(role="user", parts=_as_parts(message))

    @classmethod
    def model(cls, message: "str | Part | list[Part]") -> "Content":
        return cls(role="model", parts=_as_parts(message))

    @property
    def text(self) -> str:
        """Concatenated text of all non-thought text parts, in order."""
        return "".join(
            part.text
            for part in self.parts
            if isinstance(part, TextPart) and not part.thought
        )

    @property
    def function_calls(self) -> list[FunctionCall]:
        return [part.functionCall for part in self.parts if isinstance(part, FunctionCallPart)]


class SystemInstruction(BaseModel):
    """System instruction."""

    parts: list[TextPart]


# ============ Schema ============


class Schema(BaseModel):
    """Description of a JSON value the model should produce.

    A select subset of an OpenAPI 3.0 schema object. Object nodes use
    ``properties`` and ``required``, array nodes use ``items``. Nothing checks
    that the populated fields agree with ``type``; the service does that.
    """

    type: SchemaType | None = None
    format: str | None = None
    title: str | None = None
    description: str | None = None
    nullable: bool | None = None
    enum: list[str] | None = None
    properties: dict[str, "Schema"] | None = None
    required: list[str] | None = None
    propertyOrdering: list[str] | None = None
    items: "Schema | None" = None
    minItems: int | None = None
    maxItems: int | None = None


# ============ Request Models ============


class ThinkingConfig(BaseModel):
    """Thinking features configuration."""

    thinkingBudget: int | None = None
    includeThoughts: bool | None = None


class GenerationConfig(BaseModel):
    """Generation configuration."""

    temperature: float | None = None
    topP: float | None = None
    topK: int | None = None
    candidateCount: int | None = None
    maxOutputTokens: int | None = None
    stopSequences: list[str] | None = None
    presencePenalty: float | None = None
    frequencyPenalty: float | None = None
    seed: int | None = None
    responseMimeType: str | None = None
    responseSchema: Schema | None = None
    thinkingConfig: ThinkingConfig | None = None


class SafetySetting(BaseModel):
    """Blocking threshold for one harm category."""

    category: HarmCategory
    threshold: HarmBlockThreshold


class FunctionDeclaration(BaseModel):
    """Function declaration.

    ``parameters`` follows the JSON-Schema vocabulary directly and is passed
    through untouched.
    """

    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None


class GoogleSearch(BaseModel):
    """Google Search grounding tool."""


class CodeExecution(BaseModel):
    """Server side code execution tool."""


class Tool(BaseModel):
    """Tool definitions available to the model."""

    functionDeclarations: list[FunctionDeclaration] | None = None
    googleSearch: GoogleSearch | None = None
    codeExecution: CodeExecution | None = None


class FunctionCallingConfig(BaseModel):
    """Function calling behaviour."""

    mode: FunctionCallingMode | None = None
    allowedFunctionNames: list[str] | None = None


class ToolConfig(BaseModel):
    """Tool configuration."""

    functionCallingConfig: FunctionCallingConfig | None = None


class GenerateContentRequest(BaseModel):
    """Gemini generate content request."""

    contents: list[Content]
    systemInstruction: SystemInstruction | None = None
    generationConfig: GenerationConfig | None = None
    tools: list[Tool] | None = None
    toolConfig: ToolConfig | None = None
    safetySettings: list[SafetySetting] | None = None


# ============ Response Models ============


class UsageMetadata(BaseModel):
    """Usage metadata."""

    promptTokenCount: int | None = None
    candidatesTokenCount: int | None = None
    totalTokenCount: int | None = None
    thoughtsTokenCount: int | None = None
    cachedContentTokenCount: int | None = None


class SafetyRating(BaseModel):
    """Harm probability for one category."""

    category: str
    probability: str
    blocked: bool | None = None


class PromptFeedback(BaseModel):
    """Feedback on the prompt itself."""

    blockReason: str | None = None
    safetyRatings: list[SafetyRating] | None = None


class Candidate(BaseModel):
    """Response candidate."""

    content: Content | None = None
    finishReason: str | None = None
    index: int = 0
    safetyRatings: list[SafetyRating] | None = None


class GenerateContentResponse(BaseModel):
    """Gemini generate content response.

    Streaming returns the same structure incrementally, one object per
    element of a JSON array.
    """

    candidates: list[Candidate] = Field(default_factory=list)
    promptFeedback: PromptFeedback | None = None
    usageMetadata: UsageMetadata | None = None
    modelVersion: str | None = None
    responseId: str | None = None

    @property
    def text(self) -> str:
        if not self.candidates or self.candidates[0].content is None:
            return ""
        return self.candidates[0].content.text

    @property
    def function_calls(self) -> list[FunctionCall]:
        if not self.candidates or self.candidates[0].content is None:
            return []
        return self.candidates[0].content.function_calls


# ============ Errors ============


class ErrorDetail(BaseModel):
    """Error payload returned by the API."""

    code: int
    message: str
    status: str | None = None
    details: list[dict[str, Any]] = Field(default_factory=list)


class ApiError(BaseModel):
    """Error response body."""

    error: ErrorDetail


# ============ Models listing ============


class Model(BaseModel):
    """Information about a generative model."""

    name: str
    baseModelId: str | None = None
    version: str | None = None
    displayName: str | None = None
    description: str | None = None
    inputTokenLimit: int | None = None
    outputTokenLimit: int | None = None
    supportedGenerationMethods: list[str] = Field(default_factory=list)
    temperature: float | None = None
    maxTemperature: float | None = None
    topP: float | None = None
    topK: int | None = None


class ModelList(BaseModel):
    """One page of models."""

    models: list[Model] = Field(default_factory=list)
    nextPageToken: str | None = None
