"""Incremental decoding of streamed generate content responses.

The service streams a single top-level JSON array, one response object per
element. Network reads do not line up with element or even token boundaries,
so bytes are buffered and scanned until an element closes.
"""

import json
from typing import Any, AsyncIterable, AsyncIterator, Iterator

import structlog
from pydantic import ValidationError

from gemini_chat.errors import DecodeError
from gemini_chat.models.gemini import (
    Candidate,
    Content,
    FunctionCallPart,
    FunctionResponsePart,
    GenerateContentResponse,
    Part,
    PromptFeedback,
    TextPart,
    UsageMetadata,
)
from gemini_chat.utils.http_client import service_error

logger = structlog.get_logger(__name__)

_WHITESPACE = b" \t\r\n"
_OPEN = b"[{"
_CLOSE = b"]}"
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_COMMA = ord(",")

# Decoder states
_EXPECT_ARRAY = "expect_array"
_EXPECT_VALUE = "expect_value"
_IN_VALUE = "in_value"
_EXPECT_SEPARATOR = "expect_separator"
_DONE = "done"


class JsonArrayDecoder:
    """Push decoder yielding the elements of one streamed JSON array.

    ``feed`` buffers bytes and ``drain`` yields every element they complete.
    Elements are never yielded partially; incomplete bytes stay buffered until
    more arrive. Call ``close`` when the connection ends.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._pos = 0
        self._state = _EXPECT_ARRAY
        self._after_comma = False
        self._depth = 0
        self._in_string = False
        self._escaped = False

    @property
    def finished(self) -> bool:
        """True once the closing bracket of the array has been read."""
        return self._state == _DONE

    def feed(self, chunk: bytes) -> None:
        self._buffer += chunk

    def drain(self) -> Iterator[Any]:
        """Yield every element completed by the bytes fed so far."""
        while self._pos < len(self._buffer):
            if self._state == _IN_VALUE:
                end = self._scan_value()
                if end is None:
                    break
                yield self._take_value(end)
                continue

            byte = self._buffer[self._pos]
            if byte in _WHITESPACE:
                self._pos += 1
            elif self._state == _EXPECT_ARRAY:
                if byte != ord("["):
                    raise DecodeError(f"expected '[' at start of stream, got {chr(byte)!r}")
                self._pos += 1
                self._state = _EXPECT_VALUE
            elif self._state == _EXPECT_VALUE:
                if byte == ord("]") and not self._after_comma:
                    self._pos += 1
                    self._state = _DONE
                else:
                    self._start_value()
            elif self._state == _EXPECT_SEPARATOR:
                self._pos += 1
                if byte == _COMMA:
                    self._state = _EXPECT_VALUE
                    self._after_comma = True
                elif byte == ord("]"):
                    self._state = _DONE
                else:
                    raise DecodeError(f"expected ',' or ']' between elements, got {chr(byte)!r}")
            else:
                raise DecodeError(f"unexpected data after end of array: {chr(byte)!r}")

        self._compact()

    def close(self) -> None:
        """Signal end of input.

        Ending without the closing bracket is accepted as end of stream, but a
        partially received element is an error.
        """
        if self._state == _IN_VALUE or (
            self._state == _EXPECT_VALUE and self._after_comma
        ):
            raise DecodeError(
                "stream ended inside an element: "
                + bytes(self._buffer).decode("utf-8", errors="replace")
            )

    def _start_value(self) -> None:
        self._state = _IN_VALUE
        self._after_comma = False
        self._depth = 0
        self._in_string = False
        self._escaped = False
        # the value starts at _pos; everything before it was consumed
        del self._buffer[: self._pos]
        self._pos = 0

    def _scan_value(self) -> int | None:
        """Advance through the current value; return its end offset once complete."""
        buffer = self._buffer
        pos = self._pos
        while pos < len(buffer):
            byte = buffer[pos]
            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif byte == _BACKSLASH:
                    self._escaped = True
                elif byte == _QUOTE:
                    self._in_string = False
                    if self._depth == 0:
                        return pos + 1
            elif byte == _QUOTE:
                self._in_string = True
            elif byte in _OPEN:
                self._depth += 1
            elif byte in _CLOSE:
                if self._depth == 0:
                    # bare scalar terminated by the closing bracket
                    return pos
                self._depth -= 1
                if self._depth == 0:
                    return pos + 1
            elif self._depth == 0 and (byte == _COMMA or byte in _WHITESPACE):
                return pos
            pos += 1
        self._pos = pos
        return None

    def _take_value(self, end: int) -> Any:
        raw = bytes(self._buffer[:end])
        del self._buffer[:end]
        self._pos = 0
        self._state = _EXPECT_SEPARATOR
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise DecodeError(f"malformed stream element: {exc}") from exc

    def _compact(self) -> None:
        if self._state != _IN_VALUE and self._pos:
            del self._buffer[: self._pos]
            self._pos = 0


def parse_response(element: Any) -> GenerateContentResponse:
    """Validate one decoded element into a response model."""
    if isinstance(element, dict) and "error" in element:
        code = element["error"].get("code", 500) if isinstance(element["error"], dict) else 500
        raise service_error(code, json.dumps(element).encode())
    try:
        return GenerateContentResponse.model_validate(element)
    except ValidationError as exc:
        raise DecodeError(f"unexpected response shape: {exc}") from exc


async def decode_stream(
    chunks: AsyncIterable[bytes],
) -> AsyncIterator[GenerateContentResponse]:
    """Turn raw body chunks into response objects, yielding each as soon as it closes.

    Single pass. Any malformed element ends the stream with DecodeError.
    """
    decoder = JsonArrayDecoder()
    count = 0
    async for chunk in chunks:
        decoder.feed(chunk)
        for element in decoder.drain():
            count += 1
            yield parse_response(element)
    decoder.close()
    logger.debug("stream.closed", elements=count, array_closed=decoder.finished)


def _slot(part: Part) -> tuple | None:
    if isinstance(part, FunctionCallPart):
        return ("functionCall", part.functionCall.name, part.functionCall.id)
    if isinstance(part, FunctionResponsePart):
        return ("functionResponse", part.functionResponse.name, part.functionResponse.id)
    return None


class _CandidateState:
    def __init__(self, index: int) -> None:
        self.index = index
        self.role = "model"
        self.parts: list[Part] = []
        self.finish_reason: str | None = None
        self.safety_ratings = None

    @property
    def finalized(self) -> bool:
        return self.finish_reason is not None

    def merge(self, candidate: Candidate) -> None:
        if candidate.content is not None:
            self.role = candidate.content.role
            earlier = len(self.parts)
            for part in candidate.content.parts:
                self._merge_part(part, earlier)
        if candidate.safetyRatings is not None:
            self.safety_ratings = candidate.safetyRatings
        if candidate.finishReason is not None:
            self.finish_reason = candidate.finishReason

    def _merge_part(self, part: Part, earlier: int) -> None:
        if isinstance(part, TextPart):
            last = self.parts[-1] if self.parts else None
            if isinstance(last, TextPart) and bool(last.thought) == bool(part.thought):
                update = {"text": last.text + part.text}
                if part.thoughtSignature is not None:
                    update["thoughtSignature"] = part.thoughtSignature
                self.parts[-1] = last.model_copy(update=update)
            else:
                self.parts.append(part)
            return

        slot = _slot(part)
        if slot is not None:
            for i in range(earlier):
                if _slot(self.parts[i]) == slot:
                    self.parts[i] = part
                    return
        self.parts.append(part)

    def candidate(self) -> Candidate:
        return Candidate(
            content=Content(role=self.role, parts=list(self.parts)),
            finishReason=self.finish_reason,
            index=self.index,
            safetyRatings=self.safety_ratings,
        )


class StreamAccumulator:
    """Merges streamed chunks into the cumulative response.

    Text of the same candidate concatenates in arrival order. A function call
    or function response replaces the one with the same name and id received
    in an earlier chunk; other parts are appended. Once a chunk carries a
    ``finishReason`` for a candidate, later content for it is ignored.
    """

    def __init__(self) -> None:
        self._candidates: dict[int, _CandidateState] = {}
        self.usage_metadata: UsageMetadata | None = None
        self.prompt_feedback: PromptFeedback | None = None
        self.model_version: str | None = None
        self.response_id: str | None = None
        self.chunks = 0

    @property
    def done(self) -> bool:
        return bool(self._candidates) and all(
            state.finalized for state in self._candidates.values()
        )

    def add(self, chunk: GenerateContentResponse) -> None:
        self.chunks += 1
        for candidate in chunk.candidates:
            state = self._candidates.setdefault(candidate.index, _CandidateState(candidate.index))
            if state.finalized:
                logger.debug("stream.finalized_candidate_ignored", index=candidate.index)
                continue
            state.merge(candidate)
        if chunk.usageMetadata is not None:
            self.usage_metadata = chunk.usageMetadata
        if chunk.promptFeedback is not None:
            self.prompt_feedback = chunk.promptFeedback
        if chunk.modelVersion is not None:
            self.model_version = chunk.modelVersion
        if chunk.responseId is not None:
            self.response_id = chunk.responseId

    def response(self) -> GenerateContentResponse:
        return GenerateContentResponse(
            candidates=[self._candidates[i].candidate() for i in sorted(self._candidates)],
            promptFeedback=self.prompt_feedback,
            usageMetadata=self.usage_metadata,
            modelVersion=self.model_version,
            responseId=self.response_id,
        )
