"""Chat sessions: conversation history plus request settings."""

from contextlib import aclosing
from typing import TYPE_CHECKING, Any, AsyncIterator, Sequence, TypeVar

import structlog

from gemini_chat.converters.request_encoder import build_request
from gemini_chat.converters.response_projection import require_schema, response_structured
from gemini_chat.models import gemini as gem
from gemini_chat.streaming import StreamAccumulator

if TYPE_CHECKING:
    from gemini_chat.client import Client

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Message = str | gem.Part | list[gem.Part]


def _model_turn(resp: gem.GenerateContentResponse) -> gem.Content:
    if resp.candidates and resp.candidates[0].content is not None:
        return gem.Content(role="model", parts=list(resp.candidates[0].content.parts))
    return gem.Content(role="model", parts=[])


class ChatSession:
    """A multi-turn conversation with one model.

    Every call appends the user turn first and, once a response is complete,
    the model turn. A failed call keeps its user turn so it can be retried
    with the same prompt. History is append-only except through
    ``mutable_history``.

    A session has a single writer: do not start a second call before the
    previous one has completed or been abandoned. Nothing here locks.
    """

    def __init__(
        self,
        client: "Client",
        model: str,
        *,
        system_instruction: str | None = None,
        generation_config: gem.GenerationConfig | None = None,
        safety_settings: Sequence[gem.SafetySetting] | None = None,
        tools: Sequence[gem.Tool] | None = None,
        tool_config: gem.ToolConfig | None = None,
        history: Sequence[gem.Content] | None = None,
    ):
        self.client = client
        self.model = model
        self.system_instruction = system_instruction
        self._generation_config = generation_config
        self.safety_settings = list(safety_settings or [])
        self.tools = list(tools or [])
        self.tool_config = tool_config
        self._history: list[gem.Content] = list(history or [])

    @property
    def history(self) -> tuple[gem.Content, ...]:
        return tuple(self._history)

    @property
    def mutable_history(self) -> list[gem.Content]:
        """The live history list.

        Callers editing it must keep it valid, e.g. never leave a function
        call turn without its function response turn.
        """
        return self._history

    @property
    def generation_config(self) -> gem.GenerationConfig:
        if self._generation_config is None:
            self._generation_config = gem.GenerationConfig()
        return self._generation_config

    @generation_config.setter
    def generation_config(self, config: gem.GenerationConfig | None) -> None:
        self._generation_config = config

    def with_response_schema(self, schema: gem.Schema) -> "ChatSession":
        """Request JSON output matching ``schema`` for the following calls."""
        self._generation_config = self.generation_config.model_copy(
            update={"responseMimeType": "application/json", "responseSchema": schema}
        )
        return self

    def _request(self) -> gem.GenerateContentRequest:
        return build_request(
            self._history,
            generation_config=self._generation_config,
            system_instruction=self.system_instruction,
            tools=self.tools,
            tool_config=self.tool_config,
            safety_settings=self.safety_settings,
        )

    def _record(self, resp: gem.GenerateContentResponse) -> None:
        self._history.append(_model_turn(resp))
        logger.debug("chat.turn_recorded", model=self.model, turns=len(self._history))

    async def send(self, message: Message) -> gem.GenerateContentResponse:
        """Send a user turn and wait for the full response.

        ``message`` is text or parts, e.g. function responses.

        A response without candidates, such as a blocked prompt, is recorded
        as a model turn with no parts. The service rejects empty turns, so
        remove it through ``mutable_history`` before sending again.
        """
        self._history.append(gem.Content.user(message))
        resp = await self.client.send(self.model, self._request())
        self._record(resp)
        return resp

    def send_streaming(self, message: Message) -> AsyncIterator[gem.GenerateContentResponse]:
        """Send a user turn and return an iterator over the response chunks.

        The user turn is appended immediately, like ``send``. The merged model
        turn is appended once every candidate has a finish reason, before
        that chunk is yielded, or at the end of a stream that never sends
        one. A stream abandoned before then records nothing beyond the user
        turn.
        """
        self._history.append(gem.Content.user(message))
        return self._stream(self.client.send_streaming(self.model, self._request()))

    async def _stream(
        self, chunks: AsyncIterator[gem.GenerateContentResponse]
    ) -> AsyncIterator[gem.GenerateContentResponse]:
        accumulator = StreamAccumulator()
        recorded = False
        async with aclosing(chunks):
            async for chunk in chunks:
                accumulator.add(chunk)
                if accumulator.done and not recorded:
                    self._record(accumulator.response())
                    recorded = True
                yield chunk
        if not recorded:
            self._record(accumulator.response())

    async def send_json(self, message: Message, target_type: type[T] | Any) -> T:
        """Send a user turn and deserialize the JSON answer into ``target_type``.

        Needs a response schema, see ``with_response_schema``.
        """
        require_schema(self._generation_config)
        resp = await self.send(message)
        return response_structured(resp, target_type, self._generation_config)
