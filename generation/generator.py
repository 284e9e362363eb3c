"""Streamed LLM answer generation with mid-answer context search."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

import openai

from agent.tools import not_found, result_sources
from core.config import settings
from core.errors import UpstreamError
from core.events import StreamEvent, Token, ToolContext
from core.models import PromptContext

if TYPE_CHECKING:
    from openai import OpenAI

    from agent.tools import SearchContextTool

logger = logging.getLogger(__name__)


@dataclass
class PendingToolCall:
    """A tool call being reassembled from streamed deltas."""

    id: str = ""
    name: str = ""
    arguments: str = ""

    def as_message_part(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class PassOutput:
    """What one streamed completion pass produced besides its tokens."""

    content: list[str] = field(default_factory=list)
    tool_calls: dict[int, PendingToolCall] = field(default_factory=dict)


class AnswerGenerator:
    """Streams an answer token by token, running tool calls in between passes."""

    def __init__(
        self,
        openai_client: OpenAI,
        search_tool: SearchContextTool | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tool_rounds: int | None = None,
    ):
        self.openai_client = openai_client
        self.search_tool = search_tool
        self.model = model or settings.llm_model
        self.temperature = settings.temperature if temperature is None else temperature
        self.max_tool_rounds = (
            settings.max_tool_rounds if max_tool_rounds is None else max_tool_rounds
        )

    def stream(self, context: PromptContext) -> Iterator[StreamEvent]:
        """Generate an answer for the assembled context.

        Yields Token events in generation order and a ToolContext event for
        every search_context call. Once max_tool_rounds is reached the next
        pass is the last one. Termination events are left to the caller.

        Raises:
            UpstreamError: the chat completion request failed
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": context.system},
            {"role": "user", "content": context.prompt},
        ]
        rounds = 0

        while True:
            output = PassOutput()
            tools_allowed = self.search_tool is not None and rounds < self.max_tool_rounds
            yield from self._stream_pass(messages, output, tools_allowed)

            if not output.tool_calls:
                logger.info("Answer finished after %d tool round(s)", rounds)
                return
            if not tools_allowed:
                logger.warning(
                    "Ignoring %d tool call(s) past the limit of %d round(s)",
                    len(output.tool_calls),
                    self.max_tool_rounds,
                )
                return

            rounds += 1
            calls = [output.tool_calls[i] for i in sorted(output.tool_calls)]
            messages.append(
                {
                    "role": "assistant",
                    "content": "".join(output.content) or None,
                    "tool_calls": [call.as_message_part() for call in calls],
                }
            )
            for call in calls:
                result = self._run_tool(call)
                yield ToolContext(found=result["found"], sources=result_sources(result))
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(result),
                    }
                )

    def _request(self, messages: list[dict[str, Any]], tools_allowed: bool):
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "stream": True,
        }
        if self.search_tool is not None:
            kwargs["tools"] = [self.search_tool.definition]
            if not tools_allowed:
                kwargs["tool_choice"] = "none"
        return self.openai_client.chat.completions.create(**kwargs)

    def _stream_pass(
        self, messages: list[dict[str, Any]], output: PassOutput, tools_allowed: bool
    ) -> Iterator[Token]:
        try:
            stream = self._request(messages, tools_allowed)
        except openai.OpenAIError as e:
            logger.error("Chat completion request failed: %s", e)
            raise UpstreamError(f"Answer generation failed: {e}") from e

        try:
            for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta is None:
                    continue

                if delta.content:
                    output.content.append(delta.content)
                    yield Token(text=delta.content)

                for part in delta.tool_calls or []:
                    pending = output.tool_calls.setdefault(part.index, PendingToolCall())
                    if part.id:
                        pending.id = part.id
                    if part.function is not None:
                        if part.function.name:
                            pending.name = part.function.name
                        if part.function.arguments:
                            pending.arguments += part.function.arguments
        except openai.OpenAIError as e:
            logger.error("Answer stream interrupted: %s", e)
            raise UpstreamError(f"Answer generation failed: {e}") from e
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()

    def _run_tool(self, call: PendingToolCall) -> dict[str, Any]:
        if self.search_tool is None or call.name != self.search_tool.name:
            logger.warning("Model requested unknown tool: %s", call.name)
            return not_found()
        return self.search_tool.execute_raw(call.arguments)
