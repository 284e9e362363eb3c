"""RAG agent: retrieve, cite, then stream an answer that may search again."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from core.errors import EmptyResultError, RAGError
from core.events import End, Error, Sources, StreamEvent, Token, ToolContext
from core.models import RetrievalResult
from generation.context import assemble

if TYPE_CHECKING:
    from generation.generator import AnswerGenerator
    from retrieval.retriever import Retriever

logger = logging.getLogger(__name__)


@dataclass
class AgentState:
    """Per-request state, discarded when the stream ends."""

    query: str = ""
    result: RetrievalResult | None = None
    tokens: int = 0
    tool_calls: int = 0
    tool_hits: int = 0
    error: str = ""


class RAGAgent:
    """Runs the retrieval-augmented answer pipeline for one query at a time."""

    def __init__(
        self,
        retriever: Retriever,
        generator: AnswerGenerator,
        top_k: int | None = None,
    ):
        self.retriever = retriever
        self.generator = generator
        self.top_k = top_k

    def retrieve(self, state: AgentState) -> AgentState:
        """Initial retrieval. Zero matches leave the result empty."""
        try:
            state.result = self.retriever.search(state.query, top_k=self.top_k)
        except EmptyResultError:
            logger.warning("No documents matched query: %s", state.query)
            state.result = None
        return state

    def stream(self, query: str) -> Iterator[StreamEvent]:
        """Execute the full pipeline as a sequence of stream events.

        Flow: embed -> retrieve -> sources -> assemble -> generate -> end.
        Exactly one End or Error closes the sequence.
        """
        if not query or not query.strip():
            raise ValueError("Query must be a non-empty string")

        state = AgentState(query=query)

        try:
            state = self.retrieve(state)
        except RAGError as e:
            state.error = str(e) or e.__class__.__name__
            logger.error("Retrieval failed before answering: %s", state.error)
            yield Error(message=state.error)
            return

        sources = state.result.sources if state.result is not None else []
        yield Sources(sources=sources)

        context = assemble(state.result, state.query)
        try:
            for event in self.generator.stream(context):
                if isinstance(event, Token):
                    state.tokens += 1
                elif isinstance(event, ToolContext):
                    state.tool_calls += 1
                    state.tool_hits += int(event.found)
                yield event
        except RAGError as e:
            state.error = str(e) or e.__class__.__name__
            logger.error("Answer stream failed: %s", state.error)
            yield Error(message=state.error)
            return

        logger.info(
            "Answered with %d tokens, %d sources, %d tool call(s) (%d found)",
            state.tokens,
            len(sources),
            state.tool_calls,
            state.tool_hits,
        )
        yield End()
