"""Agent tools callable by the chat model mid-answer."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from core.errors import RAGError
from core.models import Source
from generation.prompts import SEARCH_TOOL_DESCRIPTION, SEARCH_TOOL_NAME

if TYPE_CHECKING:
    from retrieval.retriever import Retriever

logger = logging.getLogger(__name__)


def not_found() -> dict[str, Any]:
    return {"additionalContext": "", "sources": [], "found": False}


class SearchContextTool:
    """Re-runs retrieval for a search term chosen by the model."""

    name = SEARCH_TOOL_NAME

    def __init__(self, retriever: Retriever, top_k: int | None = None):
        self.retriever = retriever
        self.top_k = top_k

    @property
    def definition(self) -> dict[str, Any]:
        """OpenAI function-calling schema for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": SEARCH_TOOL_DESCRIPTION,
                "parameters": {
                    "type": "object",
                    "properties": {
                        "searchTerm": {
                            "type": "string",
                            "description": "The specific term or concept to search for in the documentation",
                        },
                        "reason": {
                            "type": "string",
                            "description": "Why you need this additional information",
                        },
                    },
                    "required": ["searchTerm", "reason"],
                },
            },
        }

    def execute(self, search_term: str, reason: str = "") -> dict[str, Any]:
        """Search for additional context.

        Retrieval failures are logged and reported as not found so the
        answer can continue.

        Returns:
            dict with additionalContext, sources and found
        """
        if not search_term or not search_term.strip():
            logger.warning("search_context called without a search term")
            return not_found()

        logger.info("Searching for additional context: %s (%s)", search_term, reason)
        try:
            result = self.retriever.search(search_term, top_k=self.top_k)
        except RAGError as e:
            logger.warning("Error fetching additional context: %s", e)
            return not_found()

        context = result.context_docs
        return {
            "additionalContext": context,
            "sources": [s.model_dump() for s in result.sources],
            "found": len(context) > 0,
        }

    def execute_raw(self, arguments: str) -> dict[str, Any]:
        """Execute from the JSON argument string the model produced."""
        try:
            args = json.loads(arguments or "{}")
        except json.JSONDecodeError:
            logger.warning("Malformed search_context arguments: %r", arguments)
            return not_found()
        if not isinstance(args, dict):
            return not_found()

        search_term = args.get("searchTerm")
        if not isinstance(search_term, str):
            return not_found()
        reason = args.get("reason")
        return self.execute(search_term, reason if isinstance(reason, str) else "")


def result_sources(result: dict[str, Any]) -> list[Source]:
    return [Source(**s) for s in result.get("sources", [])]
