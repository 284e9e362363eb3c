"""Context assembly from retrieval results."""

from __future__ import annotations

from core.models import PromptContext, RetrievalResult
from generation.prompts import SYSTEM_PROMPT


def assemble(
    result: RetrievalResult | None, question: str, system: str = SYSTEM_PROMPT
) -> PromptContext:
    """Build the prompt context for one request.

    A missing result (zero matches) gives an empty context; the system
    instruction tells the model how to answer in that case.
    """
    context_docs = result.context_docs if result is not None else ""
    return PromptContext(system=system, context_docs=context_docs, question=question)
