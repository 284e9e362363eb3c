"""Query embedding through the OpenAI embeddings API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import openai

from core.config import Settings, settings
from core.errors import ConfigError, UpstreamError
from core.models import EmbeddingVector

if TYPE_CHECKING:
    from openai import OpenAI

logger = logging.getLogger(__name__)


def create_openai_client(config: Settings | None = None) -> OpenAI:
    """Build the shared OpenAI client with a bounded timeout and no retries."""
    config = config or settings
    if not config.openai_api_key:
        raise ConfigError("OPENAI_API_KEY is not configured")

    from openai import OpenAI

    return OpenAI(
        api_key=config.openai_api_key,
        timeout=config.request_timeout,
        max_retries=0,
    )


class Embedder:
    """Converts free text into a fixed-length vector."""

    def __init__(self, openai_client: OpenAI | None = None, model: str | None = None):
        self.openai_client = openai_client or create_openai_client()
        self.model = model or settings.embedding_model

    def embed(self, text: str) -> EmbeddingVector:
        """Embed text using the configured embedding model.

        Args:
            text: Non-empty text to embed

        Returns:
            Embedding vector as an immutable tuple of floats

        Raises:
            UpstreamError: the embeddings call failed or timed out
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        try:
            response = self.openai_client.embeddings.create(model=self.model, input=text)
        except openai.OpenAIError as e:
            logger.error("Embedding request failed: %s", e)
            raise UpstreamError(f"Embedding request failed: {e}") from e

        return tuple(response.data[0].embedding)
