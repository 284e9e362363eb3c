"""Vector retrieval: nearest documents for a query vector."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.config import settings
from core.errors import EmptyResultError
from core.models import EmbeddingVector, RetrievalResult

if TYPE_CHECKING:
    from retrieval.embedder import Embedder
    from storage.vector_store import VectorStore

logger = logging.getLogger(__name__)


class Retriever:
    """Turns vector index matches into a ranked RetrievalResult."""

    def __init__(self, vector_store: VectorStore, embedder: Embedder):
        """Initialize retriever with a vector store and an embedder.

        Args:
            vector_store: Pinecone-backed store to query
            embedder: Embedding client used by search()
        """
        self.vector_store = vector_store
        self.embedder = embedder

    def retrieve(
        self, vector: EmbeddingVector, top_k: int | None = None
    ) -> RetrievalResult:
        """Query the index and keep its ranking.

        Args:
            vector: Query embedding
            top_k: Number of matches to request (default: settings.top_k)

        Returns:
            RetrievalResult whose documents follow the index order

        Raises:
            EmptyResultError: the index returned no matches
        """
        if top_k is None:
            top_k = settings.top_k
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
            raise ValueError(f"top_k must be a positive integer, got {top_k!r}")

        documents = self.vector_store.query(vector, top_k=top_k)
        if not documents:
            raise EmptyResultError("No matching documents found")

        logger.info("Retrieved %d documents", len(documents))
        return RetrievalResult(documents=documents)

    def search(self, text: str, top_k: int | None = None) -> RetrievalResult:
        """Embed free text and retrieve for it."""
        vector = self.embedder.embed(text)
        return self.retrieve(vector, top_k=top_k)
