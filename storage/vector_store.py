"""Pinecone vector index access for document retrieval."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from core.config import Settings, settings
from core.errors import ConfigError, NotInitializedError, UpstreamError
from core.models import UNKNOWN, EmbeddingVector, RetrievedDocument

if TYPE_CHECKING:
    from pinecone import Index

logger = logging.getLogger(__name__)


def _field(metadata: Any, name: str, default: str) -> str:
    """Read a metadata field, tolerating absent or non-string values."""
    if not isinstance(metadata, dict):
        return default
    value = metadata.get(name)
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        return str(value)
    return value


def _score(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class VectorStore:
    """Read-only view over a named Pinecone index."""

    def __init__(
        self,
        index: Index | None = None,
        namespace: str | None = None,
        config: Settings | None = None,
    ):
        config = config or settings
        if index is None:
            if not config.pinecone_api_key or not config.pinecone_index_name:
                raise ConfigError("PINECONE_API_KEY and PINECONE_INDEX_NAME must be set")

            from pinecone import Pinecone

            client = Pinecone(api_key=config.pinecone_api_key)
            self._index = client.Index(config.pinecone_index_name)
            logger.info("Connected to Pinecone index '%s'", config.pinecone_index_name)
        else:
            self._index = index
        self.namespace = config.pinecone_namespace if namespace is None else namespace
        self.timeout = config.request_timeout

    @property
    def index(self) -> Index:
        if self._index is None:
            raise NotInitializedError("Pinecone index is not initialized")
        return self._index

    def close(self) -> None:
        self._index = None

    def query(self, vector: EmbeddingVector, top_k: int) -> list[RetrievedDocument]:
        """Return the top_k nearest documents in the index's ranked order.

        Raises:
            UpstreamError: the query failed or exceeded request_timeout
        """
        index = self.index
        try:
            response = index.query(
                vector=list(vector),
                top_k=top_k,
                include_metadata=True,
                namespace=self.namespace,
                _request_timeout=self.timeout,
            )
        except Exception as e:
            logger.error("Pinecone query failed: %s", e)
            raise UpstreamError(f"Vector index query failed: {e}") from e

        documents = []
        for match in getattr(response, "matches", None) or []:
            metadata = getattr(match, "metadata", None)
            documents.append(
                RetrievedDocument(
                    text=_field(metadata, "text", ""),
                    title=_field(metadata, "title", UNKNOWN),
                    file_path=_field(metadata, "file_path", UNKNOWN),
                    score=_score(getattr(match, "score", None)),
                )
            )

        logger.debug("Pinecone returned %d matches", len(documents))
        return documents
