"""Unit tests for embedding and retrieval components."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock

import openai
import pytest

from core.config import settings
from core.errors import EmptyResultError, UpstreamError
from core.models import RetrievedDocument
from retrieval.embedder import Embedder
from retrieval.retriever import Retriever


def doc(text, title, score):
    return RetrievedDocument(text=text, title=title, file_path=f"docs/{title}.md", score=score)


class TestEmbedder:
    """Tests for the embedding client."""

    @pytest.fixture
    def mock_client(self):
        client = MagicMock()
        client.embeddings.create.return_value = Mock(data=[Mock(embedding=[0.1, 0.2, 0.3])])
        return client

    def test_embed_calls_openai_and_returns_tuple(self, mock_client):
        embedder = Embedder(mock_client, model="text-embedding-3-small")

        vector = embedder.embed("What does config.ts do?")

        assert vector == (0.1, 0.2, 0.3)
        assert isinstance(vector, tuple)
        mock_client.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small", input="What does config.ts do?"
        )

    def test_embed_is_deterministic_for_same_text(self, mock_client):
        embedder = Embedder(mock_client)

        assert embedder.embed("same text") == embedder.embed("same text")
        assert mock_client.embeddings.create.call_count == 2

    def test_embed_uses_configured_model_by_default(self, mock_client):
        Embedder(mock_client).embed("q")
        call_args = mock_client.embeddings.create.call_args
        assert call_args.kwargs["model"] == settings.embedding_model

    def test_embed_rejects_empty_text(self, mock_client):
        embedder = Embedder(mock_client)
        with pytest.raises(ValueError):
            embedder.embed("   ")
        assert not mock_client.embeddings.create.called

    def test_embed_wraps_openai_errors(self, mock_client):
        mock_client.embeddings.create.side_effect = openai.OpenAIError("timed out")
        embedder = Embedder(mock_client)

        with pytest.raises(UpstreamError, match="timed out"):
            embedder.embed("q")
        assert mock_client.embeddings.create.call_count == 1


class TestRetriever:
    """Tests for the vector retriever."""

    @pytest.fixture
    def mock_store(self):
        store = MagicMock()
        store.query.return_value = [
            doc("First text", "first", 0.9),
            doc("Second text", "second", 0.8),
            doc("Third text", "third", 0.7),
        ]
        return store

    @pytest.fixture
    def mock_embedder(self):
        embedder = MagicMock()
        embedder.embed.return_value = (0.5, 0.5)
        return embedder

    def test_retrieve_builds_context_and_sources(self, mock_store, mock_embedder):
        retriever = Retriever(mock_store, mock_embedder)

        result = retriever.retrieve((0.1, 0.2), top_k=3)

        assert result.context_docs == "First text\n\nSecond text\n\nThird text"
        assert [s.title for s in result.sources] == ["first", "second", "third"]
        assert result.sources[0].file_path == "docs/first.md"
        assert result.sources[0].score == 0.9
        mock_store.query.assert_called_once_with((0.1, 0.2), top_k=3)

    def test_sources_match_context_segments(self, mock_store, mock_embedder):
        result = Retriever(mock_store, mock_embedder).retrieve((0.1,), top_k=3)

        segments = result.context_docs.split("\n\n")
        assert len(segments) == len(result.sources)
        scores = [s.score for s in result.sources]
        assert scores == sorted(scores, reverse=True)

    def test_retrieve_does_not_reorder(self, mock_store, mock_embedder):
        mock_store.query.return_value = [doc("b", "b", 0.5), doc("a", "a", 0.6)]

        result = Retriever(mock_store, mock_embedder).retrieve((0.1,), top_k=2)

        assert [s.title for s in result.sources] == ["b", "a"]

    def test_retrieve_default_top_k(self, mock_store, mock_embedder):
        Retriever(mock_store, mock_embedder).retrieve((0.1,))
        assert mock_store.query.call_args.kwargs["top_k"] == settings.top_k

    @pytest.mark.parametrize("top_k", [0, -1, 2.5, True])
    def test_retrieve_rejects_invalid_top_k(self, mock_store, mock_embedder, top_k):
        with pytest.raises(ValueError):
            Retriever(mock_store, mock_embedder).retrieve((0.1,), top_k=top_k)
        assert not mock_store.query.called

    def test_zero_matches_raise_empty_result(self, mock_store, mock_embedder):
        mock_store.query.return_value = []

        with pytest.raises(EmptyResultError):
            Retriever(mock_store, mock_embedder).retrieve((0.1,), top_k=3)

    def test_search_embeds_then_retrieves(self, mock_store, mock_embedder):
        retriever = Retriever(mock_store, mock_embedder)

        result = retriever.search("deploy", top_k=2)

        mock_embedder.embed.assert_called_once_with("deploy")
        mock_store.query.assert_called_once_with((0.5, 0.5), top_k=2)
        assert len(result.documents) == 3

    def test_search_propagates_upstream_error(self, mock_store, mock_embedder):
        mock_embedder.embed.side_effect = UpstreamError("embedding down")

        with pytest.raises(UpstreamError):
            Retriever(mock_store, mock_embedder).search("q")
        assert not mock_store.query.called
