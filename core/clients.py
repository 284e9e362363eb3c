"""Long-lived service handles, initialized once per process."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from core.config import Settings, settings as default_settings
from core.errors import NotInitializedError

if TYPE_CHECKING:
    from openai import OpenAI

    from agent.rag_agent import RAGAgent
    from storage.vector_store import VectorStore

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Holds the OpenAI client, the Pinecone index and the agent built on them.

    initialize() runs at most once; accessors raise NotInitializedError until
    it has completed, so early requests fail fast instead of racing it.
    """

    def __init__(self, config: Settings | None = None):
        self.config = config or default_settings
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._openai: OpenAI | None = None
        self._vector_store: VectorStore | None = None
        self._agent: RAGAgent | None = None

    @property
    def initialized(self) -> bool:
        return self._ready.is_set()

    def initialize(
        self,
        openai_client: OpenAI | None = None,
        vector_store: VectorStore | None = None,
    ) -> None:
        """Build every handle. Raises ConfigError when credentials are missing.

        Args:
            openai_client: Pre-built client (will create if None)
            vector_store: Pre-built store (will connect to Pinecone if None)
        """
        from agent.rag_agent import RAGAgent
        from agent.tools import SearchContextTool
        from generation.generator import AnswerGenerator
        from retrieval.embedder import Embedder, create_openai_client
        from retrieval.retriever import Retriever
        from storage.vector_store import VectorStore

        with self._lock:
            if self._ready.is_set():
                logger.debug("Client registry already initialized")
                return

            if openai_client is None or vector_store is None:
                self.config.require_credentials()

            client = openai_client or create_openai_client(self.config)
            store = vector_store or VectorStore(config=self.config)

            retriever = Retriever(store, Embedder(client, model=self.config.embedding_model))
            search_tool = None
            if self.config.enable_search_tool:
                search_tool = SearchContextTool(retriever, top_k=self.config.top_k)
            generator = AnswerGenerator(
                client,
                search_tool=search_tool,
                model=self.config.llm_model,
                temperature=self.config.temperature,
                max_tool_rounds=self.config.max_tool_rounds,
            )

            self._openai = client
            self._vector_store = store
            self._agent = RAGAgent(retriever, generator, top_k=self.config.top_k)
            self._ready.set()

        logger.info(
            "Clients initialized (index=%s, search tool %s)",
            self.config.pinecone_index_name or "<injected>",
            "on" if search_tool is not None else "off",
        )

    def _require(self, handle, name: str):
        if not self._ready.is_set() or handle is None:
            raise NotInitializedError(f"{name} is not initialized. Call initialize() first.")
        return handle

    @property
    def openai(self) -> OpenAI:
        return self._require(self._openai, "OpenAI client")

    @property
    def vector_store(self) -> VectorStore:
        return self._require(self._vector_store, "Vector store")

    @property
    def agent(self) -> RAGAgent:
        return self._require(self._agent, "RAG agent")

    def close(self) -> None:
        with self._lock:
            if self._vector_store is not None:
                self._vector_store.close()
            close = getattr(self._openai, "close", None)
            if callable(close):
                close()
            self._openai = None
            self._vector_store = None
            self._agent = None
            self._ready.clear()
