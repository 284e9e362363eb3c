"""Unit tests for settings, logging setup and the client registry."""

import logging
import threading
from logging.handlers import TimedRotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest

from api.rate_limit import RateLimiter
from core.clients import ClientRegistry
from core.config import Settings
from core.errors import ConfigError, NotInitializedError
from core.logging_setup import setup_logging


def full_config(**overrides):
    values = {
        "openai_api_key": "sk-test",
        "pinecone_api_key": "pc-test",
        "pinecone_index_name": "jigsaw-docs",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_defaults(self):
        config = full_config()
        assert config.top_k == 3
        assert config.temperature == 0.7
        assert config.embedding_model == "text-embedding-3-small"
        assert config.enable_search_tool is True

    def test_require_credentials_passes_when_complete(self):
        full_config().require_credentials()

    def test_require_credentials_names_missing(self):
        config = Settings(
            _env_file=None, openai_api_key="sk", pinecone_api_key="", pinecone_index_name=""
        )
        with pytest.raises(ConfigError) as exc_info:
            config.require_credentials()
        assert "PINECONE_API_KEY" in str(exc_info.value)
        assert "PINECONE_INDEX_NAME" in str(exc_info.value)
        assert "OPENAI_API_KEY" not in str(exc_info.value)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PINECONE_INDEX_NAME", "from-env")
        monkeypatch.setenv("TOP_K", "5")
        config = Settings(_env_file=None)
        assert config.pinecone_index_name == "from-env"
        assert config.top_k == 5


class TestClientRegistry:
    def test_accessors_fail_before_initialize(self):
        registry = ClientRegistry(full_config())

        assert not registry.initialized
        with pytest.raises(NotInitializedError):
            registry.agent
        with pytest.raises(NotInitializedError):
            registry.openai
        with pytest.raises(NotInitializedError):
            registry.vector_store

    def test_initialize_with_injected_handles(self):
        registry = ClientRegistry(full_config())
        client, store = MagicMock(), MagicMock()

        registry.initialize(openai_client=client, vector_store=store)

        assert registry.initialized
        assert registry.openai is client
        assert registry.vector_store is store
        assert registry.agent.generator.search_tool is not None
        assert registry.agent.generator.temperature == 0.7

    def test_initialize_is_one_shot(self):
        registry = ClientRegistry(full_config())
        registry.initialize(openai_client=MagicMock(), vector_store=MagicMock())
        agent = registry.agent

        registry.initialize(openai_client=MagicMock(), vector_store=MagicMock())

        assert registry.agent is agent

    def test_concurrent_initialize_builds_once(self):
        registry = ClientRegistry(full_config())
        with patch("retrieval.embedder.create_openai_client") as create_client, patch(
            "storage.vector_store.VectorStore"
        ) as store_cls:
            threads = [threading.Thread(target=registry.initialize) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert create_client.call_count == 1
        assert store_cls.call_count == 1

    def test_missing_credentials_fail_at_initialize(self):
        registry = ClientRegistry(
            Settings(_env_file=None, openai_api_key="", pinecone_api_key="", pinecone_index_name="")
        )

        with pytest.raises(ConfigError):
            registry.initialize()
        assert not registry.initialized

    def test_search_tool_can_be_disabled(self):
        registry = ClientRegistry(full_config(enable_search_tool=False))
        registry.initialize(openai_client=MagicMock(), vector_store=MagicMock())

        assert registry.agent.generator.search_tool is None

    def test_close_resets(self):
        registry = ClientRegistry(full_config())
        store = MagicMock()
        registry.initialize(openai_client=MagicMock(), vector_store=store)

        registry.close()

        store.close.assert_called_once()
        assert not registry.initialized
        with pytest.raises(NotInitializedError):
            registry.agent


class TestRateLimiter:
    def test_fixed_window(self):
        now = [0.0]
        limiter = RateLimiter(limit=2, window_seconds=60, clock=lambda: now[0])

        assert limiter.hit("1.2.3.4")[0]
        assert limiter.hit("1.2.3.4")[0]
        allowed, remaining, reset = limiter.hit("1.2.3.4")
        assert not allowed
        assert remaining == 0
        assert reset == 60

        assert limiter.hit("5.6.7.8")[0]

        now[0] = 61.0
        assert limiter.hit("1.2.3.4")[0]

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            RateLimiter(limit=0, window_seconds=60)


class TestLogging:
    def test_console_only(self):
        setup_logging("DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert not any(isinstance(h, TimedRotatingFileHandler) for h in root.handlers)

    def test_rotating_files(self, tmp_path):
        setup_logging("INFO", str(tmp_path / "logs"))
        logging.getLogger("tests").error("something broke")

        for name in ("info.log", "warn.log", "error.log"):
            assert (tmp_path / "logs" / name).exists()
        assert "something broke" in (tmp_path / "logs" / "error.log").read_text()

        setup_logging("INFO")

    def test_access_lines_go_to_http_log(self, tmp_path):
        log_dir = tmp_path / "logs"
        setup_logging("INFO", str(log_dir))
        logging.getLogger("api.access").info("127.0.0.1 -- POST - /api/chat - 200 - 12.0ms")
        logging.getLogger("api.app").info("Chat chat-1: hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        http_log = (log_dir / "http.log").read_text()
        info_log = (log_dir / "info.log").read_text()
        assert "/api/chat - 200" in http_log
        assert "Chat chat-1" not in http_log
        assert "Chat chat-1" in info_log
        assert "/api/chat - 200" not in info_log

        setup_logging("INFO")
