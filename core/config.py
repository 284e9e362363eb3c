"""Documentation chat API configuration via Pydantic settings."""

from pydantic_settings import BaseSettings

from core.errors import ConfigError


class Settings(BaseSettings):
    # OpenAI
    openai_api_key: str = ""
    embedding_model: str = "text-embedding-3-small"
    llm_model: str = "gpt-4o-mini"
    temperature: float = 0.7
    request_timeout: float = 30.0

    # Pinecone
    pinecone_api_key: str = ""
    pinecone_index_name: str = ""
    pinecone_namespace: str = ""

    # Retrieval
    top_k: int = 3

    # Generation
    enable_search_tool: bool = True
    max_tool_rounds: int = 5

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    rate_limit_requests: int = 20
    rate_limit_window_seconds: int = 60

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def require_credentials(self) -> None:
        """Raise ConfigError naming every missing secret or identifier."""
        required = {
            "OPENAI_API_KEY": self.openai_api_key,
            "PINECONE_API_KEY": self.pinecone_api_key,
            "PINECONE_INDEX_NAME": self.pinecone_index_name,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")


settings = Settings()
