"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Onebox Sync"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Milvus document store
    milvus_host: str = "localhost"
    milvus_port: int = 19530
    milvus_collection_name: str = "emails"

    # LLM classifier
    llm_provider: Literal["groq", "openai", "anthropic", "local"] = "groq"
    groq_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None
    vllm_base_url: str = "http://localhost:8000/v1"
    vllm_model_name: str = "gpt-oss-20b"
    classifier_max_chars: int = Field(default=4000, gt=0)

    # Notifications
    slack_webhook_url: str | None = None
    interested_webhook_url: str | None = None
    notification_timeout_seconds: float = 10.0

    # Mailboxes (see AccountRegistry.from_settings for the formats)
    imap_accounts: str | None = None
    imap_mailboxes: str | None = None
    imap_default_folder: str = "INBOX"
    imap_timeout_seconds: float = 60.0
    fetch_batch_size: int = Field(default=50, gt=0)

    # Sync loop
    backfill_days: int = Field(default=30, ge=0)
    idle_timeout_seconds: float = Field(default=29 * 60, gt=0)
    watch_max_retries: int = Field(default=5, ge=0)
    watch_backoff_base_seconds: float = 1.0
    watch_backoff_max_seconds: float = 60.0

    # Per-account supervision
    restart_base_seconds: float = 5.0
    restart_max_seconds: float = 300.0
    restart_max_attempts: int = Field(default=0, ge=0)  # 0 = never give up
    restart_reset_seconds: float = 600.0
    stats_interval_seconds: float = 300.0

    @computed_field
    @property
    def milvus_uri(self) -> str:
        """Construct Milvus connection URI."""
        return f"http://{self.milvus_host}:{self.milvus_port}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
