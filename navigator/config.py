"""Configuration management."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Model access
    openai_api_key: str = ""
    openai_model: str = Field(default="gpt-4o-mini", description="Completion model identifier")
    openai_embedding_model: str = Field(default="text-embedding-3-small", description="Embedding model identifier")
    embedding_dimensions: int = 1536

    # Persistence; in-process backends are used when unset
    database_url: Optional[str] = None
    db_min_connections: int = 2
    db_max_connections: int = 10

    # Recall tuning
    recall_limit: int = Field(default=8, ge=1)
    recall_threshold: float = Field(default=0.2, ge=0.0, le=1.0)

    # Timeouts (seconds) for every external call
    completion_timeout: float = 60.0
    storage_timeout: float = 10.0
    tool_timeout: float = 10.0

    default_user_id: str = "demo-user"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    service_name: str = "project-navigator"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
