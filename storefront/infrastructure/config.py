"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database (FTS5 text index requires SQLite)
    database_url: str = "sqlite+aiosqlite:///./storefront.db"

    # Attribute catalog
    attribute_cache_ttl_seconds: int = 48 * 60 * 60

    # Search
    search_min_query_length: int = 3
    search_tokenizer: str = "trigram"
    search_default_limit: int = 20
    suggestions_limit: int = 10

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
