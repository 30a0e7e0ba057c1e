"""Application settings loaded from the environment."""

import os
from typing import ClassVar

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Runtime configuration for the Book Advisor service."""

    anthropic_api_key: str | None = None
    llm_model: str = "claude-3-5-haiku-20241022"
    llm_temperature: float = Field(0.7, ge=0.0, le=1.0)
    llm_max_tokens: int = Field(1024, gt=0)

    google_books_base_url: str = "https://www.googleapis.com/books/v1"
    google_books_api_key: str | None = None
    book_api_timeout: float = Field(10.0, gt=0)

    database_url: str = "sqlite+aiosqlite:///./reading_list.db"

    max_input_chars: int = Field(2000, gt=0)
    log_level: str = "INFO"

    ENV_VARS: ClassVar[dict[str, str]] = {
        "anthropic_api_key": "ANTHROPIC_API_KEY",
        "llm_model": "LLM_MODEL",
        "llm_temperature": "LLM_TEMPERATURE",
        "llm_max_tokens": "LLM_MAX_TOKENS",
        "google_books_base_url": "GOOGLE_BOOKS_BASE_URL",
        "google_books_api_key": "GOOGLE_BOOKS_API_KEY",
        "book_api_timeout": "BOOK_API_TIMEOUT",
        "database_url": "DATABASE_URL",
        "max_input_chars": "MAX_INPUT_CHARS",
        "log_level": "LOG_LEVEL",
    }

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        values = {field: os.environ[var] for field, var in cls.ENV_VARS.items() if os.environ.get(var)}
        return cls.model_validate(values)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
