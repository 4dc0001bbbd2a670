"""Centralized configuration for inverted-search using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


class Settings(BaseSettings):
    """Engine defaults loaded from ``INVERTED_SEARCH_*`` environment variables.

    Only presentation and observability defaults live here. Tokenization is
    fixed behavior and is deliberately absent.
    """

    model_config = SettingsConfigDict(
        env_prefix="INVERTED_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="info", description="Root logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Highlighting
    highlight_before: str = Field(default="<b>", description="Marker inserted before each highlighted span")
    highlight_after: str = Field(default="</b>", description="Marker inserted after each highlighted span")
    snippet_max_chars: int = Field(default=300, ge=20, description="Maximum characters in a result snippet")
    snippet_context: int = Field(default=100, ge=0, description="Characters of context kept around a snippet match")

    # Observability
    instrumentation_enabled: bool = Field(
        default=True, description="Record tracing spans and Prometheus metrics for index operations"
    )

    @model_validator(mode="after")
    def _check_log_level(self) -> "Settings":
        if self.log_level.lower() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{self.log_level}'. Available: {sorted(_LOG_LEVELS)}")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
