"""Application configuration via environment variables.

Uses pydantic-settings so every field can be overridden with an env var
(e.g. ``LLM_API_KEY``, ``DATABASE_URL``, ``LOG_LEVEL``).  Core classes take
explicit arguments; only the application edge reads :data:`settings`.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """AutoSentience runtime settings."""

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    # -- API metadata -------------------------------------------------------
    app_name: str = "AutoSentience API"
    app_version: str = "0.1.0"

    # -- database -----------------------------------------------------------
    database_url: str = Field(
        default="sqlite:///./autosentience.db",
        description="SQLAlchemy URL, e.g. postgresql://user:pw@host/db",
    )

    # -- inference service --------------------------------------------------
    llm_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="OpenAI-compatible chat-completions base URL",
    )
    llm_model: str = Field(default="llama-3.3-70b-versatile")
    llm_api_key: str = Field(default="", description="API key for the LLM backend")
    llm_max_tokens: int = Field(default=2048)
    llm_max_retries: int = Field(
        default=3,
        description="Attempts per inference call before agents fall back",
    )
    llm_backoff_base_seconds: float = Field(
        default=1.0,
        description="First retry delay; doubles on each further attempt",
    )
    llm_timeout_seconds: float = Field(default=30.0, description="Per-call timeout")

    # -- workflow -----------------------------------------------------------
    dedupe_open_alerts: bool = Field(
        default=False,
        description="Reuse an OPEN alert of the same type instead of inserting a new one",
    )

    # -- logging ------------------------------------------------------------
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="console",
        description="Log output format: 'console' or 'json'",
    )

    @property
    def is_sqlite(self) -> bool:
        """Return ``True`` when the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


# Global settings instance
settings = Settings()
