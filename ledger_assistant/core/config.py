"""
Application configuration models and helpers.

Centralizes settings management so the query pipeline, the statement chunker
and the developer CLI share a consistent configuration surface.
"""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseModel):
    """Fallback LLM provider used when the settings table has none.

    Populated from ``LEDGER_PROVIDER__*`` variables, e.g. ``LEDGER_PROVIDER__KIND``.
    """

    kind: Optional[str] = Field(
        None,
        description="One of anthropic, openai, openrouter, lmstudio, ollama, google.",
    )
    name: Optional[str] = None
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    model: Optional[str] = None
    is_local: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.kind and self.endpoint and self.model)


class AppSettings(BaseSettings):
    """Root settings object for the assistant."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field("development", description="Deployment label.")
    log_level: str = "INFO"
    database_path: str = Field(
        "data/ledger.db",
        description="SQLite file holding the ledger and conversation history.",
    )
    llm_timeout_seconds: Optional[float] = Field(
        120.0,
        description="Per-request timeout for provider calls. 0 disables it.",
    )
    history_limit: int = Field(10, ge=0, le=10)
    statement_chunk_pages: int = Field(2, ge=1)
    statement_single_call_max_pages: int = Field(3, ge=1)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)

    @field_validator("llm_timeout_seconds")
    @classmethod
    def _zero_disables_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            return None
        return value


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "ProviderSettings",
    "get_settings",
]
