"""
Pydantic models describing a configured LLM provider.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderKind(str, Enum):
    """Wire protocol family of a provider."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    LMSTUDIO = "lmstudio"
    OLLAMA = "ollama"
    GOOGLE = "google"


class ProviderConfig(BaseModel):
    """Active provider selection, as stored under the ``provider`` setting.

    Accepts the stored JSON spelling (``type``, ``name``, ``apiKey``,
    ``isLocal``) as well as the Python field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: ProviderKind = Field(..., alias="type")
    display_name: str = Field("", alias="name")
    endpoint: str = Field(..., description="Base URL, without a trailing slash.")
    api_key: Optional[str] = Field(None, alias="apiKey")
    model: str
    is_local: bool = Field(False, alias="isLocal")

    @field_validator("endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("api_key")
    @classmethod
    def _blank_key_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    def label(self) -> str:
        return self.display_name or self.kind.value


__all__ = ["ProviderConfig", "ProviderKind"]
