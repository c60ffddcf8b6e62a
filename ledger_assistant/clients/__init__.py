"""Expose constructed client wrappers."""

from .anthropic import AnthropicBackend
from .base import ProviderBackend
from .google import GoogleBackend
from .ollama import OllamaBackend
from .openai_compat import (
    LMStudioBackend,
    OpenAIBackend,
    OpenAICompatibleBackend,
    OpenRouterBackend,
)
from .provider_client import ProviderClient
from .sqlite_store import LedgerStore

__all__ = [
    "AnthropicBackend",
    "GoogleBackend",
    "LMStudioBackend",
    "LedgerStore",
    "OllamaBackend",
    "OpenAIBackend",
    "OpenAICompatibleBackend",
    "OpenRouterBackend",
    "ProviderBackend",
    "ProviderClient",
]
