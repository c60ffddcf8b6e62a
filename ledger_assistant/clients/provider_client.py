"""Provider-agnostic entry point for text and vision completions."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

import httpx

from ledger_assistant.clients.anthropic import AnthropicBackend
from ledger_assistant.clients.base import ProviderBackend
from ledger_assistant.clients.google import GoogleBackend
from ledger_assistant.clients.ollama import OllamaBackend
from ledger_assistant.clients.openai_compat import (
    LMStudioBackend,
    OpenAIBackend,
    OpenRouterBackend,
)
from ledger_assistant.core.errors import ProviderConfigurationError, VisionNotSupportedError
from ledger_assistant.schemas import ProviderConfig, ProviderKind

CONNECTION_TEST_PROMPT = "Say hello"

logger = logging.getLogger(__name__)


def default_backends() -> Dict[ProviderKind, ProviderBackend]:
    return {
        ProviderKind.ANTHROPIC: AnthropicBackend(),
        ProviderKind.OPENAI: OpenAIBackend(),
        ProviderKind.OPENROUTER: OpenRouterBackend(),
        ProviderKind.LMSTUDIO: LMStudioBackend(),
        ProviderKind.OLLAMA: OllamaBackend(),
        ProviderKind.GOOGLE: GoogleBackend(),
    }


class ProviderClient:
    """Dispatch completions to the backend registered for a provider kind.

    Every call opens its own ``httpx.AsyncClient`` and issues exactly one
    request. ``transport`` lets tests substitute ``httpx.MockTransport``.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backends: Optional[Mapping[ProviderKind, ProviderBackend]] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._backends: Dict[ProviderKind, ProviderBackend] = dict(
            backends if backends is not None else default_backends()
        )

    def backend_for(self, kind: ProviderKind | str) -> ProviderBackend:
        try:
            return self._backends[ProviderKind(kind)]
        except (KeyError, ValueError) as exc:
            raise ProviderConfigurationError(f"Unsupported provider type: {kind}") from exc

    def supports_vision(self, kind: ProviderKind | str) -> bool:
        return self.backend_for(kind).supports_vision

    async def complete(
        self,
        provider: ProviderConfig,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        """Send one text completion and return the model's reply."""
        backend = self.backend_for(provider.kind)
        logger.info("Calling LLM provider %s (model: %s)", backend.name, provider.model)
        logger.debug("Prompt: %s", prompt)

        async with self._http_client() as http:
            text = await backend.complete(http, provider, prompt, system_prompt)

        logger.debug("Raw completion from %s: %s", backend.name, text)
        return text

    async def complete_with_vision(
        self,
        provider: ProviderConfig,
        prompt: str,
        data_base64: str,
        media_type: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        """Send one completion carrying a base64 image or PDF attachment."""
        backend = self.backend_for(provider.kind)
        if not backend.supports_vision:
            raise VisionNotSupportedError(backend.name)

        logger.info(
            "Calling LLM provider %s with %s attachment (model: %s)",
            backend.name,
            media_type,
            provider.model,
        )
        async with self._http_client() as http:
            text = await backend.complete_with_vision(
                http, provider, prompt, data_base64, media_type, system_prompt
            )

        logger.debug("Raw vision completion from %s: %s", backend.name, text)
        return text

    async def list_models(
        self,
        kind: ProviderKind | str,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        backend = self.backend_for(kind)
        async with self._http_client() as http:
            models = await backend.list_models(http, endpoint, api_key or None)
        logger.info("Provider %s lists %d models", backend.name, len(models))
        return models

    async def test_connection(self, provider: ProviderConfig) -> None:
        """Raise when a trivial completion cannot be obtained from ``provider``."""
        await self.complete(provider, CONNECTION_TEST_PROMPT)
        logger.info("Connection to %s verified", provider.label())

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)


__all__ = ["CONNECTION_TEST_PROMPT", "ProviderClient", "default_backends"]
