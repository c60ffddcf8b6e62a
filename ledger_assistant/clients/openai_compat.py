"""Chat-completions backends: OpenAI, OpenRouter and LM Studio."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ledger_assistant.clients.base import ProviderBackend, ids_from_listing
from ledger_assistant.schemas import ProviderConfig


class OpenAICompatibleBackend(ProviderBackend):
    """Shared ``/chat/completions`` wire format."""

    name = "openai-compatible"

    async def complete(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = await self._post_json(
            http,
            f"{provider.endpoint}/chat/completions",
            body={
                "model": provider.model,
                "messages": messages,
                "max_tokens": self.text_max_tokens,
            },
            headers=self._headers(provider.api_key),
        )
        return self._extract_text(payload, "choices", 0, "message", "content")

    async def complete_with_vision(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        data_base64: str,
        media_type: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        if not self.supports_vision:
            return await super().complete_with_vision(
                http, provider, prompt, data_base64, media_type, system_prompt
            )

        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append(
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{media_type};base64,{data_base64}"},
                    },
                    {"type": "text", "text": prompt},
                ],
            }
        )

        payload = await self._post_json(
            http,
            f"{provider.endpoint}/chat/completions",
            body={
                "model": provider.model,
                "messages": messages,
                "max_tokens": self.vision_max_tokens,
            },
            headers=self._headers(provider.api_key),
        )
        return self._extract_text(payload, "choices", 0, "message", "content")

    async def list_models(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        payload = await self._get_json(
            http,
            f"{endpoint.rstrip('/')}/models",
            headers=self._headers(api_key),
        )
        return self._select_models(ids_from_listing(payload, "data", "id"))

    def _select_models(self, model_ids: List[str]) -> List[str]:
        return model_ids

    def _headers(self, api_key: Optional[str]) -> Dict[str, str]:
        if api_key:
            return {"Authorization": f"Bearer {api_key}"}
        return {}


class OpenAIBackend(OpenAICompatibleBackend):
    name = "openai"
    supports_vision = True

    async def list_models(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        return await super().list_models(http, endpoint, self._require_key(api_key))

    def _select_models(self, model_ids: List[str]) -> List[str]:
        return [model_id for model_id in model_ids if model_id.startswith("gpt-")]


class OpenRouterBackend(OpenAICompatibleBackend):
    name = "openrouter"
    supports_vision = True
    model_listing_limit = 20

    async def list_models(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        return await super().list_models(http, endpoint, self._require_key(api_key))

    def _select_models(self, model_ids: List[str]) -> List[str]:
        return model_ids[: self.model_listing_limit]


class LMStudioBackend(OpenAICompatibleBackend):
    """Local LM Studio server; text only, no key required."""

    name = "lmstudio"
    supports_vision = False


__all__ = [
    "LMStudioBackend",
    "OpenAIBackend",
    "OpenAICompatibleBackend",
    "OpenRouterBackend",
]
