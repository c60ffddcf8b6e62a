"""Ollama ``/api/generate`` backend."""

from __future__ import annotations

from typing import List, Optional

import httpx

from ledger_assistant.clients.base import ProviderBackend, ids_from_listing
from ledger_assistant.schemas import ProviderConfig


class OllamaBackend(ProviderBackend):
    name = "ollama"
    supports_vision = False

    async def complete(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        payload = await self._post_json(
            http,
            f"{provider.endpoint}/api/generate",
            body={
                "model": provider.model,
                "prompt": prompt,
                "system": system_prompt or "",
                "stream": False,
            },
        )
        return self._extract_text(payload, "response")

    async def list_models(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        payload = await self._get_json(http, f"{endpoint.rstrip('/')}/api/tags")
        return ids_from_listing(payload, "models", "name")


__all__ = ["OllamaBackend"]
