"""Google Generative Language ``generateContent`` backend."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ledger_assistant.clients.base import ProviderBackend
from ledger_assistant.schemas import ProviderConfig

# The API has no system role in this request shape; instructions are sent as a
# leading user turn answered by this model turn.
SYSTEM_ACKNOWLEDGEMENT = "Understood. I will follow these instructions."

_KNOWN_MODELS: tuple[str, ...] = (
    "gemini-2.0-flash",
    "gemini-1.5-pro",
    "gemini-1.5-flash",
)


class GoogleBackend(ProviderBackend):
    name = "google"
    supports_vision = False

    async def complete(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        contents: List[Dict[str, Any]] = []
        if system_prompt:
            contents.append({"role": "user", "parts": [{"text": system_prompt}]})
            contents.append({"role": "model", "parts": [{"text": SYSTEM_ACKNOWLEDGEMENT}]})
        contents.append({"role": "user", "parts": [{"text": prompt}]})

        payload = await self._post_json(
            http,
            f"{provider.endpoint}/models/{provider.model}:generateContent",
            body={"contents": contents},
            params={"key": self._require_key(provider.api_key)},
        )
        return self._extract_text(payload, "candidates", 0, "content", "parts", 0, "text")

    async def list_models(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        return list(_KNOWN_MODELS)


__all__ = ["GoogleBackend", "SYSTEM_ACKNOWLEDGEMENT"]
