"""Shared contract for the per-vendor LLM backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ledger_assistant.core.errors import (
    ProviderConfigurationError,
    ProviderResponseError,
    VisionNotSupportedError,
)
from ledger_assistant.schemas import ProviderConfig
from ledger_assistant.utils.http import dig, response_json, send_request


class ProviderBackend(ABC):
    """Translate the canonical request into one vendor wire protocol and back."""

    name: str = "provider"
    supports_vision: bool = False

    # Document parsing needs room for long statement transcriptions.
    text_max_tokens: int = 16384
    vision_max_tokens: int = 4096

    @abstractmethod
    async def complete(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        """Return the single completion string for ``prompt``."""

    async def complete_with_vision(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        data_base64: str,
        media_type: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        raise VisionNotSupportedError(self.name)

    @abstractmethod
    async def list_models(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        """Return model identifiers the backend offers."""

    async def _post_json(
        self,
        http: httpx.AsyncClient,
        url: str,
        *,
        body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        request_headers = {"content-type": "application/json", **(headers or {})}
        response = await send_request(
            http.post,
            url,
            json=body,
            headers=request_headers,
            params=params,
            backend=self.name,
        )
        return response_json(response)

    async def _get_json(
        self,
        http: httpx.AsyncClient,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        response = await send_request(http.get, url, headers=headers, backend=self.name)
        return response_json(response)

    def _extract_text(self, payload: Any, *path: Any) -> str:
        text = dig(payload, *path)
        if not isinstance(text, str):
            raise ProviderResponseError(
                self.name,
                200,
                f"Invalid response from {self.name}: {_preview(payload)}",
            )
        return text

    def _require_key(self, api_key: Optional[str]) -> str:
        if not api_key:
            raise ProviderConfigurationError(f"API key required for {self.name}")
        return api_key


def _preview(payload: Any, limit: int = 500) -> str:
    text = repr(payload)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def ids_from_listing(payload: Any, collection: str, key: str) -> List[str]:
    """Collect ``payload[collection][*][key]`` string values."""
    items = dig(payload, collection)
    if not isinstance(items, list):
        return []
    return [
        item[key]
        for item in items
        if isinstance(item, dict) and isinstance(item.get(key), str)
    ]


__all__ = ["ProviderBackend", "ids_from_listing"]
