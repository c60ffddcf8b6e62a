"""Anthropic Messages API backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ledger_assistant.clients.base import ProviderBackend
from ledger_assistant.schemas import ProviderConfig
from ledger_assistant.utils.media import PDF_MEDIA_TYPE

ANTHROPIC_VERSION = "2023-06-01"
PDF_BETA_FLAG = "pdfs-2024-09-25"

# No discovery endpoint is exposed, so the selectable models are fixed.
_KNOWN_MODELS: tuple[str, ...] = (
    "claude-sonnet-4-20250514",
    "claude-3-5-sonnet-20241022",
    "claude-3-5-haiku-20241022",
    "claude-3-opus-20240229",
)

logger = logging.getLogger(__name__)


class AnthropicBackend(ProviderBackend):
    name = "anthropic"
    supports_vision = True

    async def complete(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        body: Dict[str, Any] = {
            "model": provider.model,
            "max_tokens": self.text_max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            body["system"] = system_prompt

        payload = await self._post_json(
            http,
            f"{provider.endpoint}/messages",
            body=body,
            headers=self._headers(provider),
        )
        return self._extract_text(payload, "content", 0, "text")

    async def complete_with_vision(
        self,
        http: httpx.AsyncClient,
        provider: ProviderConfig,
        prompt: str,
        data_base64: str,
        media_type: str,
        system_prompt: Optional[str] = None,
    ) -> str:
        is_pdf = media_type == PDF_MEDIA_TYPE
        logger.info(
            "Anthropic vision request (media: %s, base64 length: %d)",
            media_type,
            len(data_base64),
        )
        content_block = {
            "type": "document" if is_pdf else "image",
            "source": {
                "type": "base64",
                "media_type": media_type,
                "data": data_base64,
            },
        }
        body: Dict[str, Any] = {
            "model": provider.model,
            "max_tokens": self.vision_max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [content_block, {"type": "text", "text": prompt}],
                }
            ],
        }
        if system_prompt:
            body["system"] = system_prompt

        headers = self._headers(provider)
        if is_pdf:
            headers["anthropic-beta"] = PDF_BETA_FLAG

        payload = await self._post_json(
            http,
            f"{provider.endpoint}/messages",
            body=body,
            headers=headers,
        )
        return self._extract_text(payload, "content", 0, "text")

    async def list_models(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        api_key: Optional[str] = None,
    ) -> List[str]:
        return list(_KNOWN_MODELS)

    def _headers(self, provider: ProviderConfig) -> Dict[str, str]:
        return {
            "x-api-key": self._require_key(provider.api_key),
            "anthropic-version": ANTHROPIC_VERSION,
        }


__all__ = ["ANTHROPIC_VERSION", "AnthropicBackend", "PDF_BETA_FLAG"]
