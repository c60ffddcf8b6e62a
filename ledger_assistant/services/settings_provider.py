"""Resolve the active LLM provider from stored settings or the environment."""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from ledger_assistant.clients.sqlite_store import LedgerStore
from ledger_assistant.core.config import ProviderSettings
from ledger_assistant.core.errors import ProviderConfigurationError, ProviderNotConfiguredError
from ledger_assistant.schemas import ProviderConfig

PROVIDER_SETTING_KEY = "provider"

logger = logging.getLogger(__name__)


class SettingsProvider:
    """The ``provider`` row of the settings table wins over the environment."""

    def __init__(self, store: LedgerStore, fallback: Optional[ProviderSettings] = None) -> None:
        self._store = store
        self._fallback = fallback

    async def get_active_provider(self) -> ProviderConfig:
        stored = await self._store.get_setting(PROVIDER_SETTING_KEY)
        if stored:
            return self._from_stored(stored)

        if self._fallback is not None and self._fallback.is_configured:
            try:
                return ProviderConfig(
                    kind=self._fallback.kind,
                    display_name=self._fallback.name or "",
                    endpoint=self._fallback.endpoint,
                    api_key=self._fallback.api_key,
                    model=self._fallback.model,
                    is_local=self._fallback.is_local,
                )
            except ValidationError as exc:
                raise ProviderConfigurationError(
                    f"Invalid provider environment settings: {exc}"
                ) from exc

        raise ProviderNotConfiguredError()

    async def save_provider(self, provider: ProviderConfig) -> None:
        """Persist ``provider`` using the stored JSON spelling."""
        payload = provider.model_dump(mode="json", by_alias=True)
        await self._store.set_setting(PROVIDER_SETTING_KEY, json.dumps(payload))
        logger.info("Saved provider %s", provider.label())

    @staticmethod
    def _from_stored(stored: str) -> ProviderConfig:
        try:
            return ProviderConfig.model_validate_json(stored)
        except ValidationError as exc:
            raise ProviderConfigurationError(f"Stored provider setting is invalid: {exc}") from exc


__all__ = ["PROVIDER_SETTING_KEY", "SettingsProvider"]
