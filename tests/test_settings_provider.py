import json

import pytest

from ledger_assistant.clients import LedgerStore
from ledger_assistant.core.config import AppSettings, ProviderSettings
from ledger_assistant.core.errors import ProviderConfigurationError, ProviderNotConfiguredError
from ledger_assistant.schemas import ProviderConfig, ProviderKind
from ledger_assistant.services.settings_provider import PROVIDER_SETTING_KEY, SettingsProvider


@pytest.fixture
def store(tmp_path) -> LedgerStore:
    return LedgerStore(str(tmp_path / "ledger.db"))


@pytest.mark.asyncio
async def test_stored_provider_wins_over_environment(store):
    await store.set_setting(
        PROVIDER_SETTING_KEY,
        json.dumps(
            {
                "type": "anthropic",
                "name": "Claude",
                "endpoint": "https://api.anthropic.com/v1/",
                "apiKey": "sk-ant",
                "model": "claude-3-5-haiku-20241022",
                "isLocal": False,
            }
        ),
    )
    fallback = ProviderSettings(kind="ollama", endpoint="http://localhost:11434", model="llama3.2")

    provider = await SettingsProvider(store, fallback).get_active_provider()

    assert provider.kind is ProviderKind.ANTHROPIC
    assert provider.endpoint == "https://api.anthropic.com/v1"
    assert provider.api_key == "sk-ant"
    assert provider.label() == "Claude"


@pytest.mark.asyncio
async def test_environment_provider_is_the_fallback(store):
    fallback = ProviderSettings(kind="ollama", endpoint="http://localhost:11434", model="llama3.2", is_local=True)

    provider = await SettingsProvider(store, fallback).get_active_provider()

    assert provider.kind is ProviderKind.OLLAMA
    assert provider.is_local is True
    assert provider.api_key is None
    assert provider.label() == "ollama"


@pytest.mark.asyncio
async def test_nothing_configured(store):
    with pytest.raises(ProviderNotConfiguredError, match="No LLM provider configured"):
        await SettingsProvider(store, ProviderSettings()).get_active_provider()


@pytest.mark.asyncio
async def test_invalid_stored_provider(store):
    await store.set_setting(PROVIDER_SETTING_KEY, '{"type": "carrier-pigeon"}')

    with pytest.raises(ProviderConfigurationError):
        await SettingsProvider(store).get_active_provider()


@pytest.mark.asyncio
async def test_saved_provider_uses_stored_spelling(store):
    settings_provider = SettingsProvider(store)
    provider = ProviderConfig(
        kind="openrouter", display_name="Router", endpoint="https://openrouter.ai/api/v1", api_key="sk-or", model="x"
    )

    await settings_provider.save_provider(provider)

    stored = json.loads(await store.get_setting(PROVIDER_SETTING_KEY))
    assert stored["type"] == "openrouter"
    assert stored["apiKey"] == "sk-or"
    assert stored["isLocal"] is False
    assert await settings_provider.get_active_provider() == provider


def test_provider_settings_from_nested_environment(monkeypatch):
    monkeypatch.setenv("LEDGER_PROVIDER__KIND", "lmstudio")
    monkeypatch.setenv("LEDGER_PROVIDER__ENDPOINT", "http://localhost:1234/v1")
    monkeypatch.setenv("LEDGER_PROVIDER__MODEL", "local-model")
    monkeypatch.setenv("LEDGER_LLM_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("LEDGER_HISTORY_LIMIT", "6")

    settings = AppSettings(_env_file=None)

    assert settings.provider.is_configured
    assert settings.provider.kind == "lmstudio"
    assert settings.llm_timeout_seconds is None
    assert settings.history_limit == 6
    assert settings.database_path == "data/ledger.db"
