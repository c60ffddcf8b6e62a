"""
Factory functions providing shared clients and services.
"""

from functools import lru_cache

from ledger_assistant.clients import LedgerStore, ProviderClient
from ledger_assistant.core.config import get_settings
from ledger_assistant.services import (
    ConversationContext,
    DocumentParser,
    QueryPipeline,
    SettingsProvider,
    StatementChunker,
    StatementImporter,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_ledger_store() -> LedgerStore:
    """Provide shared SQLite ledger store."""
    return LedgerStore(_settings().database_path)


@lru_cache()
def get_provider_client() -> ProviderClient:
    """Provide the provider-agnostic LLM client."""
    return ProviderClient(timeout=_settings().llm_timeout_seconds)


@lru_cache()
def get_settings_provider() -> SettingsProvider:
    settings = _settings()
    return SettingsProvider(get_ledger_store(), fallback=settings.provider)


def get_query_pipeline() -> QueryPipeline:
    """Build a query pipeline over the shared client and store."""
    return QueryPipeline(get_provider_client(), get_ledger_store())


def get_statement_chunker() -> StatementChunker:
    settings = _settings()
    return StatementChunker(
        get_provider_client(),
        chunk_pages=settings.statement_chunk_pages,
        single_call_max_pages=settings.statement_single_call_max_pages,
    )


def get_document_parser() -> DocumentParser:
    return DocumentParser(get_provider_client())


def get_statement_importer() -> StatementImporter:
    return StatementImporter(get_document_parser(), get_statement_chunker())


def new_conversation() -> ConversationContext:
    """Each caller gets its own session handle."""
    return ConversationContext(get_ledger_store(), history_limit=_settings().history_limit)


__all__ = [
    "get_document_parser",
    "get_ledger_store",
    "get_provider_client",
    "get_query_pipeline",
    "get_settings_provider",
    "get_statement_chunker",
    "get_statement_importer",
    "new_conversation",
]
