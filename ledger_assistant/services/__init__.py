"""Service layer exports."""

from .conversation import ConversationContext, format_history
from .document_parser import DocumentParser
from .query_pipeline import EMPTY_RESULT_MESSAGE, QueryPipeline, ensure_read_only
from .response_parser import ParseOutcome, ResponseParser, text_card_fallback
from .settings_provider import SettingsProvider
from .statement_chunker import PageWindow, StatementChunker, plan_windows
from .statement_import import StatementImporter

__all__ = [
    "ConversationContext",
    "DocumentParser",
    "EMPTY_RESULT_MESSAGE",
    "PageWindow",
    "ParseOutcome",
    "QueryPipeline",
    "ResponseParser",
    "SettingsProvider",
    "StatementChunker",
    "StatementImporter",
    "ensure_read_only",
    "format_history",
    "plan_windows",
    "text_card_fallback",
]
