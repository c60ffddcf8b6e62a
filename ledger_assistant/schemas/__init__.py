"""Public schema exports."""

from .cards import (
    ChartCard,
    ChartContent,
    ChartDataPoint,
    MixedCard,
    MixedContent,
    ResponseCard,
    ResponseData,
    TableCard,
    TableContent,
    TextCard,
    TextContent,
)
from .conversation import ConversationMessage, ConversationSession
from .extraction import (
    ExpenseDetectionResult,
    ExtractedTransaction,
    ParsedReceipt,
    ParsedReceiptItem,
)
from .provider import ProviderConfig, ProviderKind
from .query import QueryAnalysis, QueryResult

__all__ = [
    "ChartCard",
    "ChartContent",
    "ChartDataPoint",
    "ConversationMessage",
    "ConversationSession",
    "ExpenseDetectionResult",
    "ExtractedTransaction",
    "MixedCard",
    "MixedContent",
    "ParsedReceipt",
    "ParsedReceiptItem",
    "ProviderConfig",
    "ProviderKind",
    "QueryAnalysis",
    "QueryResult",
    "ResponseCard",
    "ResponseData",
    "TableCard",
    "TableContent",
    "TextCard",
    "TextContent",
]
