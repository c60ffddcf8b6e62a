"""Transaction, receipt and expense extraction from text and images."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from ledger_assistant.clients.provider_client import ProviderClient
from ledger_assistant.schemas import (
    ExpenseDetectionResult,
    ExtractedTransaction,
    ParsedReceipt,
    ProviderConfig,
)
from ledger_assistant.services import prompts
from ledger_assistant.services.response_parser import (
    parse_expense,
    parse_receipt,
    parse_transactions,
)
from ledger_assistant.services.statement_chunker import read_file_bytes
from ledger_assistant.utils.media import encode_base64, infer_media_type

_PREVIEW_CHARS = 500

logger = logging.getLogger(__name__)


class DocumentParser:
    """Single-call extractors sharing the statement chunker's parse discipline."""

    def __init__(self, provider_client: ProviderClient) -> None:
        self._client = provider_client

    async def parse_document_text(
        self,
        provider: ProviderConfig,
        text: str,
        categories: Sequence[str],
    ) -> List[ExtractedTransaction]:
        logger.info("Parsing document text (%d chars)", len(text))
        logger.debug("Document preview: %s", text[:_PREVIEW_CHARS])
        raw = await self._client.complete(
            provider,
            prompts.document_text_prompt(text),
            prompts.document_text_system_prompt(categories),
        )
        transactions = parse_transactions(raw)
        logger.info("Extracted %d transactions from text", len(transactions))
        return transactions

    async def parse_receipt_text(
        self,
        provider: ProviderConfig,
        text: str,
        categories: Sequence[str],
    ) -> ParsedReceipt:
        raw = await self._client.complete(
            provider,
            prompts.receipt_text_prompt(text),
            prompts.receipt_system_prompt(categories),
        )
        return parse_receipt(raw)

    async def parse_receipt_file(
        self,
        provider: ProviderConfig,
        path: str | Path,
        categories: Sequence[str],
    ) -> ParsedReceipt:
        data = read_file_bytes(path)
        media_type = infer_media_type(str(path))
        logger.info("Parsing receipt %s (%s, %d bytes)", path, media_type, len(data))
        raw = await self._client.complete_with_vision(
            provider,
            prompts.RECEIPT_IMAGE_PROMPT,
            encode_base64(data),
            media_type,
            prompts.receipt_system_prompt(categories, from_image=True),
        )
        return parse_receipt(raw)

    async def detect_expense(
        self, provider: ProviderConfig, message: str
    ) -> ExpenseDetectionResult:
        raw = await self._client.complete(
            provider,
            prompts.expense_prompt(message),
            prompts.EXPENSE_SYSTEM_PROMPT,
        )
        return parse_expense(raw)


__all__ = ["DocumentParser"]
