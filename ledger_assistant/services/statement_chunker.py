"""Bank statement extraction, splitting long PDFs into page windows."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ledger_assistant.clients.provider_client import ProviderClient
from ledger_assistant.core.errors import (
    FileIoError,
    ProviderError,
    TransportError,
    VisionNotSupportedError,
)
from ledger_assistant.schemas import ExtractedTransaction, ProviderConfig
from ledger_assistant.services import prompts
from ledger_assistant.services.response_parser import parse_transactions
from ledger_assistant.utils.media import PDF_MEDIA_TYPE, encode_base64, infer_media_type
from ledger_assistant.utils.pdf import extract_pages, open_pdf, page_count

DEFAULT_CHUNK_PAGES = 2
DEFAULT_SINGLE_CALL_MAX_PAGES = 3

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PageWindow:
    """Inclusive, 1-indexed page range sent in one vision call."""

    start_page: int
    end_page: int

    def __str__(self) -> str:
        return f"{self.start_page}-{self.end_page}"


def plan_windows(page_count: int, chunk_size: int = DEFAULT_CHUNK_PAGES) -> List[PageWindow]:
    """Cover pages ``1..page_count`` in order with no gaps or overlaps."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    return [
        PageWindow(start, min(start + chunk_size - 1, page_count))
        for start in range(1, page_count + 1, chunk_size)
    ]


def read_file_bytes(path: str | Path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileIoError(str(path), str(exc)) from exc


class StatementChunker:
    """Extract transactions from statement images and PDFs."""

    def __init__(
        self,
        provider_client: ProviderClient,
        *,
        chunk_pages: int = DEFAULT_CHUNK_PAGES,
        single_call_max_pages: int = DEFAULT_SINGLE_CALL_MAX_PAGES,
    ) -> None:
        self._client = provider_client
        self._chunk_pages = chunk_pages
        self._single_call_max_pages = single_call_max_pages

    async def parse_statement_file(
        self,
        provider: ProviderConfig,
        path: str | Path,
        categories: Sequence[str],
    ) -> List[ExtractedTransaction]:
        data = read_file_bytes(path)
        return await self.parse_statement(provider, data, Path(path).name, categories)

    async def parse_statement(
        self,
        provider: ProviderConfig,
        data: bytes,
        filename: str,
        categories: Sequence[str],
    ) -> List[ExtractedTransaction]:
        if not self._client.supports_vision(provider.kind):
            raise VisionNotSupportedError(provider.kind.value)

        media_type = infer_media_type(filename)
        logger.info("Parsing statement %s (%s, %d bytes)", filename, media_type, len(data))

        if media_type != PDF_MEDIA_TYPE:
            return await self._parse_whole(provider, data, media_type, categories)

        reader = await asyncio.to_thread(open_pdf, data, source=filename)
        total_pages = page_count(reader)
        logger.info("Statement %s has %d pages", filename, total_pages)

        if total_pages <= self._single_call_max_pages:
            return await self._parse_whole(provider, data, media_type, categories)

        windows = plan_windows(total_pages, self._chunk_pages)
        transactions: List[ExtractedTransaction] = []
        for index, window in enumerate(windows, start=1):
            logger.info("Processing chunk %d/%d: pages %s", index, len(windows), window)
            extracted = await self._parse_window(provider, reader, window, categories)
            logger.info("Chunk %d: extracted %d transactions", index, len(extracted))
            transactions.extend(extracted)

        logger.info("Extracted %d transactions from %s", len(transactions), filename)
        return transactions

    async def _parse_whole(
        self,
        provider: ProviderConfig,
        data: bytes,
        media_type: str,
        categories: Iterable[str],
    ) -> List[ExtractedTransaction]:
        raw = await self._client.complete_with_vision(
            provider,
            prompts.STATEMENT_PROMPT,
            encode_base64(data),
            media_type,
            prompts.statement_system_prompt(categories),
        )
        transactions = parse_transactions(raw)
        logger.info("Extracted %d transactions in a single call", len(transactions))
        return transactions

    async def _parse_window(
        self,
        provider: ProviderConfig,
        reader: PdfReader,
        window: PageWindow,
        categories: Iterable[str],
    ) -> List[ExtractedTransaction]:
        try:
            chunk = await asyncio.to_thread(
                extract_pages, reader, window.start_page, window.end_page
            )
            raw = await self._client.complete_with_vision(
                provider,
                prompts.statement_chunk_prompt(window.start_page, window.end_page),
                encode_base64(chunk),
                PDF_MEDIA_TYPE,
                prompts.statement_chunk_system_prompt(
                    window.start_page, window.end_page, categories
                ),
            )
        except (ProviderError, TransportError, PyPdfError, ValueError) as exc:
            logger.warning("Pages %s failed, continuing without them: %s", window, exc)
            return []
        return parse_transactions(raw)


__all__ = [
    "DEFAULT_CHUNK_PAGES",
    "DEFAULT_SINGLE_CALL_MAX_PAGES",
    "PageWindow",
    "StatementChunker",
    "plan_windows",
    "read_file_bytes",
]
