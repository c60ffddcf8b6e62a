"""Route an uploaded statement to text parsing or vision chunking."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Sequence

from ledger_assistant.core.errors import FileIoError
from ledger_assistant.schemas import ExtractedTransaction, ProviderConfig
from ledger_assistant.services.document_parser import DocumentParser
from ledger_assistant.services.statement_chunker import StatementChunker, read_file_bytes
from ledger_assistant.utils.media import is_pdf
from ledger_assistant.utils.pdf import extract_pdf_text

TEXT_SUFFIXES = frozenset({".txt", ".csv"})

logger = logging.getLogger(__name__)


class StatementImporter:
    """Pick the cheapest extraction path for a statement file.

    Plain text and PDFs with a usable text layer go through a single text
    completion. Scanned PDFs and images go through the vision chunker.
    """

    def __init__(self, document_parser: DocumentParser, chunker: StatementChunker) -> None:
        self._documents = document_parser
        self._chunker = chunker

    async def import_file(
        self,
        provider: ProviderConfig,
        path: str | Path,
        categories: Sequence[str],
    ) -> List[ExtractedTransaction]:
        data = read_file_bytes(path)
        return await self.import_bytes(provider, data, Path(path).name, categories)

    async def import_bytes(
        self,
        provider: ProviderConfig,
        data: bytes,
        filename: str,
        categories: Sequence[str],
    ) -> List[ExtractedTransaction]:
        if Path(filename).suffix.lower() in TEXT_SUFFIXES:
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise FileIoError(filename, f"Not valid UTF-8 text: {exc}") from exc
            logger.info("Statement %s is plain text", filename)
            return await self._documents.parse_document_text(provider, text, categories)

        if is_pdf(filename):
            extraction = await asyncio.to_thread(extract_pdf_text, data)
            if not extraction.is_scanned:
                logger.info("Statement %s has a text layer; parsing text", filename)
                return await self._documents.parse_document_text(
                    provider, extraction.text, categories
                )
            logger.info("Statement %s looks scanned; using vision", filename)

        return await self._chunker.parse_statement(provider, data, filename, categories)


__all__ = ["StatementImporter", "TEXT_SUFFIXES"]
