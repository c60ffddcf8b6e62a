"""PDF helpers for text extraction, page counting and page-range extraction."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from ledger_assistant.core.errors import FileIoError

SCANNED_MIN_CHARS = 50
SCANNED_MIN_WORDS = 10

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PdfExtractionResult:
    text: str
    is_scanned: bool


def open_pdf(data: bytes, *, source: str = "<memory>") -> PdfReader:
    """Load a PDF from bytes, raising ``FileIoError`` when it cannot be parsed."""
    try:
        reader = PdfReader(io.BytesIO(data))
        # Page tree parsing is lazy; force it so corrupt files fail here.
        len(reader.pages)
    except (PyPdfError, ValueError, KeyError, OSError) as exc:
        raise FileIoError(source, f"Failed to parse PDF: {exc}") from exc
    return reader


def page_count(reader: PdfReader) -> int:
    return len(reader.pages)


def extract_pages(reader: PdfReader, start_page: int, end_page: int) -> bytes:
    """Build a standalone PDF holding pages ``start_page..end_page`` (1-indexed, inclusive)."""
    total = len(reader.pages)
    if start_page < 1 or end_page > total or start_page > end_page:
        raise ValueError(
            f"Invalid page range {start_page}-{end_page} for a {total}-page document"
        )

    writer = PdfWriter()
    for index in range(start_page - 1, end_page):
        writer.add_page(reader.pages[index])

    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def extract_pdf_text(data: bytes) -> PdfExtractionResult:
    """Pull the text layer out of a PDF and flag documents that look scanned.

    A PDF is treated as scanned when its trimmed text is shorter than
    ``SCANNED_MIN_CHARS`` characters or has fewer than ``SCANNED_MIN_WORDS``
    words. Files pypdf cannot read yield empty text, which also counts as scanned.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        text = "\n\n".join((page.extract_text() or "") for page in reader.pages)
    except (PyPdfError, ValueError, KeyError, OSError) as exc:
        logger.warning("PDF text extraction failed, treating as scanned: %s", exc)
        text = ""

    clean = text.strip()
    word_count = len(clean.split())
    is_scanned = len(clean) < SCANNED_MIN_CHARS or word_count < SCANNED_MIN_WORDS
    logger.info(
        "PDF extraction: %d chars, %d words, is_scanned=%s", len(clean), word_count, is_scanned
    )
    return PdfExtractionResult(text=text, is_scanned=is_scanned)


__all__ = [
    "PdfExtractionResult",
    "SCANNED_MIN_CHARS",
    "SCANNED_MIN_WORDS",
    "extract_pages",
    "extract_pdf_text",
    "open_pdf",
    "page_count",
]
