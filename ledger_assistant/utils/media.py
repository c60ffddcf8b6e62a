"""Media type inference for attachments handed to vision calls."""

from __future__ import annotations

import base64
from pathlib import Path

PDF_MEDIA_TYPE = "application/pdf"
DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"

_MEDIA_TYPES = {
    ".pdf": PDF_MEDIA_TYPE,
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


def infer_media_type(filename: str) -> str:
    """Map a file name to the media type sent to the provider.

    Unrecognised extensions fall back to ``image/jpeg``.
    """
    return _MEDIA_TYPES.get(Path(filename).suffix.lower(), DEFAULT_IMAGE_MEDIA_TYPE)


def is_pdf(filename: str) -> bool:
    return infer_media_type(filename) == PDF_MEDIA_TYPE


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


__all__ = [
    "DEFAULT_IMAGE_MEDIA_TYPE",
    "PDF_MEDIA_TYPE",
    "encode_base64",
    "infer_media_type",
    "is_pdf",
]
