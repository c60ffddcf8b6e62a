"""HTTP utilities mapping httpx failures onto the provider error taxonomy."""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable

import httpx

from ledger_assistant.core.errors import ProviderError, TransportError


async def send_request(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    backend: str,
    **kwargs,
) -> httpx.Response:
    """Issue exactly one request and surface failures as typed errors.

    No retries are attempted; a non-success status raises ``ProviderError``
    carrying the vendor's own error message where one is present.
    """
    try:
        response = await func(*args, **kwargs)
    except httpx.TransportError as exc:
        raise TransportError(backend, str(exc) or exc.__class__.__name__) from exc

    if response.is_success:
        return response
    raise ProviderError(backend, response.status_code, vendor_error_message(response))


def response_json(response: httpx.Response) -> Any:
    """Decode a JSON body, returning ``None`` when it is not JSON."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def vendor_error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a vendor error envelope."""
    body = response_json(response)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str) and error:
            return error
        if isinstance(body.get("message"), str):
            return body["message"]
    text = response.text.strip()
    return text or "Unknown error"


def dig(payload: Any, *path: Any) -> Any:
    """Walk nested dicts/lists, returning ``None`` on any missing step."""
    current = payload
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current


__all__ = ["dig", "response_json", "send_request", "vendor_error_message"]
