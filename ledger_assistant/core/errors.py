"""Exception hierarchy shared by the provider client and the pipelines."""

from __future__ import annotations

from typing import Optional


class LedgerAssistantError(RuntimeError):
    """Base class for every error raised by the assistant core."""


class ProviderConfigurationError(LedgerAssistantError):
    """Raised when a provider configuration cannot be used as given."""


class ProviderNotConfiguredError(ProviderConfigurationError):
    """Raised when no active LLM provider has been configured."""

    def __init__(self, message: str = "No LLM provider configured") -> None:
        super().__init__(message)


class TransportError(LedgerAssistantError):
    """Network, DNS or TLS failure while calling a provider."""

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(f"{backend} request failed: {message}")
        self.backend = backend
        self.message = message


class ProviderError(LedgerAssistantError):
    """Non-success HTTP response returned by a provider."""

    def __init__(
        self, backend: str, http_status: Optional[int], message: str
    ) -> None:
        super().__init__(f"{backend} API error ({http_status}): {message}")
        self.backend = backend
        self.http_status = http_status
        self.message = message


class ProviderResponseError(ProviderError):
    """Successful status but the body lacks the backend's completion envelope."""


class VisionNotSupportedError(ProviderError):
    """Raised before any request when a backend cannot accept image/PDF input."""

    def __init__(self, backend: str) -> None:
        super().__init__(backend, None, f"Vision not supported for provider: {backend}")


class ParseError(LedgerAssistantError):
    """Model output could not be interpreted as the expected JSON shape."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class SqlSafetyError(LedgerAssistantError):
    """Generated statement is not a SELECT."""

    def __init__(self, sql: str) -> None:
        super().__init__("Only SELECT queries are allowed")
        self.sql = sql


class SqlExecutionError(LedgerAssistantError):
    """The backing store rejected a generated statement."""

    def __init__(self, sql: str, message: str) -> None:
        super().__init__(message)
        self.sql = sql
        self.message = message


class FileIoError(LedgerAssistantError):
    """An attachment could not be read or decoded."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Failed to read file {path}: {message}")
        self.path = path
        self.message = message


__all__ = [
    "FileIoError",
    "LedgerAssistantError",
    "ParseError",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderResponseError",
    "SqlExecutionError",
    "SqlSafetyError",
    "TransportError",
    "VisionNotSupportedError",
]
