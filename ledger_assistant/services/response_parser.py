"""Recover typed values from free-form model output.

Models are asked for bare JSON but routinely wrap it in markdown fences or
surround it with prose. Candidates are tried in a fixed order:

1. ``raw``: the text as returned;
2. ``fenced``: trimmed, with a leading ```` ```json ```` / ```` ``` ```` and a
   trailing ```` ``` ```` removed;
3. ``bracketed``: the slice from the first opening bracket to the last
   closing bracket.

The first candidate that is valid JSON and validates against the target type
wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from pydantic import TypeAdapter, ValidationError

from ledger_assistant.core.errors import ParseError
from ledger_assistant.schemas import (
    ExpenseDetectionResult,
    ExtractedTransaction,
    ParsedReceipt,
    QueryAnalysis,
    ResponseData,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


def raw_candidate(text: str) -> Optional[str]:
    return text


def fenced_candidate(text: str) -> Optional[str]:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[len("```"):]
    if cleaned.endswith("```"):
        cleaned = cleaned[: -len("```")]
    return cleaned.strip()


def bracketed_candidate(text: str, opener: str, closer: str) -> Optional[str]:
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


@dataclass(slots=True)
class ParseOutcome(Generic[T]):
    """Result of running the candidate chain over one model reply."""

    value: Optional[T]
    strategy: Optional[str]
    raw: str
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.strategy is not None

    def unwrap(self) -> T:
        if not self.ok:
            detail = "; ".join(self.errors) or "no candidate"
            raise ParseError(f"Could not parse model output: {detail}", raw=self.raw)
        return self.value  # type: ignore[return-value]


class ResponseParser(Generic[T]):
    """Validate model output against ``target`` using the candidate chain."""

    def __init__(
        self,
        target: Any,
        *,
        brackets: Tuple[str, str] = ("{", "}"),
        label: Optional[str] = None,
    ) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(target)
        self._opener, self._closer = brackets
        self._label = label or getattr(target, "__name__", str(target))
        self._strategies: List[Tuple[str, Callable[[str], Optional[str]]]] = [
            ("raw", raw_candidate),
            ("fenced", fenced_candidate),
            ("bracketed", lambda text: bracketed_candidate(text, self._opener, self._closer)),
        ]

    def attempt(self, text: str) -> ParseOutcome[T]:
        errors: List[str] = []
        tried: set[str] = set()
        for strategy, extract in self._strategies:
            candidate = extract(text)
            if candidate is None or candidate in tried:
                continue
            tried.add(candidate)
            try:
                value = self._adapter.validate_json(candidate)
            except ValidationError as exc:
                errors.append(f"{strategy}: {exc.errors()[0].get('msg', 'invalid')}")
                continue
            if strategy != "raw":
                logger.debug("Parsed %s using the %s candidate", self._label, strategy)
            return ParseOutcome(value=value, strategy=strategy, raw=text, errors=errors)

        logger.warning("Could not parse model output as %s (%s)", self._label, "; ".join(errors))
        logger.debug("Unparseable model output: %s", text)
        return ParseOutcome(value=None, strategy=None, raw=text, errors=errors)

    def parse(self, text: str, default: T) -> T:
        """Return the parsed value, or ``default`` when every candidate fails."""
        outcome = self.attempt(text)
        return outcome.value if outcome.ok else default  # type: ignore[return-value]


def text_card_fallback(text: str) -> ResponseData:
    """Wrap unparseable output as a single non-error text card."""
    return ResponseData.text(text, is_error=False)


cards_parser: ResponseParser[ResponseData] = ResponseParser(ResponseData)
analysis_parser: ResponseParser[QueryAnalysis] = ResponseParser(QueryAnalysis)
transactions_parser: ResponseParser[List[ExtractedTransaction]] = ResponseParser(
    List[ExtractedTransaction],
    brackets=("[", "]"),
    label="transactions",
)
receipt_parser: ResponseParser[ParsedReceipt] = ResponseParser(ParsedReceipt)
expense_parser: ResponseParser[ExpenseDetectionResult] = ResponseParser(ExpenseDetectionResult)


def parse_cards(text: str) -> ResponseData:
    return cards_parser.parse(text, default=text_card_fallback(text))


def parse_analysis(text: str) -> QueryAnalysis:
    return analysis_parser.parse(text, default=QueryAnalysis())


def parse_transactions(text: str) -> List[ExtractedTransaction]:
    return transactions_parser.parse(text, default=[])


def parse_receipt(text: str) -> ParsedReceipt:
    return receipt_parser.parse(text, default=ParsedReceipt.unknown())


def parse_expense(text: str) -> ExpenseDetectionResult:
    return expense_parser.parse(text, default=ExpenseDetectionResult(is_transaction=False))


__all__ = [
    "ParseOutcome",
    "ResponseParser",
    "analysis_parser",
    "bracketed_candidate",
    "cards_parser",
    "expense_parser",
    "fenced_candidate",
    "parse_analysis",
    "parse_cards",
    "parse_expense",
    "parse_receipt",
    "parse_transactions",
    "raw_candidate",
    "receipt_parser",
    "text_card_fallback",
    "transactions_parser",
]
