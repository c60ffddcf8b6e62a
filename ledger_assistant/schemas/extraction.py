"""
Pydantic models for transactions and receipts extracted from documents.
"""

import re
from datetime import date as date_type
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

_KEBAB_SEPARATORS = re.compile(r"[^a-z0-9]+")


class ExtractedTransaction(BaseModel):
    """One ledger row as read from a statement, receipt or free text."""

    date: str = Field(..., description="ISO 8601 date (YYYY-MM-DD).")
    description: str
    amount: float = Field(
        ..., description="Negative for expenses, positive for income."
    )
    currency: str = "USD"
    category: str = "Other"
    merchant: Optional[str] = None

    @field_validator("currency", "category", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "USD" if info.field_name == "currency" else "Other"
        return value


class ParsedReceiptItem(BaseModel):
    name: str = Field(..., description="Lowercase kebab-case product name.")
    quantity: Optional[float] = None
    unit: Optional[str] = None
    unit_price: Optional[float] = None
    total_price: float
    category: Optional[str] = None
    brand: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _to_kebab_case(cls, value: str) -> str:
        cleaned = _KEBAB_SEPARATORS.sub("-", value.strip().lower()).strip("-")
        return cleaned or value


class ParsedReceipt(BaseModel):
    merchant: str
    date: str
    items: List[ParsedReceiptItem] = Field(default_factory=list)
    tax: Optional[float] = None
    total: float
    category: str

    @classmethod
    def unknown(cls) -> "ParsedReceipt":
        """Neutral receipt used when the model output cannot be parsed."""
        return cls(
            merchant="Unknown",
            date=date_type.today().isoformat(),
            items=[],
            tax=None,
            total=0.0,
            category="Other",
        )


class ExpenseDetectionResult(BaseModel):
    """Whether a chat message mentions a personal expense or income."""

    is_transaction: bool = False
    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    merchant: Optional[str] = None
    confidence: Optional[Literal["high", "medium", "low"]] = None


__all__ = [
    "ExpenseDetectionResult",
    "ExtractedTransaction",
    "ParsedReceipt",
    "ParsedReceiptItem",
]
