"""
Pydantic models for the presentation cards returned by the query pipeline.

Cards travel as ``{"type": "<kind>", "content": {...}}`` objects, which is
also the shape the formatting prompt asks the model to emit.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class TextContent(BaseModel):
    """Markdown body, optionally flagged as an error message."""

    body: str
    is_error: Optional[bool] = None


class ChartDataPoint(BaseModel):
    label: str
    value: float

    @field_validator("label", mode="before")
    @classmethod
    def _label_to_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value


class ChartContent(BaseModel):
    chart_type: Literal["pie", "bar", "line"]
    title: str
    data: List[ChartDataPoint]
    caption: Optional[str] = None


class TableContent(BaseModel):
    title: str
    columns: List[str]
    rows: List[List[str]]
    summary: Optional[str] = None

    @field_validator("rows", mode="before")
    @classmethod
    def _stringify_cells(cls, value: Any) -> Any:
        """Models often emit raw numbers in table cells; render them as text."""
        if not isinstance(value, list):
            return value
        rows = []
        for row in value:
            if not isinstance(row, list):
                return value
            rows.append(["" if cell is None else str(cell) for cell in row])
        return rows


class MixedContent(BaseModel):
    body: str
    chart: ChartContent


class TextCard(BaseModel):
    type: Literal["text"] = "text"
    content: TextContent


class ChartCard(BaseModel):
    type: Literal["chart"] = "chart"
    content: ChartContent


class TableCard(BaseModel):
    type: Literal["table"] = "table"
    content: TableContent


class MixedCard(BaseModel):
    type: Literal["mixed"] = "mixed"
    content: MixedContent


ResponseCard = Annotated[
    Union[TextCard, ChartCard, TableCard, MixedCard],
    Field(discriminator="type"),
]


class ResponseData(BaseModel):
    """Ordered cards rendered top-to-bottom; never empty."""

    cards: List[ResponseCard] = Field(..., min_length=1)

    @classmethod
    def text(cls, body: str, *, is_error: bool = False) -> "ResponseData":
        return cls(cards=[TextCard(content=TextContent(body=body, is_error=is_error))])

    def summary(self) -> Optional[str]:
        """Short textual stand-in for the first card, used in chat history."""
        if not self.cards:
            return None
        return card_summary(self.cards[0])

    @property
    def is_error(self) -> bool:
        first = self.cards[0]
        return isinstance(first, TextCard) and bool(first.content.is_error)


def card_summary(card: Union[TextCard, ChartCard, TableCard, MixedCard]) -> str:
    if isinstance(card, TextCard):
        return card.content.body
    if isinstance(card, ChartCard):
        return f"[Chart: {card.content.title}]"
    if isinstance(card, TableCard):
        return f"[Table: {card.content.title}]"
    return card.content.body


__all__ = [
    "ChartCard",
    "ChartContent",
    "ChartDataPoint",
    "MixedCard",
    "MixedContent",
    "ResponseCard",
    "ResponseData",
    "TableCard",
    "TableContent",
    "TextCard",
    "TextContent",
    "card_summary",
]
