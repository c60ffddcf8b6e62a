"""
Pydantic models exchanged between the analysis, execution and formatting steps.
"""

import json
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

QueryType = Literal["greeting", "data_query", "advice", "general"]

Scalar = Union[None, int, float, str]


class QueryAnalysis(BaseModel):
    """Intent classification produced by the first LLM round-trip."""

    needs_data: bool = False
    sql_query: Optional[str] = None
    query_type: QueryType = "general"

    @field_validator("query_type", mode="before")
    @classmethod
    def _unknown_type_is_general(cls, value: Any) -> Any:
        if value not in ("greeting", "data_query", "advice", "general"):
            return "general"
        return value

    @field_validator("sql_query", mode="before")
    @classmethod
    def _blank_sql_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class QueryResult(BaseModel):
    """Rows returned by a read-only statement, already JSON-safe."""

    columns: List[str] = Field(default_factory=list)
    rows: List[List[Scalar]] = Field(default_factory=list)
    row_count: int = 0

    @classmethod
    def from_rows(cls, columns: List[str], rows: List[List[Scalar]]) -> "QueryResult":
        return cls(columns=columns, rows=rows, row_count=len(rows))

    def to_json(self) -> str:
        return json.dumps(
            {"columns": self.columns, "rows": self.rows, "row_count": self.row_count}
        )


__all__ = ["QueryAnalysis", "QueryResult", "QueryType", "Scalar"]
