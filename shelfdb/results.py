"""
Query outcomes shared by every store.

    ReadResult(rows)                  statement produced a result set
    WriteResult(row_count, insert_id) statement mutated (or produced nothing)

Both expose `.rows` so callers can always iterate the result. A
WriteResult's rows are always empty, and a ReadResult never carries
row_count / insert_id.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

Row = dict[str, Any]


@dataclass(frozen=True)
class ReadResult:
    rows: list[Row] = field(default_factory=list)

    row_count = None
    insert_id = None

    def to_dict(self) -> dict:
        return {"rows": list(self.rows)}


@dataclass(frozen=True)
class WriteResult:
    row_count: int = 0
    insert_id: Optional[int] = None

    @property
    def rows(self) -> list[Row]:
        return []

    def to_dict(self) -> dict:
        return {"rows": [], "rowCount": self.row_count, "insertId": self.insert_id}


QueryOutcome = Union[ReadResult, WriteResult]


def is_read_statement(sql: str) -> bool:
    """
    Textual read/write classification used by the SQLite store.

    True when the trimmed statement starts with SELECT (any case). This is
    a prefix check, not a parser: `WITH ... SELECT`, statements that open
    with a comment, and PRAGMA reads all classify as writes.
    """
    return sql.strip().upper().startswith("SELECT")
