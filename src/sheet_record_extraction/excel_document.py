"""Dataclasses representing the bound sheets of a workbook."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CellKind(str, Enum):
    """Kind of content held by a cell, independent of the workbook library."""

    TEXT = "text"
    NUMERIC = "numeric"
    DATE = "date"
    BOOLEAN = "boolean"
    BLANK = "blank"
    ERROR = "error"
    OTHER = "other"


@dataclass(frozen=True)
class ExcelCell:
    """Represents a single cell with its cached value.

    Formula cells hold their last computed value and are never recomputed.
    """

    value: Any
    kind: CellKind

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.BLANK


@dataclass
class ExcelSheet:
    """An immutable snapshot of one worksheet.

    Cells are addressed with 1-based row and column numbers. Rows may be
    ragged; missing cells read as ``None``.
    """

    name: str
    rows: list[list[ExcelCell | None]]
    comments: dict[tuple[int, int], str] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def cell(self, row: int, column: int) -> ExcelCell | None:
        if row < 1 or column < 1 or row > len(self.rows):
            return None
        cells = self.rows[row - 1]
        if column > len(cells):
            return None
        return cells[column - 1]

    def comment(self, row: int, column: int) -> str | None:
        return self.comments.get((row, column))

    def is_empty_cell(self, row: int, column: int) -> bool:
        cell = self.cell(row, column)
        return cell is None or cell.is_empty

    def is_empty_row(self, row: int) -> bool:
        if row < 1 or row > len(self.rows):
            return True
        return all(cell is None or cell.is_empty for cell in self.rows[row - 1])

    def is_empty_column(self, column: int) -> bool:
        return all(
            self.is_empty_cell(row, column) for row in range(1, self.row_count + 1)
        )
