"""Canonical string conversion of cells."""

from __future__ import annotations

from sheet_record_extraction.excel_document import CellKind, ExcelCell
from sheet_record_extraction.utils.exceptions import ConfigurationError, ErrorCode
from sheet_record_extraction.utils.patterns import (
    PatternSyntaxError,
    format_date,
    format_number,
)

ERROR_SENTINEL = "ERROR"


class CellValueCoercer:
    """Turns a cell into a trimmed canonical string.

    Date cells are displayed with the field's date pattern, other numeric
    cells with the field's number pattern; both fall back to the session
    defaults given at construction.
    """

    def __init__(self, date_pattern: str, number_format: str) -> None:
        self.date_pattern = date_pattern
        self.number_format = number_format

    def coerce(
        self,
        cell: ExcelCell | None,
        date_pattern: str | None = None,
        number_format: str | None = None,
    ) -> str:
        if cell is None:
            return ""
        try:
            return self._display(cell, date_pattern, number_format).strip()
        except PatternSyntaxError as e:
            raise ConfigurationError(
                str(e), ErrorCode.SCHEMA_DECLARATION
            ) from e

    def _display(
        self,
        cell: ExcelCell,
        date_pattern: str | None,
        number_format: str | None,
    ) -> str:
        kind = cell.kind
        if kind is CellKind.TEXT:
            return str(cell.value)
        if kind is CellKind.DATE:
            return format_date(cell.value, date_pattern or self.date_pattern)
        if kind is CellKind.NUMERIC:
            return format_number(cell.value, number_format or self.number_format)
        if kind is CellKind.BOOLEAN:
            return "true" if cell.value else "false"
        if kind in (CellKind.BLANK, CellKind.ERROR):
            return ""
        return ERROR_SENTINEL
