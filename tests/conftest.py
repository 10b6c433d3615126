"""Shared fixtures: in-memory sheets and openpyxl-built workbooks."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator, Mapping, Sequence
from datetime import date, datetime, time
from typing import Any

import pytest
from openpyxl import Workbook
from openpyxl.comments import Comment

from sheet_record_extraction.excel_document import CellKind, ExcelCell, ExcelSheet
from sheet_record_extraction.utils.logging import clear_context

SheetFactory = Callable[..., ExcelSheet]
WorkbookFactory = Callable[..., bytes]


def _to_cell(value: Any) -> ExcelCell | None:
    if value is None or isinstance(value, ExcelCell):
        return value
    if isinstance(value, bool):
        return ExcelCell(value, CellKind.BOOLEAN)
    if isinstance(value, (datetime, date, time)):
        return ExcelCell(value, CellKind.DATE)
    if isinstance(value, (int, float)):
        return ExcelCell(value, CellKind.NUMERIC)
    return ExcelCell(value, CellKind.TEXT)


@pytest.fixture(autouse=True)
def reset_log_context() -> Iterator[None]:
    """Keep logging context variables from leaking between tests."""
    clear_context()
    yield
    clear_context()


@pytest.fixture
def make_sheet() -> SheetFactory:
    """Build an ExcelSheet from plain Python values (None = missing cell)."""

    def factory(
        rows: Sequence[Sequence[Any]],
        comments: Mapping[tuple[int, int], str] | None = None,
        name: str = "Sheet1",
    ) -> ExcelSheet:
        return ExcelSheet(
            name=name,
            rows=[[_to_cell(value) for value in row] for row in rows],
            comments=dict(comments or {}),
        )

    return factory


@pytest.fixture
def workbook_bytes() -> WorkbookFactory:
    """Build an .xlsx workbook in memory and return its bytes.

    ``sheets`` maps sheet names to rows of values; ``comments`` maps sheet
    names to ``{"A1": "text"}``; ``states`` maps sheet names to an openpyxl
    sheet state ("hidden" or "veryHidden").
    """

    def factory(
        sheets: Mapping[str, Sequence[Sequence[Any]]],
        comments: Mapping[str, Mapping[str, str]] | None = None,
        states: Mapping[str, str] | None = None,
    ) -> bytes:
        wb = Workbook()
        wb.remove(wb.active)
        for name, rows in sheets.items():
            ws = wb.create_sheet(name)
            for r, row in enumerate(rows, start=1):
                for c, value in enumerate(row, start=1):
                    if value is not None:
                        ws.cell(row=r, column=c, value=value)
            for coordinate, text in (comments or {}).get(name, {}).items():
                ws[coordinate].comment = Comment(text, "tests")
            state = (states or {}).get(name)
            if state:
                ws.sheet_state = state

        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return factory


@pytest.fixture
def staff_rows() -> list[list[Any]]:
    """A small horizontal table with a header row and a trailing gap."""
    return [
        ["Name", "Status", "Amount", "Joined"],
        ["Ann", "A", 1200.5, datetime(2024, 1, 15)],
        ["Bob", "B", "n/a", datetime(2023, 6, 1)],
        [None, None, None, None],
        ["Zed", "A", 1, datetime(2020, 1, 1)],
    ]
