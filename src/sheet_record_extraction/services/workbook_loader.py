"""Workbook loading for structured sheet extraction.

Opens a workbook with openpyxl (``.xlsx``) or xlrd (``.xls``), checks the
requested sheets, and snapshots them into :class:`ExcelSheet` objects. The
library workbook is released before :meth:`WorkbookLoader.load` returns.
"""

from __future__ import annotations

import io
import zipfile
from collections.abc import Iterable
from contextlib import closing
from datetime import date, datetime, time, timedelta
from typing import Any

import xlrd
from openpyxl import load_workbook
from openpyxl.cell import Cell
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from sheet_record_extraction.excel_document import CellKind, ExcelCell, ExcelSheet
from sheet_record_extraction.models import ContainerFormat
from sheet_record_extraction.services.format_detector import FormatDetector
from sheet_record_extraction.utils.exceptions import (
    HiddenSheetRejectedError,
    SheetBoundsExceededError,
    UnsupportedFormatError,
)
from sheet_record_extraction.utils.logging import get_logger

logger = get_logger(__name__)

# Day zero of the 1900 date system, as used for duration cells.
_EXCEL_EPOCH = datetime(1899, 12, 30)

# xlrd sheet visibility: 1 = hidden, 2 = very hidden.
_XLRD_HIDDEN_STATES = frozenset({1, 2})


class WorkbookLoader:
    """Load the first ``sheet_count`` sheets of a workbook."""

    def __init__(self, detector: FormatDetector | None = None) -> None:
        self.detector = detector or FormatDetector()

    def load(
        self, content: bytes, sheet_count: int, filename: str | None = None
    ) -> list[ExcelSheet]:
        """Open ``content`` and snapshot its first ``sheet_count`` sheets.

        Args:
            content: Workbook bytes.
            sheet_count: Number of leading sheets to bind.
            filename: Original filename, used for the extension check.

        Returns:
            One snapshot per bound sheet, in workbook order.

        Raises:
            UnsupportedFormatError: If the file is not a readable workbook.
            SheetBoundsExceededError: If the workbook has fewer sheets.
            HiddenSheetRejectedError: If a bound sheet is hidden.
        """
        info = self.detector.detect(content, filename)
        if info.container is ContainerFormat.OOXML:
            sheets = self._load_ooxml(content, sheet_count, filename)
        else:
            sheets = self._load_ole2(content, sheet_count, filename)

        logger.info(
            "Loaded workbook",
            container=info.container.value,
            sheets=[sheet.name for sheet in sheets],
        )
        return sheets

    # ------------------------------------------------------------------ #
    # OOXML (.xlsx) via openpyxl
    # ------------------------------------------------------------------ #

    def _load_ooxml(
        self, content: bytes, sheet_count: int, filename: str | None
    ) -> list[ExcelSheet]:
        try:
            workbook = load_workbook(io.BytesIO(content), data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise UnsupportedFormatError(
                f"Cannot open workbook: {e}", filename=filename
            ) from e

        with closing(workbook):
            worksheets = workbook.worksheets
            if sheet_count > len(worksheets):
                raise SheetBoundsExceededError(sheet_count, len(worksheets))

            sheets: list[ExcelSheet] = []
            for index, worksheet in enumerate(worksheets[:sheet_count], start=1):
                if worksheet.sheet_state != Worksheet.SHEETSTATE_VISIBLE:
                    raise HiddenSheetRejectedError(index, worksheet.title)
                sheets.append(self._snapshot_worksheet(worksheet))
            return sheets

    def _snapshot_worksheet(self, worksheet: Worksheet) -> ExcelSheet:
        rows: list[list[ExcelCell | None]] = []
        comments: dict[tuple[int, int], str] = {}

        row_iter: Iterable[tuple[Any, ...]] = worksheet.iter_rows()
        for row_cells in row_iter:
            excel_row: list[ExcelCell | None] = []
            for cell in row_cells:
                excel_row.append(self._build_openpyxl_cell(cell))
                if getattr(cell, "comment", None) is not None:
                    comments[(cell.row, cell.column)] = cell.comment.text
            rows.append(excel_row)

        return ExcelSheet(name=worksheet.title, rows=rows, comments=comments)

    @staticmethod
    def _build_openpyxl_cell(cell: Any) -> ExcelCell:
        """Map an openpyxl cell (or merged placeholder) to an ExcelCell."""
        value = cell.value
        if value is None:
            return ExcelCell(None, CellKind.BLANK)
        if isinstance(cell, Cell) and cell.data_type == "e":
            return ExcelCell(value, CellKind.ERROR)
        if isinstance(value, bool):
            return ExcelCell(value, CellKind.BOOLEAN)
        if isinstance(value, timedelta):
            return ExcelCell(_EXCEL_EPOCH + value, CellKind.DATE)
        if isinstance(value, (datetime, date, time)):
            return ExcelCell(value, CellKind.DATE)
        if isinstance(value, (int, float)):
            return ExcelCell(value, CellKind.NUMERIC)
        if isinstance(value, str):
            return ExcelCell(value, CellKind.TEXT)
        return ExcelCell(value, CellKind.OTHER)

    # ------------------------------------------------------------------ #
    # OLE2 (.xls) via xlrd
    # ------------------------------------------------------------------ #

    def _load_ole2(
        self, content: bytes, sheet_count: int, filename: str | None
    ) -> list[ExcelSheet]:
        try:
            book = xlrd.open_workbook(file_contents=content, formatting_info=True)
        except (xlrd.XLRDError, xlrd.compdoc.CompDocError, OSError) as e:
            raise UnsupportedFormatError(
                f"Cannot open workbook: {e}", filename=filename
            ) from e

        try:
            if sheet_count > book.nsheets:
                raise SheetBoundsExceededError(sheet_count, book.nsheets)

            sheets: list[ExcelSheet] = []
            for index in range(sheet_count):
                sheet = book.sheet_by_index(index)
                if sheet.visibility in _XLRD_HIDDEN_STATES:
                    raise HiddenSheetRejectedError(index + 1, sheet.name)
                sheets.append(self._snapshot_xlrd_sheet(sheet, book.datemode))
            return sheets
        finally:
            book.release_resources()

    def _snapshot_xlrd_sheet(self, sheet: Any, datemode: int) -> ExcelSheet:
        rows = [
            [
                self._build_xlrd_cell(sheet.cell(r, c), datemode)
                for c in range(sheet.row_len(r))
            ]
            for r in range(sheet.nrows)
        ]
        comments = {
            (r + 1, c + 1): note.text
            for (r, c), note in sheet.cell_note_map.items()
        }
        return ExcelSheet(name=sheet.name, rows=rows, comments=comments)

    @staticmethod
    def _build_xlrd_cell(cell: Any, datemode: int) -> ExcelCell:
        ctype = cell.ctype
        if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return ExcelCell(None, CellKind.BLANK)
        if ctype == xlrd.XL_CELL_TEXT:
            return ExcelCell(cell.value, CellKind.TEXT)
        if ctype == xlrd.XL_CELL_NUMBER:
            return ExcelCell(cell.value, CellKind.NUMERIC)
        if ctype == xlrd.XL_CELL_DATE:
            try:
                return ExcelCell(
                    xlrd.xldate_as_datetime(cell.value, datemode),
                    CellKind.DATE,
                )
            except xlrd.xldate.XLDateError:
                return ExcelCell(cell.value, CellKind.NUMERIC)
        if ctype == xlrd.XL_CELL_BOOLEAN:
            return ExcelCell(bool(cell.value), CellKind.BOOLEAN)
        if ctype == xlrd.XL_CELL_ERROR:
            return ExcelCell(cell.value, CellKind.ERROR)
        return ExcelCell(cell.value, CellKind.OTHER)
