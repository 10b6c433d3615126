"""Extraction session: bind a workbook once, extract many tables.

Usage::

    extractor = SheetRecordExtractor().initialize("staff.xlsx", sheet_count=1)
    staff = extractor.get_horizontal_data(1, 2, 1, Employee)
    frame = to_dataframe(staff)
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from pathlib import Path
from typing import IO, Any, TypeVar

import pandas as pd

from sheet_record_extraction.config import (
    Settings,
    settings,
    validate_settings_on_startup,
)
from sheet_record_extraction.excel_document import ExcelSheet
from sheet_record_extraction.models import ExtractionConfig, Orientation
from sheet_record_extraction.services.table_scanner import TableScanner
from sheet_record_extraction.services.workbook_loader import WorkbookLoader
from sheet_record_extraction.utils.exceptions import (
    EmptyInputError,
    ErrorCode,
    InputError,
)
from sheet_record_extraction.utils.logging import (
    LogContext,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)

T = TypeVar("T")

WorkbookSource = bytes | bytearray | str | Path | IO[bytes]


class SheetRecordExtractor:
    """Extract typed records from the tables of a workbook.

    The session binds the first ``sheet_count`` sheets of one workbook in
    :meth:`initialize`; every ``get_*_data`` call then scans one table
    region of a bound sheet. Sheet indexes, rows and columns are 1-based.

    Sessions are not safe for concurrent extraction calls.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        loader: WorkbookLoader | None = None,
    ) -> None:
        self.config = config or ExtractionConfig.from_settings(settings)
        self.loader = loader or WorkbookLoader()
        self.session_id = str(uuid.uuid4())
        self._sheets: list[ExcelSheet] = []

    @classmethod
    def from_settings(cls, s: Settings) -> SheetRecordExtractor:
        """Create a session whose configuration is seeded from ``s``.

        Also installs the structured log formatter at ``s.log_level``
        (DEBUG when ``s.debug`` is set).
        """
        configure_logging(level=logging.DEBUG if s.debug else s.log_level_int)
        validate_settings_on_startup(s)
        return cls(config=ExtractionConfig.from_settings(s))

    # ------------------------------------------------------------------ #
    # Workbook binding
    # ------------------------------------------------------------------ #

    def initialize(
        self,
        source: WorkbookSource | None,
        sheet_count: int,
        filename: str | None = None,
    ) -> SheetRecordExtractor:
        """Bind the first ``sheet_count`` sheets of a workbook.

        Args:
            source: Workbook bytes, a binary stream, or a file path.
            sheet_count: Number of leading sheets to bind.
            filename: Original filename; defaults to the path or stream
                name. Its extension must be ``.xls`` or ``.xlsx``. Without a
                name (plain bytes or an unnamed stream) the extension check
                is skipped and the content signature alone decides.

        Returns:
            The session itself.

        Raises:
            InputError: If ``sheet_count`` is not positive.
            EmptyInputError: If no content was supplied.
            UnsupportedFormatError: If the file is not an Excel workbook.
            SheetBoundsExceededError: If the workbook has fewer sheets.
            HiddenSheetRejectedError: If a bound sheet is hidden.
        """
        if sheet_count < 1:
            raise InputError(
                f"sheet_count must be positive, got {sheet_count}",
                ErrorCode.SHEET_BOUNDS_EXCEEDED,
                details={"requested": sheet_count},
            )

        content, filename = self._read_source(source, filename)
        if not content:
            raise EmptyInputError()

        with LogContext(session_id=self.session_id):
            self._sheets = self.loader.load(content, sheet_count, filename)
            logger.info(
                "Initialized extraction session",
                filename=filename,
                sheet_count=sheet_count,
                size_bytes=len(content),
            )
        return self

    @staticmethod
    def _read_source(
        source: WorkbookSource | None, filename: str | None
    ) -> tuple[bytes, str | None]:
        if source is None:
            raise EmptyInputError()
        if isinstance(source, (bytes, bytearray)):
            return bytes(source), filename
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"Excel file not found: {path}")
            return path.read_bytes(), filename or path.name

        content = source.read()
        if filename is None:
            name = getattr(source, "name", None)
            filename = Path(name).name if isinstance(name, str) else None
        return content or b"", filename

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def set_date_pattern(self, pattern: str) -> SheetRecordExtractor:
        self.config.date_pattern = pattern
        return self

    def set_number_format(self, pattern: str) -> SheetRecordExtractor:
        self.config.number_format = pattern
        return self

    def set_start_tag(self, tag: str | None) -> SheetRecordExtractor:
        self.config.start_tag = tag
        return self

    def set_end_tag(self, tag: str | None) -> SheetRecordExtractor:
        self.config.end_tag = tag
        return self

    # ------------------------------------------------------------------ #
    # Extraction
    # ------------------------------------------------------------------ #

    def get_sheet_name(self, sheet_index: int) -> str:
        """Return the name of a bound sheet (1-based)."""
        return self._scanner().resolve_sheet(sheet_index).name

    def get_horizontal_data(
        self,
        sheet_index: int,
        start_row: int,
        start_column: int,
        target_type: type[T],
        dedupe: bool = False,
    ) -> list[T]:
        """Extract one record per row, starting at (start_row, start_column)."""
        return self._extract(
            Orientation.HORIZONTAL,
            sheet_index,
            start_row,
            start_column,
            target_type,
            dedupe,
        )

    def get_vertical_data(
        self,
        sheet_index: int,
        start_row: int,
        start_column: int,
        target_type: type[T],
        dedupe: bool = False,
    ) -> list[T]:
        """Extract one record per column, starting at (start_row, start_column)."""
        return self._extract(
            Orientation.VERTICAL,
            sheet_index,
            start_row,
            start_column,
            target_type,
            dedupe,
        )

    def _scanner(self) -> TableScanner:
        return TableScanner(self._sheets, self.config)

    def _extract(
        self,
        orientation: Orientation,
        sheet_index: int,
        start_row: int,
        start_column: int,
        target_type: Any,
        dedupe: bool,
    ) -> list[Any]:
        with LogContext(session_id=self.session_id):
            records = self._scanner().scan(
                sheet_index,
                start_row,
                start_column,
                orientation,
                target_type,
                dedupe,
            )
            logger.info(
                "Extracted table",
                orientation=orientation.value,
                sheet=sheet_index,
                start_row=start_row,
                start_column=start_column,
                target_type=getattr(target_type, "__name__", repr(target_type)),
                records=len(records),
            )
        return records


def to_dataframe(records: list[Any]) -> pd.DataFrame:
    """Tabulate extracted records.

    Dataclass records give one column per field; nested dynamic-rank lists
    stay as Python lists in their cell. Scalar records give a single
    ``value`` column.
    """
    if not records:
        return pd.DataFrame()

    first = records[0]
    if dataclasses.is_dataclass(first) and not isinstance(first, type):
        columns = [f.name for f in dataclasses.fields(first)]
        rows = [[getattr(record, name) for name in columns] for record in records]
        return pd.DataFrame(rows, columns=columns)
    return pd.DataFrame({"value": records})
