"""Table region scanning.

The scanner walks a table line by line (rows for horizontal tables,
columns for vertical ones) starting at the given cell, and stops at the
first line that:

- has an empty leading cell, when reading scalar values;
- is entirely empty, when reading records;
- starts with the configured end tag;

or at the physical end of the sheet. When a start tag is configured, the
cell one line before the start must carry it as a comment.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sheet_record_extraction.excel_document import ExcelSheet
from sheet_record_extraction.models import (
    ExtractionConfig,
    ExtractionCursor,
    Orientation,
)
from sheet_record_extraction.services.cell_reader import CellReader
from sheet_record_extraction.services.coercer import CellValueCoercer
from sheet_record_extraction.services.duplicate_detector import (
    COLUMN_UNIT,
    ROW_UNIT,
    DuplicateDetector,
)
from sheet_record_extraction.services.record_mapper import RecordMapper
from sheet_record_extraction.services.schema import (
    build_schema,
    convert_scalar,
    is_scalar_type,
)
from sheet_record_extraction.services.validator import FieldValidator
from sheet_record_extraction.utils.coordinates import CellPosition
from sheet_record_extraction.utils.exceptions import (
    EmptyResultError,
    SheetBoundsExceededError,
    StartTagMismatchError,
)
from sheet_record_extraction.utils.logging import (
    LogContext,
    get_logger,
    timed_operation,
)

logger = get_logger(__name__)


class TableScanner:
    """Extracts the records of one table region per call.

    A scanner holds no state between calls other than the bound sheets and
    the configuration, but is not meant to be shared between threads.
    """

    def __init__(self, sheets: Sequence[ExcelSheet], config: ExtractionConfig) -> None:
        self.sheets = sheets
        self.config = config

    def resolve_sheet(self, sheet_index: int) -> ExcelSheet:
        """Return the bound sheet for a 1-based index.

        Raises:
            SheetBoundsExceededError: If the index is outside the bound set.
        """
        if sheet_index < 1 or sheet_index > len(self.sheets):
            raise SheetBoundsExceededError(sheet_index, len(self.sheets))
        return self.sheets[sheet_index - 1]

    def scan(
        self,
        sheet_index: int,
        start_row: int,
        start_column: int,
        orientation: Orientation,
        target_type: Any,
        dedupe: bool = False,
    ) -> list[Any]:
        """Extract every record of a table region.

        Args:
            sheet_index: 1-based sheet index.
            start_row: 1-based row of the first data cell.
            start_column: 1-based column of the first data cell.
            orientation: Table orientation.
            target_type: Dataclass record type, or a scalar type
                (``str``, ``int``, ``float``, ``Decimal``, ``bool``, ``object``).
            dedupe: Reject records equal to an earlier one.

        Returns:
            The records in scan order.

        Raises:
            SheetBoundsExceededError: If the sheet index is out of range.
            StartTagMismatchError: If the start fence does not match.
            EmptyResultError: If the region holds no record.
            ConfigurationError: If the record type is not supported or a rule
                is malformed.
            ValidationError: If a cell breaks a field rule.
            DuplicateRecordError: If ``dedupe`` is set and two records match.
        """
        sheet = self.resolve_sheet(sheet_index)
        cursor = ExtractionCursor.start(
            orientation,
            start_row,
            start_column,
            end_bound=(
                sheet.row_count
                if orientation is Orientation.HORIZONTAL
                else sheet.column_count
            ),
        )

        with LogContext(sheet=sheet_index, orientation=orientation.value):
            self._check_start_tag(sheet, sheet_index, cursor)

            scalar = is_scalar_type(target_type)
            schema = None if scalar else build_schema(target_type)
            reader = CellReader(
                sheet,
                sheet_index,
                CellValueCoercer(self.config.date_pattern, self.config.number_format),
                FieldValidator(self.config.date_pattern, self.config.number_format),
            )
            mapper = RecordMapper(reader)
            detector = (
                DuplicateDetector(
                    sheet_index,
                    cursor.start_bound,
                    ROW_UNIT if orientation is Orientation.HORIZONTAL else COLUMN_UNIT,
                )
                if dedupe
                else None
            )

            records: list[Any] = []
            with timed_operation(logger, f"{orientation.value}_scan") as metrics:
                while not cursor.exhausted:
                    if self._is_terminal(sheet, reader, cursor, scalar):
                        break
                    metrics.lines_scanned += 1

                    if schema is None:
                        row, column = cursor.leading_cell
                        record = convert_scalar(
                            reader.canonical(row, column),
                            target_type,
                            self.config.date_pattern,
                        )
                    else:
                        record = mapper.map(schema, cursor)

                    if detector is not None:
                        detector.check(record, cursor.major_index)
                    records.append(record)
                    cursor.next_major()
                metrics.records_produced = len(records)

        if not records:
            raise EmptyResultError(CellPosition(sheet_index, start_row, start_column))
        return records

    def _check_start_tag(
        self, sheet: ExcelSheet, sheet_index: int, cursor: ExtractionCursor
    ) -> None:
        tag = self.config.start_tag
        if not tag:
            return
        row, column = cursor.orientation.to_row_column(
            cursor.major_index - 1, cursor.minor_index
        )
        comment = sheet.comment(row, column)
        found = comment.strip() if comment is not None else None
        if found != tag:
            raise StartTagMismatchError(
                CellPosition(sheet_index, row, column), tag, found
            )

    def _is_terminal(
        self,
        sheet: ExcelSheet,
        reader: CellReader,
        cursor: ExtractionCursor,
        scalar: bool,
    ) -> bool:
        row, column = cursor.leading_cell
        if scalar:
            if sheet.is_empty_cell(row, column):
                logger.debug("Empty leading cell, stopping", row=row, column=column)
                return True
        else:
            empty = (
                sheet.is_empty_row(cursor.major_index)
                if cursor.orientation is Orientation.HORIZONTAL
                else sheet.is_empty_column(cursor.major_index)
            )
            if empty:
                logger.debug("Empty line, stopping", line=cursor.major_index)
                return True

        end_tag = self.config.end_tag
        if end_tag and reader.canonical(row, column) == end_tag:
            logger.debug("End tag reached", line=cursor.major_index)
            return True
        return False
