"""Expansion of trailing variable-width header groups.

A dynamic-rank field collects one nested record per non-empty header cell,
starting where the enclosing record's fixed fields end::

    row 1:  Name | Dept | Jan | Feb | Mar |      <- header line (row 1)
    row 2:  Ann  | Ops  | 10  | 12  | 9   |      <- data line
                          \\_____________/
                          3 nested records: (Jan, 10), (Feb, 12), (Mar, 9)

The nested type's fields are filled in order from the header line and the
data line at the same column (or row, for vertical tables).
"""

from __future__ import annotations

from typing import Any

from sheet_record_extraction.models import Orientation
from sheet_record_extraction.services.cell_reader import CellReader
from sheet_record_extraction.services.duplicate_detector import (
    COLUMN_UNIT,
    ROW_UNIT,
    DuplicateDetector,
)
from sheet_record_extraction.services.schema import RecordSchema
from sheet_record_extraction.utils.logging import get_logger

logger = get_logger(__name__)


class DynamicRankExpander:
    """Builds the nested records of a dynamic-rank field."""

    def __init__(self, reader: CellReader) -> None:
        self.reader = reader

    def expand(
        self,
        orientation: Orientation,
        header_line: int,
        data_line: int,
        start_minor: int,
        nested_schema: RecordSchema,
        dedupe: bool = False,
    ) -> list[Any]:
        """Collect nested records until the header line goes empty.

        Args:
            orientation: Orientation of the enclosing table.
            header_line: Row (horizontal) or column (vertical) of the headers.
            data_line: Row or column of the enclosing record.
            start_minor: First column (horizontal) or row (vertical) to read.
            nested_schema: Schema of the nested record type.
            dedupe: Reject equal nested records.

        Returns:
            The nested records, one per consumed column/row.

        Raises:
            DuplicateRecordError: If ``dedupe`` is set and two nested records
                are equal. Positions are reported within the block: column
                labels for horizontal tables, row numbers for vertical ones.
        """
        sheet = self.reader.sheet
        if orientation is Orientation.HORIZONTAL:
            end_minor = sheet.column_count
            unit = COLUMN_UNIT
        else:
            end_minor = sheet.row_count
            unit = ROW_UNIT

        detector = (
            DuplicateDetector(self.reader.sheet_index, start_minor, unit)
            if dedupe
            else None
        )
        lines = (header_line, data_line)
        records: list[Any] = []

        minor = start_minor
        while minor <= end_minor:
            if sheet.is_empty_cell(*orientation.to_row_column(header_line, minor)):
                break

            builder = nested_schema.new_builder()
            for descriptor, line in zip(nested_schema.active_fields, lines):
                row, column = orientation.to_row_column(line, minor)
                builder.set(
                    descriptor.name,
                    self.reader.read(descriptor, builder, row, column),
                )
            record = builder.build()

            if detector is not None:
                detector.check(record, minor)
            records.append(record)
            minor += 1

        logger.debug(
            "Expanded dynamic rank",
            header_line=header_line,
            data_line=data_line,
            start=start_minor,
            count=len(records),
        )
        return records
