"""Builds one record from one table line."""

from __future__ import annotations

from typing import Any

from sheet_record_extraction.models import ExtractionCursor
from sheet_record_extraction.rules import DynamicRank
from sheet_record_extraction.services.cell_reader import CellReader
from sheet_record_extraction.services.dynamic_rank import DynamicRankExpander
from sheet_record_extraction.services.schema import RecordSchema


class RecordMapper:
    """Maps the cells of the cursor's current line onto a record type.

    Fields are filled in declaration order, one cell each, moving the
    cursor's minor index forward. A dynamic-rank field takes as many cells
    as it produces nested records; fields declared after it keep their
    defaults.
    """

    def __init__(self, reader: CellReader) -> None:
        self.reader = reader
        self.expander = DynamicRankExpander(reader)

    def map(self, schema: RecordSchema, cursor: ExtractionCursor) -> Any:
        builder = schema.new_builder()

        for descriptor in schema.active_fields:
            if isinstance(descriptor.rule, DynamicRank):
                assert descriptor.nested is not None
                nested = self.expander.expand(
                    cursor.orientation,
                    descriptor.rule.header_line,
                    cursor.major_index,
                    cursor.minor_index,
                    descriptor.nested,
                    descriptor.rule.dedupe,
                )
                builder.set(descriptor.name, nested)
                cursor.advance_minor(len(nested))
                continue

            row, column = cursor.row_column
            value = self.reader.read(descriptor, builder, row, column)
            builder.set(descriptor.name, value)
            cursor.advance_minor()

        return builder.build()
