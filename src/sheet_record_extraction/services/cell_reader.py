"""Reads one validated, converted field value from one cell."""

from __future__ import annotations

from typing import Any

from sheet_record_extraction.excel_document import ExcelSheet
from sheet_record_extraction.services.coercer import CellValueCoercer
from sheet_record_extraction.services.schema import (
    FieldDescriptor,
    RecordBuilder,
    convert_scalar,
)
from sheet_record_extraction.services.validator import FieldValidator
from sheet_record_extraction.utils.coordinates import CellPosition


class CellReader:
    """Coerces, validates and converts cells of one bound sheet."""

    def __init__(
        self,
        sheet: ExcelSheet,
        sheet_index: int,
        coercer: CellValueCoercer,
        validator: FieldValidator,
    ) -> None:
        self.sheet = sheet
        self.sheet_index = sheet_index
        self.coercer = coercer
        self.validator = validator

    def canonical(self, row: int, column: int) -> str:
        """Canonical string of a cell using the session patterns."""
        return self.coercer.coerce(self.sheet.cell(row, column))

    def read(
        self,
        descriptor: FieldDescriptor,
        builder: RecordBuilder,
        row: int,
        column: int,
    ) -> Any:
        """Return the final value of ``descriptor`` read from (row, column).

        Conversion errors from pydantic propagate unchanged.
        """
        raw = self.coercer.coerce(
            self.sheet.cell(row, column),
            descriptor.date_pattern,
            descriptor.number_pattern,
        )
        position = CellPosition(self.sheet_index, row, column)
        value = self.validator.validate(raw, descriptor, builder, position)
        return convert_scalar(
            value,
            descriptor.target_type,
            descriptor.date_pattern or self.coercer.date_pattern,
        )
