"""Opt-in duplicate detection over accumulated records."""

from __future__ import annotations

from typing import Any

from sheet_record_extraction.utils.coordinates import column_label
from sheet_record_extraction.utils.exceptions import DuplicateRecordError

ROW_UNIT = "row"
COLUMN_UNIT = "column"


class DuplicateDetector:
    """Compares each new record with every record accepted before it.

    Records are compared with ``==`` (full-value equality, so dataclasses
    compare field by field). Entry ``i`` is reported at position
    ``origin + i``, where ``origin`` is the line the block started at, as a
    row number or a column label depending on ``unit``.

    Every check is a linear scan; only enable it when asked to.
    """

    def __init__(self, sheet_index: int, origin: int, unit: str) -> None:
        if unit not in (ROW_UNIT, COLUMN_UNIT):
            raise ValueError(f"unit must be '{ROW_UNIT}' or '{COLUMN_UNIT}'")
        self.sheet_index = sheet_index
        self.origin = origin
        self.unit = unit
        self._accepted: list[Any] = []

    def _label(self, position: int) -> str:
        if self.unit == COLUMN_UNIT:
            return column_label(position)
        return str(position)

    def check(self, record: Any, position: int) -> None:
        """Raise if ``record`` equals an accepted one, then accept it.

        Args:
            record: Newly built record.
            position: Row or column the record came from.

        Raises:
            DuplicateRecordError: On the first equal record found.
        """
        for index, existing in enumerate(self._accepted):
            if existing == record:
                raise DuplicateRecordError(
                    self.sheet_index,
                    self._label(self.origin + index),
                    self._label(position),
                    self.unit,
                )
        self._accepted.append(record)
