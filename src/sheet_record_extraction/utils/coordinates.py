"""Spreadsheet coordinates and alphabetic column labels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_ALPHABET_SIZE = 26


def column_label(number: int) -> str:
    """Convert a 1-based column number to its spreadsheet label.

    Uses bijective base-26: 1 -> "A", 26 -> "Z", 27 -> "AA", 53 -> "BA".

    Raises:
        ValueError: If ``number`` is not positive.
    """
    if number <= 0:
        raise ValueError(f"Column number must be positive, got {number}")
    letters: list[str] = []
    while number > 0:
        number, remainder = divmod(number - 1, _ALPHABET_SIZE)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))


def column_index(label: str) -> int:
    """Convert a spreadsheet column label back to its 1-based number.

    Raises:
        ValueError: If ``label`` is empty or contains non A-Z letters.
    """
    normalized = label.strip().upper()
    if not normalized or not all("A" <= ch <= "Z" for ch in normalized):
        raise ValueError(f"Invalid column label: {label!r}")
    number = 0
    for ch in normalized:
        number = number * _ALPHABET_SIZE + (ord(ch) - ord("A") + 1)
    return number


@dataclass(frozen=True)
class CellPosition:
    """A 1-based sheet/row/column coordinate."""

    sheet: int
    row: int
    column: int

    @property
    def column_label(self) -> str:
        # Fence lookups may point one line before column A.
        if self.column <= 0:
            return str(self.column)
        return column_label(self.column)

    def describe(self) -> str:
        return f"Sheet {self.sheet}, row {self.row}, column {self.column_label}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheet": self.sheet,
            "row": self.row,
            "column": self.column_label,
        }
