"""Pydantic models and value types shared by the extraction services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from sheet_record_extraction.config import Settings


class Orientation(str, Enum):
    """Table orientation.

    HORIZONTAL tables have their header above the data: one record per row.
    VERTICAL tables have their header to the left: one record per column.
    """

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    def to_row_column(self, major: int, minor: int) -> tuple[int, int]:
        """Map major/minor indexes to (row, column)."""
        if self is Orientation.HORIZONTAL:
            return major, minor
        return minor, major

    def to_major_minor(self, row: int, column: int) -> tuple[int, int]:
        """Map (row, column) to major/minor indexes."""
        if self is Orientation.HORIZONTAL:
            return row, column
        return column, row


class ContainerFormat(str, Enum):
    """Workbook container family."""

    OOXML = "ooxml"
    OLE2 = "ole2"


class FormatInfo(BaseModel):
    """Workbook format detection result."""

    container: ContainerFormat = Field(..., description="Detected container family")
    mime_type: str | None = Field(
        default=None, description="MIME type reported by content sniffing"
    )
    extension: str = Field(
        ..., description="File extension including the dot (e.g., '.xlsx')"
    )


class ExtractionConfig(BaseModel):
    """Per-session extraction configuration.

    Assignments are type-checked; the patterns themselves are only checked
    when a cell is displayed or validated with them.
    """

    model_config = ConfigDict(validate_assignment=True)

    date_pattern: str = Field(
        default="yyyy/MM/dd", description="Default date display/validation pattern"
    )
    number_format: str = Field(
        default="#.##", description="Default number display pattern"
    )
    start_tag: str | None = Field(
        default=None, description="Comment expected one line before the data"
    )
    end_tag: str | None = Field(
        default=None, description="Leading cell value that ends a table"
    )

    @classmethod
    def from_settings(cls, s: Settings) -> ExtractionConfig:
        return cls(
            date_pattern=s.date_pattern,
            number_format=s.number_format,
            start_tag=s.start_tag,
            end_tag=s.end_tag,
        )


@dataclass
class ExtractionCursor:
    """Scan position of one extraction call.

    ``major_index`` is the row (horizontal) or column (vertical) of the
    record being built, running from ``start_bound`` up to ``end_bound``
    (the physical extent of the sheet). ``minor_index`` is the column/row
    the next field consumes; it restarts at ``minor_origin`` for every
    record. Both only move forward within a record.
    """

    orientation: Orientation
    major_index: int
    minor_index: int
    start_bound: int
    end_bound: int
    minor_origin: int

    @classmethod
    def start(
        cls,
        orientation: Orientation,
        start_row: int,
        start_column: int,
        end_bound: int,
    ) -> ExtractionCursor:
        major, minor = orientation.to_major_minor(start_row, start_column)
        return cls(
            orientation=orientation,
            major_index=major,
            minor_index=minor,
            start_bound=major,
            end_bound=end_bound,
            minor_origin=minor,
        )

    def advance_minor(self, count: int = 1) -> None:
        self.minor_index += count

    def next_major(self) -> None:
        self.major_index += 1
        self.minor_index = self.minor_origin

    @property
    def exhausted(self) -> bool:
        return self.major_index > self.end_bound

    @property
    def row_column(self) -> tuple[int, int]:
        return self.orientation.to_row_column(self.major_index, self.minor_index)

    @property
    def leading_cell(self) -> tuple[int, int]:
        """Row and column of the first cell of the current line."""
        return self.orientation.to_row_column(self.major_index, self.minor_origin)
