"""Tests for dynamic-rank expansion."""

from collections.abc import Callable
from dataclasses import dataclass

import pytest

from sheet_record_extraction.excel_document import ExcelSheet
from sheet_record_extraction.models import Orientation
from sheet_record_extraction.services.cell_reader import CellReader
from sheet_record_extraction.services.coercer import CellValueCoercer
from sheet_record_extraction.services.dynamic_rank import DynamicRankExpander
from sheet_record_extraction.services.schema import build_schema
from sheet_record_extraction.services.validator import FieldValidator
from sheet_record_extraction.utils.exceptions import DuplicateRecordError

SheetFactory = Callable[..., ExcelSheet]


@dataclass
class Entry:
    header: str
    value: str


def _expander(sheet: ExcelSheet) -> DynamicRankExpander:
    return DynamicRankExpander(
        CellReader(
            sheet,
            1,
            CellValueCoercer("yyyy/MM/dd", "#.##"),
            FieldValidator("yyyy/MM/dd", "#.##"),
        )
    )


class TestHorizontalExpansion:
    """Header row above, one nested record per column."""

    def test_stops_at_first_empty_header(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet(
            [
                ["Name", "Jan", "Feb", None, "Apr"],
                ["Ann", 10, 12, 99, 7],
            ]
        )

        records = _expander(sheet).expand(
            Orientation.HORIZONTAL, 1, 2, 2, build_schema(Entry)
        )

        assert records == [Entry("Jan", "10"), Entry("Feb", "12")]

    def test_empty_data_cell_under_header_is_kept(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet([["Name", "Jan", "Feb"], ["Ann", 10, None]])

        records = _expander(sheet).expand(
            Orientation.HORIZONTAL, 1, 2, 2, build_schema(Entry)
        )

        assert records == [Entry("Jan", "10"), Entry("Feb", "")]

    def test_stops_at_sheet_edge(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet([["Name", "Jan"], ["Ann", 10]])

        records = _expander(sheet).expand(
            Orientation.HORIZONTAL, 1, 2, 2, build_schema(Entry)
        )

        assert records == [Entry("Jan", "10")]

    def test_empty_when_first_header_is_blank(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet([["Name", None], ["Ann", 10]])

        records = _expander(sheet).expand(
            Orientation.HORIZONTAL, 1, 2, 2, build_schema(Entry)
        )

        assert records == []

    def test_dedupe_reports_column_labels(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet([["Name", "Q", "Q", "R"], ["Ann", 1, 1, 2]])

        with pytest.raises(DuplicateRecordError) as exc_info:
            _expander(sheet).expand(
                Orientation.HORIZONTAL, 1, 2, 2, build_schema(Entry), dedupe=True
            )

        assert exc_info.value.message == "Sheet 1: column B duplicates column C"

    def test_dedupe_cites_block_origin_plus_index(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet(
            [
                ["Name", "Team", "Q", "R", "Q"],
                ["Ann", "Ops", 1, 2, 1],
            ]
        )

        with pytest.raises(DuplicateRecordError) as exc_info:
            _expander(sheet).expand(
                Orientation.HORIZONTAL, 1, 2, 3, build_schema(Entry), dedupe=True
            )

        assert exc_info.value.first == "C"
        assert exc_info.value.second == "E"

    def test_no_dedupe_by_default(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet([["Name", "Q", "Q"], ["Ann", 1, 1]])

        records = _expander(sheet).expand(
            Orientation.HORIZONTAL, 1, 2, 2, build_schema(Entry)
        )

        assert len(records) == 2


class TestVerticalExpansion:
    """Header column to the left, one nested record per row."""

    def test_reads_rows(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet(
            [
                ["Name", "Ann", "Bob"],
                ["Jan", 10, 7],
                ["Feb", 12, 8],
            ]
        )

        records = _expander(sheet).expand(
            Orientation.VERTICAL, 1, 3, 2, build_schema(Entry)
        )

        assert records == [Entry("Jan", "7"), Entry("Feb", "8")]

    def test_dedupe_reports_row_numbers(self, make_sheet: SheetFactory) -> None:
        sheet = make_sheet([["Name", "Ann"], ["Q", 1], ["Q", 1]])

        with pytest.raises(DuplicateRecordError) as exc_info:
            _expander(sheet).expand(
                Orientation.VERTICAL, 1, 2, 2, build_schema(Entry), dedupe=True
            )

        assert exc_info.value.message == "Sheet 1: row 2 duplicates row 3"
