"""Tests for the centralized exception classes."""

from sheet_record_extraction.utils.coordinates import CellPosition
from sheet_record_extraction.utils.exceptions import (
    ConfigurationError,
    DuplicateRecordError,
    EmptyInputError,
    EmptyResultError,
    ErrorCode,
    FencingError,
    HiddenSheetRejectedError,
    InputError,
    SheetBoundsExceededError,
    SheetExtractionError,
    StartTagMismatchError,
    UnsupportedFormatError,
    ValidationError,
)


class TestErrorCode:
    """Tests for ErrorCode enumeration."""

    def test_error_codes_are_unique(self) -> None:
        """All error codes should have unique values."""
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_error_code_format(self) -> None:
        """Error codes should follow Exxxx format."""
        for code in ErrorCode:
            assert code.value.startswith("E")
            assert len(code.value) == 5
            assert code.value[1:].isdigit()

    def test_input_errors_start_with_e1(self) -> None:
        input_codes = [
            ErrorCode.EMPTY_INPUT,
            ErrorCode.UNSUPPORTED_FORMAT,
            ErrorCode.SHEET_BOUNDS_EXCEEDED,
            ErrorCode.HIDDEN_SHEET_REJECTED,
        ]
        for code in input_codes:
            assert code.value.startswith("E1")

    def test_configuration_errors_start_with_e3(self) -> None:
        config_codes = [
            ErrorCode.GUARD_SYNTAX,
            ErrorCode.TRANSFORM_SYNTAX,
            ErrorCode.SCHEMA_DECLARATION,
            ErrorCode.UNSUPPORTED_TARGET_TYPE,
        ]
        for code in config_codes:
            assert code.value.startswith("E3")

    def test_validation_errors_start_with_e4(self) -> None:
        validation_codes = [
            ErrorCode.REQUIRED,
            ErrorCode.DATE_FORMAT,
            ErrorCode.NUMBER_FORMAT,
            ErrorCode.VALUE_LIMIT,
        ]
        for code in validation_codes:
            assert code.value.startswith("E4")


class TestSheetExtractionError:
    """Tests for base SheetExtractionError class."""

    def test_basic_initialization(self) -> None:
        error = SheetExtractionError("Test error message")
        assert str(error) == "[E9001] Test error message"
        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}

    def test_with_custom_error_code(self) -> None:
        error = SheetExtractionError("Custom error", error_code=ErrorCode.EMPTY_INPUT)
        assert str(error) == "[E1001] Custom error"

    def test_to_dict(self) -> None:
        error = SheetExtractionError(
            "Test error",
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            details={"filename": "a.csv"},
        )
        result = error.to_dict()
        assert result["error_code"] == "E1002"
        assert result["message"] == "Test error"
        assert result["details"]["filename"] == "a.csv"

    def test_to_dict_without_details(self) -> None:
        result = SheetExtractionError("Test error").to_dict()
        assert "details" not in result


class TestInputErrors:
    """Tests for workbook binding errors."""

    def test_empty_input_default_message(self) -> None:
        error = EmptyInputError()
        assert isinstance(error, InputError)
        assert error.error_code == ErrorCode.EMPTY_INPUT
        assert error.message == "No workbook content was supplied"

    def test_unsupported_format_details(self) -> None:
        error = UnsupportedFormatError(
            "Unexpected file format", filename="data.csv", detected_mime="text/csv"
        )
        assert error.filename == "data.csv"
        assert error.detected_mime == "text/csv"
        assert error.details == {"detected_mime": "text/csv", "filename": "data.csv"}

    def test_sheet_bounds_message(self) -> None:
        error = SheetBoundsExceededError(requested=3, available=2)
        assert error.message == "Requested sheet 3 but only 2 sheet(s) are bound"
        assert error.requested == 3
        assert error.available == 2

    def test_hidden_sheet(self) -> None:
        error = HiddenSheetRejectedError(2, "Secret")
        assert error.error_code == ErrorCode.HIDDEN_SHEET_REJECTED
        assert "Sheet 2 ('Secret') is hidden" in error.message
        assert error.details == {"sheet_index": 2, "sheet_name": "Secret"}


class TestFencingErrors:
    """Tests for table boundary errors."""

    def test_start_tag_mismatch_with_comment(self) -> None:
        error = StartTagMismatchError(CellPosition(1, 1, 1), "BEGIN", "OTHER")
        assert isinstance(error, FencingError)
        assert error.message.startswith("Sheet 1, row 1, column A: cannot locate")
        assert "'OTHER'" in error.message
        assert error.details["expected"] == "BEGIN"

    def test_start_tag_mismatch_without_comment(self) -> None:
        error = StartTagMismatchError(CellPosition(1, 0, 2), "BEGIN", None)
        assert "found no comment" in error.message

    def test_empty_result(self) -> None:
        error = EmptyResultError(CellPosition(1, 5, 2))
        assert error.message == "Sheet 1, row 5, column B: the data region is empty"
        assert error.error_code == ErrorCode.EMPTY_RESULT


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_kind_and_expression(self) -> None:
        error = ConfigurationError(
            "Guard 'status' is missing the '==' operator",
            ErrorCode.GUARD_SYNTAX,
            expression="status",
        )
        assert error.kind == ErrorCode.GUARD_SYNTAX
        assert error.expression == "status"
        assert error.details == {"expression": "status"}


class TestValidationError:
    """Tests for ValidationError."""

    def test_message_names_sheet_row_and_column(self) -> None:
        error = ValidationError(
            ErrorCode.VALUE_LIMIT,
            CellPosition(1, 3, 3),
            "status must be A or B",
            value="C",
        )
        assert error.message == "Sheet 1, row 3, column C: status must be A or B"
        assert str(error) == "[E4004] Sheet 1, row 3, column C: status must be A or B"
        assert error.rule == ErrorCode.VALUE_LIMIT
        assert error.details == {"sheet": 1, "row": 3, "column": "C", "value": "C"}

    def test_value_is_optional(self) -> None:
        error = ValidationError(ErrorCode.REQUIRED, CellPosition(1, 2, 1), "required")
        assert "value" not in error.details


class TestDuplicateRecordError:
    """Tests for DuplicateRecordError."""

    def test_message(self) -> None:
        error = DuplicateRecordError(1, "2", "4", "row")
        assert error.message == "Sheet 1: row 2 duplicates row 4"
        assert error.first == "2"
        assert error.second == "4"
        assert error.error_code == ErrorCode.DUPLICATE_RECORD

    def test_inheritance(self) -> None:
        assert issubclass(DuplicateRecordError, SheetExtractionError)
        assert issubclass(ValidationError, SheetExtractionError)
        assert issubclass(ConfigurationError, SheetExtractionError)
