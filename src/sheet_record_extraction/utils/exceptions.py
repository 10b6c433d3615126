"""Centralized exception classes for sheet record extraction.

This module provides a hierarchy of custom exceptions with error codes and
structured error details for consistent error handling throughout the
library.

Exception Hierarchy:
    SheetExtractionError (base)
    ├── InputError
    │   ├── EmptyInputError
    │   ├── UnsupportedFormatError
    │   ├── SheetBoundsExceededError
    │   └── HiddenSheetRejectedError
    ├── FencingError
    │   ├── StartTagMismatchError
    │   └── EmptyResultError
    ├── ConfigurationError
    ├── ValidationError
    └── DuplicateRecordError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.

Input, fencing, validation and duplicate errors describe malformed input data
and carry messages meant to be shown to end users verbatim. Configuration
errors describe a mistake in the rule declarations of a record type.
"""

from enum import Enum
from typing import Any

from sheet_record_extraction.utils.coordinates import CellPosition


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the library.

    Error codes are grouped by category:
    - E1xxx: Input/workbook errors
    - E2xxx: Table fencing errors
    - E3xxx: Rule declaration errors
    - E4xxx: Field validation errors
    - E5xxx: Duplicate data errors
    - E9xxx: Internal/unexpected errors
    """

    # Input errors (E1xxx)
    EMPTY_INPUT = "E1001"
    UNSUPPORTED_FORMAT = "E1002"
    SHEET_BOUNDS_EXCEEDED = "E1003"
    HIDDEN_SHEET_REJECTED = "E1004"

    # Fencing errors (E2xxx)
    START_TAG_MISMATCH = "E2001"
    EMPTY_RESULT = "E2002"

    # Configuration errors (E3xxx)
    GUARD_SYNTAX = "E3001"
    TRANSFORM_SYNTAX = "E3002"
    SCHEMA_DECLARATION = "E3003"
    UNSUPPORTED_TARGET_TYPE = "E3004"

    # Validation errors (E4xxx)
    REQUIRED = "E4001"
    DATE_FORMAT = "E4002"
    NUMBER_FORMAT = "E4003"
    VALUE_LIMIT = "E4004"

    # Duplicate errors (E5xxx)
    DUPLICATE_RECORD = "E5001"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class SheetExtractionError(Exception):
    """Base exception for all sheet record extraction errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Input Errors (E1xxx)
# =============================================================================


class InputError(SheetExtractionError):
    """Base class for errors raised while binding a workbook."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(message, error_code, details)
        self.filename = filename


class EmptyInputError(InputError):
    """Raised when no workbook content was supplied."""

    def __init__(self, message: str = "No workbook content was supplied") -> None:
        super().__init__(message, ErrorCode.EMPTY_INPUT)


class UnsupportedFormatError(InputError):
    """Raised when the file extension or container signature is not a workbook."""

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        detected_mime: str | None = None,
    ) -> None:
        """Initialize with format information.

        Args:
            message: Error message.
            filename: Name of the rejected file, when known.
            detected_mime: MIME type reported by content sniffing, if any.
        """
        details: dict[str, Any] = {}
        if detected_mime:
            details["detected_mime"] = detected_mime
        super().__init__(message, ErrorCode.UNSUPPORTED_FORMAT, filename, details)
        self.detected_mime = detected_mime


class SheetBoundsExceededError(InputError):
    """Raised when a sheet index or requested sheet count is out of range."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"Requested sheet {requested} but only {available} sheet(s) are bound",
            ErrorCode.SHEET_BOUNDS_EXCEEDED,
            details={"requested": requested, "available": available},
        )
        self.requested = requested
        self.available = available


class HiddenSheetRejectedError(InputError):
    """Raised when one of the sheets to bind is hidden."""

    def __init__(self, sheet_index: int, sheet_name: str) -> None:
        super().__init__(
            f"Sheet {sheet_index} ('{sheet_name}') is hidden; "
            "hidden sheets are not allowed",
            ErrorCode.HIDDEN_SHEET_REJECTED,
            details={"sheet_index": sheet_index, "sheet_name": sheet_name},
        )
        self.sheet_index = sheet_index
        self.sheet_name = sheet_name


# =============================================================================
# Fencing Errors (E2xxx)
# =============================================================================


class FencingError(SheetExtractionError):
    """Base class for errors about the boundaries of a table region."""


class StartTagMismatchError(FencingError):
    """Raised when the header comment does not carry the configured start tag."""

    def __init__(
        self, position: CellPosition, expected: str, found: str | None
    ) -> None:
        super().__init__(
            f"{position.describe()}: cannot locate the table start "
            f"(expected start tag '{expected}', found "
            f"{repr(found) if found is not None else 'no comment'})",
            ErrorCode.START_TAG_MISMATCH,
            details={
                **position.to_dict(),
                "expected": expected,
                "found": found,
            },
        )
        self.position = position


class EmptyResultError(FencingError):
    """Raised when a table region yields no record at all."""

    def __init__(self, position: CellPosition) -> None:
        super().__init__(
            f"{position.describe()}: the data region is empty",
            ErrorCode.EMPTY_RESULT,
            details=position.to_dict(),
        )
        self.position = position


# =============================================================================
# Configuration Errors (E3xxx)
# =============================================================================


class ConfigurationError(SheetExtractionError):
    """Raised when the rule declarations of a record type are malformed.

    These indicate a programming mistake and are not recoverable for a call.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if expression is not None:
            details["expression"] = expression
        super().__init__(message, error_code, details)
        self.expression = expression

    @property
    def kind(self) -> ErrorCode:
        return self.error_code


# =============================================================================
# Validation Errors (E4xxx)
# =============================================================================


class ValidationError(SheetExtractionError):
    """Raised when a cell value breaks a field rule.

    Always carries the sheet/row/column of the offending cell.
    """

    def __init__(
        self,
        rule: ErrorCode,
        position: CellPosition,
        reason: str,
        value: str | None = None,
    ) -> None:
        """Initialize with cell context.

        Args:
            rule: The violated rule (one of the E4xxx codes).
            position: Location of the offending cell.
            reason: Rule message declared on the field.
            value: The offending canonical value.
        """
        details: dict[str, Any] = position.to_dict()
        if value is not None:
            details["value"] = value
        super().__init__(f"{position.describe()}: {reason}", rule, details)
        self.rule = rule
        self.position = position
        self.reason = reason
        self.value = value


# =============================================================================
# Duplicate Errors (E5xxx)
# =============================================================================


class DuplicateRecordError(SheetExtractionError):
    """Raised when duplicate checking finds two equal records."""

    def __init__(
        self,
        sheet_index: int,
        first: str,
        second: str,
        unit: str,
    ) -> None:
        """Initialize with both origin positions.

        Args:
            sheet_index: 1-based sheet index.
            first: Label of the earlier record (row number or column label).
            second: Label of the new record.
            unit: "row" or "column".
        """
        super().__init__(
            f"Sheet {sheet_index}: {unit} {first} duplicates {unit} {second}",
            ErrorCode.DUPLICATE_RECORD,
            details={
                "sheet": sheet_index,
                "unit": unit,
                "first": first,
                "second": second,
            },
        )
        self.sheet_index = sheet_index
        self.first = first
        self.second = second
        self.unit = unit
