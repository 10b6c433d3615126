"""Utilities package for sheet record extraction.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
- Spreadsheet coordinates and column labels (coordinates.py)
- Date and number display patterns (patterns.py)
"""

from sheet_record_extraction.utils.coordinates import (
    CellPosition,
    column_index,
    column_label,
)
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
from sheet_record_extraction.utils.logging import (
    LogContext,
    StructuredLogger,
    configure_logging,
    get_logger,
    get_session_id,
    set_session_id,
)

__all__ = [
    # Coordinates
    "CellPosition",
    "column_index",
    "column_label",
    # Exceptions
    "ConfigurationError",
    "DuplicateRecordError",
    "EmptyInputError",
    "EmptyResultError",
    "ErrorCode",
    "FencingError",
    "HiddenSheetRejectedError",
    "InputError",
    "SheetBoundsExceededError",
    "SheetExtractionError",
    "StartTagMismatchError",
    "UnsupportedFormatError",
    "ValidationError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "get_session_id",
    "set_session_id",
]
