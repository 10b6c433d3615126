"""Services for sheet record extraction."""

from sheet_record_extraction.services.format_detector import (
    FormatDetector,
    UnsupportedFormatError,
)
from sheet_record_extraction.services.table_scanner import TableScanner
from sheet_record_extraction.services.workbook_loader import WorkbookLoader

__all__ = ["FormatDetector", "TableScanner", "UnsupportedFormatError", "WorkbookLoader"]
