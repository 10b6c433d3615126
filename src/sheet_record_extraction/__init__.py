"""Sheet Record Extraction - typed records from Excel tables."""

from sheet_record_extraction.extractor import SheetRecordExtractor, to_dataframe
from sheet_record_extraction.models import ExtractionConfig, Orientation
from sheet_record_extraction.rules import (
    DateFormat,
    DynamicRank,
    Ignored,
    NumberFormat,
    Required,
    Transform,
    ValueLimit,
)

__all__ = [
    "DateFormat",
    "DynamicRank",
    "ExtractionConfig",
    "Ignored",
    "NumberFormat",
    "Orientation",
    "Required",
    "SheetRecordExtractor",
    "Transform",
    "ValueLimit",
    "to_dataframe",
]
__version__ = "0.1.0"
