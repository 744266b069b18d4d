"""Equipment catalog import pipeline.

Turns an uploaded CSV or Excel file into a ParsedFile, suggests a column
mapping for its headers, and validates each row against that mapping.
"""
from equipment_import.errors import (
    EmptyFileError,
    ImportErrorKind,
    ImportPipelineError,
    MappingValidationError,
    PasswordProtectedError,
    SourceFileNotFoundError,
    SourceParseError,
    SourceReadError,
    UnsupportedFormatError,
)
from equipment_import.models import (
    MAX_ROWS,
    PREVIEW_ROWS,
    CatalogMatch,
    ColumnMapping,
    EquipmentField,
    FileType,
    HeaderSuggestion,
    ImportSummary,
    MatchType,
    ParsedFile,
    ParsedRow,
    ValidationResult,
    ValidationStatus,
)
from equipment_import.parsers import parse_file
from equipment_import.services import (
    apply_catalog_matches,
    calculate_import_summary,
    detect_headers,
    mappings_from_suggestions,
    validate_rows,
)

__version__ = "0.1.0"

__all__ = [
    "parse_file",
    "detect_headers",
    "validate_rows",
    "mappings_from_suggestions",
    "apply_catalog_matches",
    "calculate_import_summary",
    "MAX_ROWS",
    "PREVIEW_ROWS",
    "FileType",
    "ParsedRow",
    "ParsedFile",
    "EquipmentField",
    "ColumnMapping",
    "HeaderSuggestion",
    "ValidationStatus",
    "MatchType",
    "ValidationResult",
    "CatalogMatch",
    "ImportSummary",
    "ImportErrorKind",
    "ImportPipelineError",
    "SourceFileNotFoundError",
    "SourceReadError",
    "SourceParseError",
    "UnsupportedFormatError",
    "EmptyFileError",
    "PasswordProtectedError",
    "MappingValidationError",
]
