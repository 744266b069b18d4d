"""Pydantic models for the import pipeline."""

# Row model
from equipment_import.models.parsed_file import (
    MAX_ROWS,
    PREVIEW_ROWS,
    FileType,
    ParsedRow,
    ParsedFile,
)

# Mapping models
from equipment_import.models.mapping import (
    EquipmentField,
    ColumnMapping,
    HeaderSuggestion,
)

# Validation models
from equipment_import.models.validation import (
    ValidationStatus,
    MatchType,
    ValidationResult,
    CatalogMatch,
    ImportSummary,
)

__all__ = [
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
]
