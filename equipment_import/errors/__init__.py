"""Error taxonomy for the import pipeline."""
from equipment_import.errors.exceptions import (
    ImportErrorKind,
    ImportPipelineError,
    SourceFileNotFoundError,
    SourceReadError,
    SourceParseError,
    UnsupportedFormatError,
    EmptyFileError,
    PasswordProtectedError,
    MappingValidationError,
    error_from_dict,
)

__all__ = [
    "ImportErrorKind",
    "ImportPipelineError",
    "SourceFileNotFoundError",
    "SourceReadError",
    "SourceParseError",
    "UnsupportedFormatError",
    "EmptyFileError",
    "PasswordProtectedError",
    "MappingValidationError",
    "error_from_dict",
]
