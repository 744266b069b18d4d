"""Custom exception hierarchy for equipment import errors.

The set of error kinds is closed: every exception class below maps to exactly
one ImportErrorKind, and each carries nothing but a human-readable message.
That keeps the payload crossing the application boundary stable.
"""
from enum import Enum
from typing import Dict


class ImportErrorKind(str, Enum):
    """Wire-level tag for each import failure."""
    FILE_NOT_FOUND = "FileNotFound"
    READ_ERROR = "ReadError"
    PARSE_ERROR = "ParseError"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    EMPTY_FILE = "EmptyFile"
    PASSWORD_PROTECTED = "PasswordProtected"
    VALIDATION_ERROR = "ValidationError"


class ImportPipelineError(Exception):
    """Base exception for all import pipeline errors."""

    kind: ImportErrorKind

    def __init__(self, message: str = ""):
        """Initialize error with message."""
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.user_message

    @property
    def user_message(self) -> str:
        """Blocking message suitable for showing to the person importing."""
        return self.message

    def to_dict(self) -> Dict[str, str]:
        """Serialize to the tagged wire form."""
        return {"type": self.kind.value, "message": self.message}


class SourceFileNotFoundError(ImportPipelineError):
    """Raised when the source path does not resolve to a file."""
    kind = ImportErrorKind.FILE_NOT_FOUND

    @property
    def user_message(self) -> str:
        return f"File not found: {self.message}"


class SourceReadError(ImportPipelineError):
    """Raised on I/O failures other than a missing file."""
    kind = ImportErrorKind.READ_ERROR

    @property
    def user_message(self) -> str:
        return f"Failed to read file: {self.message}"


class SourceParseError(ImportPipelineError):
    """Raised when the file's structure cannot be decoded."""
    kind = ImportErrorKind.PARSE_ERROR

    @property
    def user_message(self) -> str:
        return f"Failed to parse file: {self.message}"


class UnsupportedFormatError(ImportPipelineError):
    """Raised when no decoder is registered for the file extension."""
    kind = ImportErrorKind.UNSUPPORTED_FORMAT

    @property
    def user_message(self) -> str:
        return self.message


class EmptyFileError(ImportPipelineError):
    """Raised when a file has no headers or no usable data rows."""
    kind = ImportErrorKind.EMPTY_FILE

    def __init__(self, message: str = "No data found in file"):
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return "The file is empty or contains no data."


class PasswordProtectedError(ImportPipelineError):
    """Raised when a workbook is encrypted."""
    kind = ImportErrorKind.PASSWORD_PROTECTED

    def __init__(self, message: str = "Password protected file"):
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return "This file is password protected. Please remove the password and try again."


class MappingValidationError(ImportPipelineError):
    """Raised when the pipeline is called with malformed rows or mappings.

    Never raised for bad row data; that is reported per row instead.
    """
    kind = ImportErrorKind.VALIDATION_ERROR

    @property
    def user_message(self) -> str:
        return f"Validation error: {self.message}"


ERROR_CLASSES = {
    ImportErrorKind.FILE_NOT_FOUND: SourceFileNotFoundError,
    ImportErrorKind.READ_ERROR: SourceReadError,
    ImportErrorKind.PARSE_ERROR: SourceParseError,
    ImportErrorKind.UNSUPPORTED_FORMAT: UnsupportedFormatError,
    ImportErrorKind.EMPTY_FILE: EmptyFileError,
    ImportErrorKind.PASSWORD_PROTECTED: PasswordProtectedError,
    ImportErrorKind.VALIDATION_ERROR: MappingValidationError,
}

if set(ERROR_CLASSES) != set(ImportErrorKind):
    raise RuntimeError("Every ImportErrorKind needs an exception class")


def error_from_dict(payload: Dict[str, str]) -> ImportPipelineError:
    """Rebuild an exception from its wire form.

    Raises:
        ValueError: If the payload's type tag is unknown
    """
    kind = ImportErrorKind(payload["type"])
    error_class = ERROR_CLASSES[kind]
    message = payload.get("message")
    if message is None:
        return error_class()
    return error_class(message)
