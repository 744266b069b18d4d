"""Pydantic models for the normalized row model produced by decoders."""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Hard cap on data rows returned per file
MAX_ROWS = 10_000

# Rows shown in an import preview; sizing hint only, not enforced here
PREVIEW_ROWS = 100


class FileType(str, Enum):
    """Source format tag of a parsed file."""
    CSV = "csv"
    XLSX = "xlsx"
    XLS = "xls"
    PDF = "pdf"  # reserved, no decoder


WIRE_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class ParsedRow(BaseModel):
    """A single non-blank data row.

    row_number is 1-indexed against the source file with the header on row 1,
    so the first data row is 2. Blank source rows are dropped, which leaves
    gaps in the numbering.
    """

    model_config = WIRE_MODEL_CONFIG

    row_number: int = Field(
        ...,
        ge=1,
        description="Original row number in the source file (1-indexed)"
    )
    cells: List[str] = Field(
        default_factory=list,
        description="Cell values as display strings; width follows the source row"
    )

    def cell(self, index: int) -> str:
        """Return the cell at index, or an empty string past the row's width."""
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return ""


class ParsedFile(BaseModel):
    """A decoded spreadsheet ready for column mapping.

    Invariants are checked on construction: headers are never empty,
    truncated agrees with total_rows, and row numbers strictly increase.
    """

    model_config = WIRE_MODEL_CONFIG

    file_name: str = Field(..., description="Original filename")
    file_type: FileType = Field(..., description="Detected file type")
    headers: List[str] = Field(..., description="Header row, first logical row of the source")
    rows: List[ParsedRow] = Field(default_factory=list, description="Non-blank data rows")
    total_rows: int = Field(
        ...,
        ge=0,
        description="True row count in the source including header and blank rows"
    )
    truncated: bool = Field(..., description="Whether the source exceeded MAX_ROWS data rows")

    @field_validator("headers")
    @classmethod
    def validate_headers_not_empty(cls, v: List[str]) -> List[str]:
        """A parsed file without headers is a construction error."""
        if not v:
            raise ValueError("headers must not be empty")
        return v

    @field_validator("rows")
    @classmethod
    def validate_rows(cls, v: List[ParsedRow]) -> List[ParsedRow]:
        """Enforce the row cap and strictly increasing row numbers."""
        if len(v) > MAX_ROWS:
            raise ValueError(f"rows exceeds MAX_ROWS ({len(v)} > {MAX_ROWS})")
        previous = 0
        for row in v:
            if row.row_number <= previous:
                raise ValueError(
                    f"row numbers must be strictly increasing "
                    f"(row {row.row_number} follows row {previous})"
                )
            previous = row.row_number
        return v

    @model_validator(mode="after")
    def validate_truncation_flag(self) -> "ParsedFile":
        expected = self.total_rows > MAX_ROWS + 1
        if self.truncated != expected:
            raise ValueError(
                f"truncated must be {expected} for total_rows={self.total_rows}"
            )
        return self

    @property
    def data_row_count(self) -> int:
        """Number of non-blank rows returned."""
        return len(self.rows)

    def preview(self, limit: int = PREVIEW_ROWS) -> List[ParsedRow]:
        """First rows for display."""
        return self.rows[:limit]
