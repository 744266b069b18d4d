"""Decoder interface and row assembly shared by every source format."""
from itertools import islice
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Union, runtime_checkable

from equipment_import.errors.exceptions import EmptyFileError
from equipment_import.models.parsed_file import MAX_ROWS, FileType, ParsedFile, ParsedRow

PathLike = Union[str, Path]

# First data row number; the header occupies row 1
FIRST_DATA_ROW = 2


@runtime_checkable
class Decoder(Protocol):
    """Capability interface for turning one file format into a ParsedFile.

    Implementations must either return a complete ParsedFile or raise one of
    the ImportPipelineError subclasses; a partial result is never returned.
    Decoders hold no state between calls.
    """

    def decode(self, path: PathLike) -> ParsedFile:
        """Decode the file at path.

        Raises:
            SourceFileNotFoundError: If the path does not resolve
            SourceReadError: On any other I/O failure
            SourceParseError: If the file structure is unreadable
            EmptyFileError: If there are no headers or no non-blank data rows
            PasswordProtectedError: If a workbook is encrypted
        """
        ...


def is_blank_row(cells: List[str]) -> bool:
    """True when every cell is empty after trimming."""
    return all(not cell.strip() for cell in cells)


def assemble_rows(records: Iterable[Optional[List[str]]]) -> List[ParsedRow]:
    """Number data records and drop blank ones.

    Only the first MAX_ROWS records are examined. A record of None marks a
    malformed source row: it keeps its row number slot but is skipped.

    Args:
        records: Data records after the header, in source order

    Returns:
        Non-blank rows numbered from 2
    """
    rows: List[ParsedRow] = []
    for row_number, cells in enumerate(islice(records, MAX_ROWS), start=FIRST_DATA_ROW):
        if cells is None or is_blank_row(cells):
            continue
        rows.append(ParsedRow(row_number=row_number, cells=cells))
    return rows


def build_parsed_file(
    file_name: str,
    file_type: FileType,
    headers: List[str],
    rows: List[ParsedRow],
    total_rows: int,
) -> ParsedFile:
    """Assemble the final ParsedFile, refusing files with nothing to import.

    Args:
        total_rows: Source row count including the header and blank rows

    Raises:
        EmptyFileError: If headers or rows are empty
    """
    if not headers or not rows:
        raise EmptyFileError()
    return ParsedFile(
        file_name=file_name,
        file_type=file_type,
        headers=headers,
        rows=rows,
        total_rows=total_rows,
        truncated=total_rows > MAX_ROWS + 1,
    )


def file_name_of(path: Path, default: str) -> str:
    return path.name or default
