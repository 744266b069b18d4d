"""Delimited text decoder (CSV and TSV)."""
import csv
from pathlib import Path
from typing import IO, Iterator, List, Optional, Tuple

import structlog

from equipment_import.config import get_settings
from equipment_import.errors.exceptions import (
    EmptyFileError,
    SourceFileNotFoundError,
    SourceParseError,
    SourceReadError,
)
from equipment_import.models.parsed_file import FileType, ParsedFile
from equipment_import.parsers.base_parser import (
    PathLike,
    assemble_rows,
    build_parsed_file,
    file_name_of,
    is_blank_row,
)

logger = structlog.get_logger(__name__)

DELIMITERS = {
    ".csv": ",",
    ".tsv": "\t",
}


class CsvDecoder:
    """Decoder for delimited text files.

    Reads the file twice: a counting pass establishes the true row total
    (and the encoding that works), then a second pass emits at most
    MAX_ROWS data rows. Nothing beyond the capped rows is held in memory.

    Features:
    - Ragged rows kept at their source width
    - Every header and cell trimmed
    - Malformed records skipped rather than failing the file
    - latin-1 fallback when the file is not valid UTF-8
    """

    def __init__(
        self,
        delimiter: Optional[str] = None,
        encoding: Optional[str] = None,
        fallback_encoding: Optional[str] = None,
    ):
        """Initialize CSV decoder.

        Args:
            delimiter: Field delimiter; derived from the extension when None
            encoding: Primary text encoding (defaults to settings)
            fallback_encoding: Encoding retried on decode failure (defaults to settings)
        """
        settings = get_settings()
        self._delimiter = delimiter
        self._encoding = encoding or settings.csv_encoding
        self._fallback_encoding = fallback_encoding or settings.csv_fallback_encoding

    def decode(self, path: PathLike) -> ParsedFile:
        """Decode a delimited text file into a ParsedFile.

        Raises:
            SourceFileNotFoundError: If the file does not exist
            SourceReadError: If the file cannot be read
            SourceParseError: If the header record is malformed
            EmptyFileError: If there are no headers or no non-blank data rows
        """
        path = Path(path)
        delimiter = self._delimiter or DELIMITERS.get(path.suffix.lower(), ",")
        log = logger.bind(file_path=str(path), delimiter=delimiter)

        encoding = self._encoding
        try:
            leading_blank, record_count = self._count_records(path, encoding, delimiter)
        except UnicodeDecodeError as e:
            log.warning(
                "csv_decode_failed_trying_fallback",
                encoding=encoding,
                fallback_encoding=self._fallback_encoding,
                error=str(e),
            )
            encoding = self._fallback_encoding
            try:
                leading_blank, record_count = self._count_records(path, encoding, delimiter)
            except UnicodeDecodeError as fallback_error:
                raise SourceReadError(
                    f"Cannot decode file as {self._encoding} or {encoding}"
                ) from fallback_error
        total_rows = record_count - leading_blank

        with self._open(path, encoding) as handle:
            reader = csv.reader(handle, delimiter=delimiter)
            try:
                for _ in range(leading_blank):
                    next(reader)
                header_record = next(reader, None)
            except csv.Error as e:
                raise SourceParseError(f"Malformed header row: {e}") from e
            if not header_record:
                raise EmptyFileError()
            headers = [cell.strip() for cell in header_record]

            try:
                rows = assemble_rows(
                    None if record is None else [cell.strip() for cell in record]
                    for record in _iter_records(reader)
                )
            except UnicodeDecodeError as e:
                raise SourceReadError(f"Cannot decode file as {encoding}: {e}") from e
            except OSError as e:
                raise SourceReadError(str(e)) from e

        parsed = build_parsed_file(
            file_name=file_name_of(path, "unknown.csv"),
            file_type=FileType.CSV,
            headers=headers,
            rows=rows,
            total_rows=total_rows,
        )
        log.info(
            "csv_decode_completed",
            encoding=encoding,
            total_rows=parsed.total_rows,
            returned_rows=len(parsed.rows),
            truncated=parsed.truncated,
        )
        return parsed

    def _open(self, path: Path, encoding: str) -> IO[str]:
        try:
            return open(path, "r", encoding=encoding, newline="")
        except FileNotFoundError as e:
            raise SourceFileNotFoundError(str(path)) from e
        except LookupError as e:
            raise SourceReadError(f"Unknown encoding '{encoding}'") from e
        except OSError as e:
            raise SourceReadError(str(e)) from e

    def _count_records(self, path: Path, encoding: str, delimiter: str) -> Tuple[int, int]:
        """Count the blank records before the header and every record in the file."""
        leading_blank = 0
        record_count = 0
        with self._open(path, encoding) as handle:
            try:
                for record in _iter_records(csv.reader(handle, delimiter=delimiter)):
                    if record_count == leading_blank and record is not None and is_blank_row(record):
                        leading_blank += 1
                    record_count += 1
                return leading_blank, record_count
            except OSError as e:
                raise SourceReadError(str(e)) from e


def _iter_records(reader: Iterator[List[str]]) -> Iterator[Optional[List[str]]]:
    """Yield records from a csv reader, None in place of malformed ones."""
    while True:
        try:
            record = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            logger.debug("csv_malformed_record_skipped", error=str(e))
            yield None
            continue
        yield record
