"""Workbook decoder for .xlsx/.xlsm (openpyxl) and legacy .xls (xlrd).

Only the first worksheet is read. Typed cells are coerced to display
strings so downstream code sees the same row model as for delimited text:

    None / blank          -> ""
    text                  -> verbatim
    100.0                 -> "100"
    99.5                  -> "99.50"
    42                    -> "42"
    True                  -> "true"
    datetime at midnight  -> "2024-03-01"
    other datetimes       -> ISO-8601 ("2024-03-01T14:30:00")
    error cell            -> "ERROR: #DIV/0!"
"""
from datetime import date, datetime, time, timedelta
from itertools import islice
from pathlib import Path
from typing import Any, Iterator, List

import structlog
import xlrd
from openpyxl import load_workbook

from equipment_import.errors.exceptions import (
    EmptyFileError,
    ImportPipelineError,
    PasswordProtectedError,
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

# Encrypted OOXML packages are stored inside an OLE2 compound document that
# carries these streams. A plain legacy .xls shares the signature but not the streams.
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ENCRYPTION_STREAM_NAMES = tuple(
    name.encode("utf-16-le") for name in ("EncryptionInfo", "EncryptedPackage")
)

PASSWORD_MARKERS = ("password", "encrypted")
NOT_FOUND_MARKERS = ("not found", "no such file")

LEGACY_EXTENSIONS = {".xls"}


def format_cell_value(value: Any, is_error: bool = False) -> str:
    """Coerce a typed workbook value to its display string."""
    if value is None:
        return ""
    if is_error:
        return f"ERROR: {value}"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return f"{value:.0f}"
        return f"{value:.2f}"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    return str(value)


class _XlsxSheet:
    """First worksheet of an OOXML workbook, opened read-only."""

    def __init__(self, workbook: Any):
        self._workbook = workbook
        if not workbook.worksheets:
            raise EmptyFileError("Workbook has no worksheets")
        self._worksheet = workbook.worksheets[0]
        self.name = self._worksheet.title

    def iter_rows(self) -> Iterator[List[str]]:
        for row in self._worksheet.iter_rows():
            yield [
                format_cell_value(cell.value, is_error=cell.data_type == "e")
                for cell in row
            ]

    def close(self) -> None:
        self._workbook.close()


class _XlsSheet:
    """First sheet of a legacy BIFF workbook."""

    def __init__(self, book: Any):
        self._book = book
        if book.nsheets == 0:
            raise EmptyFileError("Workbook has no worksheets")
        try:
            self._sheet = book.sheet_by_index(0)
        except xlrd.XLRDError as e:
            raise SourceParseError(str(e)) from e
        self.name = self._sheet.name

    def iter_rows(self) -> Iterator[List[str]]:
        for index in range(self._sheet.nrows):
            yield [self._format_cell(cell) for cell in self._sheet.row(index)]

    def _format_cell(self, cell: Any) -> str:
        ctype = cell.ctype
        if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return ""
        if ctype == xlrd.XL_CELL_ERROR:
            code = xlrd.error_text_from_code.get(cell.value, f"#ERR{cell.value}")
            return format_cell_value(code, is_error=True)
        if ctype == xlrd.XL_CELL_BOOLEAN:
            return format_cell_value(bool(cell.value))
        if ctype == xlrd.XL_CELL_DATE:
            try:
                return format_cell_value(xlrd.xldate_as_datetime(cell.value, self._book.datemode))
            except (xlrd.XLDateError, ValueError, OverflowError):
                return format_cell_value(cell.value)
        return format_cell_value(cell.value)

    def close(self) -> None:
        self._book.release_resources()


class ExcelDecoder:
    """Decoder for workbook files.

    Like the CSV decoder it makes two passes: the first locates the used
    range (first to last non-blank row) to get the true row total, the
    second emits the header and at most MAX_ROWS data rows. Row numbers are
    counted from the header row, which is always row 1.
    """

    def decode(self, path: PathLike) -> ParsedFile:
        """Decode the first worksheet of a workbook.

        Raises:
            SourceFileNotFoundError: If the file does not exist
            SourceReadError: If the workbook cannot be opened
            SourceParseError: If the worksheet cannot be read
            EmptyFileError: If the sheet is empty or has no non-blank data rows
            PasswordProtectedError: If the workbook is encrypted
        """
        path = Path(path)
        legacy = path.suffix.lower() in LEGACY_EXTENSIONS
        file_type = FileType.XLS if legacy else FileType.XLSX
        log = logger.bind(file_path=str(path), file_type=file_type.value)

        sheet = self._open_xls(path, log) if legacy else self._open_xlsx(path, log)
        try:
            parsed = self._decode_sheet(sheet, path, file_type)
        except ImportPipelineError:
            raise
        except Exception as e:
            log.error("worksheet_read_failed", error=str(e))
            raise SourceParseError(str(e)) from e
        finally:
            sheet.close()

        log.info(
            "workbook_decode_completed",
            sheet_name=sheet.name,
            total_rows=parsed.total_rows,
            returned_rows=len(parsed.rows),
            truncated=parsed.truncated,
        )
        return parsed

    def _decode_sheet(self, sheet: Any, path: Path, file_type: FileType) -> ParsedFile:
        first = last = None
        for index, cells in enumerate(sheet.iter_rows()):
            if not is_blank_row(cells):
                if first is None:
                    first = index
                last = index
        if first is None:
            raise EmptyFileError()
        total_rows = last - first + 1

        records = islice(sheet.iter_rows(), first, last + 1)
        headers = next(records, [])
        if not headers:
            raise EmptyFileError()
        rows = assemble_rows(records)

        return build_parsed_file(
            file_name=file_name_of(path, "unknown.xlsx"),
            file_type=file_type,
            headers=headers,
            rows=rows,
            total_rows=total_rows,
        )

    def _open_xlsx(self, path: Path, log: Any) -> _XlsxSheet:
        if _is_encrypted_package(path):
            log.warning("workbook_encrypted", reason="ole2_container")
            raise PasswordProtectedError()
        try:
            workbook = load_workbook(filename=str(path), read_only=True, data_only=True)
        except Exception as e:
            raise _classify_open_error(path, e, log) from e
        try:
            return _XlsxSheet(workbook)
        except ImportPipelineError:
            workbook.close()
            raise

    def _open_xls(self, path: Path, log: Any) -> _XlsSheet:
        try:
            book = xlrd.open_workbook(str(path), on_demand=True, ragged_rows=True)
        except Exception as e:
            raise _classify_open_error(path, e, log) from e
        try:
            return _XlsSheet(book)
        except ImportPipelineError:
            book.release_resources()
            raise


def _is_encrypted_package(path: Path) -> bool:
    try:
        with open(path, "rb") as handle:
            if handle.read(len(OLE2_SIGNATURE)) != OLE2_SIGNATURE:
                return False
            content = handle.read()
    except OSError:
        return False
    return any(name in content for name in ENCRYPTION_STREAM_NAMES)


def _classify_open_error(path: Path, error: Exception, log: Any) -> ImportPipelineError:
    """Map a workbook open failure onto the import error taxonomy by its message."""
    message = str(error)
    lowered = message.lower()
    log.warning("workbook_open_failed", error=message, error_type=type(error).__name__)
    if any(marker in lowered for marker in PASSWORD_MARKERS):
        return PasswordProtectedError()
    if isinstance(error, FileNotFoundError) or any(marker in lowered for marker in NOT_FOUND_MARKERS):
        return SourceFileNotFoundError(str(path))
    return SourceReadError(message)
