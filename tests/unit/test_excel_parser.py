"""Tests for the workbook decoder.

.xlsx fixtures are generated with openpyxl; .xls books are mocked at
xlrd.open_workbook since nothing here writes BIFF files.
"""
from datetime import date, datetime, time, timedelta
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import xlrd

from equipment_import.errors import (
    EmptyFileError,
    PasswordProtectedError,
    SourceFileNotFoundError,
    SourceParseError,
    SourceReadError,
)
from equipment_import.models import MAX_ROWS, FileType
from equipment_import.parsers import ExcelDecoder, format_cell_value
from equipment_import.parsers.excel_parser import ENCRYPTION_STREAM_NAMES, OLE2_SIGNATURE


@pytest.fixture
def decoder() -> ExcelDecoder:
    return ExcelDecoder()


def xls_cell(ctype: int, value: object) -> SimpleNamespace:
    return SimpleNamespace(ctype=ctype, value=value)


def text(value: str) -> SimpleNamespace:
    return xls_cell(xlrd.XL_CELL_TEXT, value)


def number(value: float) -> SimpleNamespace:
    return xls_cell(xlrd.XL_CELL_NUMBER, value)


def mock_xls_book(rows, datemode: int = 0) -> MagicMock:
    """Build a stand-in for an xlrd Book whose first sheet holds rows."""
    sheet = MagicMock()
    sheet.name = "Sheet1"
    sheet.nrows = len(rows)
    sheet.row.side_effect = lambda index: rows[index]

    book = MagicMock()
    book.nsheets = 1
    book.datemode = datemode
    book.sheet_by_index.return_value = sheet
    return book


class TestFormatCellValue:
    """Typed value to display string coercion."""

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        ("Studio X50", "Studio X50"),
        ("", ""),
        (100.0, "100"),
        (2500.0, "2500"),
        (99.5, "99.50"),
        (0.125, "0.12"),
        (42, "42"),
        (-7, "-7"),
        (True, "true"),
        (False, "false"),
        (datetime(2024, 3, 1), "2024-03-01"),
        (datetime(2024, 3, 1, 14, 30), "2024-03-01T14:30:00"),
        (date(2024, 3, 1), "2024-03-01"),
        (time(9, 15), "09:15:00"),
        (timedelta(hours=1, minutes=30), "1:30:00"),
    ])
    def test_coercion(self, value, expected):
        assert format_cell_value(value) == expected

    def test_error_cells_are_marked(self):
        assert format_cell_value("#DIV/0!", is_error=True) == "ERROR: #DIV/0!"

    def test_empty_error_cell_is_empty(self):
        assert format_cell_value(None, is_error=True) == ""


class TestExcelDecoderXlsx:
    """Decoding .xlsx workbooks."""

    def test_typed_cells(self, decoder: ExcelDecoder, write_workbook):
        path = write_workbook("catalog.xlsx", [
            ["Manufacturer", "Model", "Cost", "Qty", "Active", "Released"],
            ["Poly", "Studio X50", 2500.0, 3, True, datetime(2024, 3, 1)],
            ["Cisco", "Room Kit", 99.5, 1, False, datetime(2023, 11, 20, 12, 0)],
        ])

        parsed = decoder.decode(path)

        assert parsed.file_name == "catalog.xlsx"
        assert parsed.file_type == FileType.XLSX
        assert parsed.headers == ["Manufacturer", "Model", "Cost", "Qty", "Active", "Released"]
        assert parsed.rows[0].cells == ["Poly", "Studio X50", "2500", "3", "true", "2024-03-01"]
        assert parsed.rows[1].cells == [
            "Cisco", "Room Kit", "99.50", "1", "false", "2023-11-20T12:00:00",
        ]
        assert [row.row_number for row in parsed.rows] == [2, 3]
        assert parsed.total_rows == 3
        assert parsed.truncated is False

    def test_error_cells_are_kept_as_marked_strings(self, decoder: ExcelDecoder, write_workbook):
        path = write_workbook("errors.xlsx", [
            ["Manufacturer", "Cost"],
            ["Poly", "#DIV/0!"],
        ])

        parsed = decoder.decode(path)

        assert parsed.rows[0].cells == ["Poly", "ERROR: #DIV/0!"]

    def test_blank_rows_are_dropped_but_counted(self, decoder: ExcelDecoder, write_workbook):
        path = write_workbook("gaps.xlsx", [
            ["Manufacturer", "Model"],
            ["Poly", "X50"],
            None,
            ["Cisco", "Room Kit"],
        ])

        parsed = decoder.decode(path)

        assert [row.row_number for row in parsed.rows] == [2, 4]
        assert parsed.total_rows == 4

    def test_rows_beyond_cap_are_truncated(self, decoder: ExcelDecoder, write_workbook):
        path = write_workbook(
            "large.xlsx",
            [["Manufacturer", "Model"]] + [["Brand", str(i)] for i in range(MAX_ROWS + 1)],
        )

        parsed = decoder.decode(path)

        assert parsed.truncated is True
        assert len(parsed.rows) == MAX_ROWS
        assert parsed.rows[-1].row_number == MAX_ROWS + 1
        assert parsed.total_rows == MAX_ROWS + 2

    def test_header_only_sheet_is_empty(self, decoder: ExcelDecoder, write_workbook):
        path = write_workbook("header_only.xlsx", [["Manufacturer", "Model", "SKU", "Cost"]])

        with pytest.raises(EmptyFileError):
            decoder.decode(path)

    def test_empty_sheet_is_empty(self, decoder: ExcelDecoder, write_workbook):
        path = write_workbook("empty.xlsx", [])

        with pytest.raises(EmptyFileError):
            decoder.decode(path)

    def test_only_first_sheet_is_read(self, decoder: ExcelDecoder, tmp_path: Path):
        from openpyxl import Workbook

        wb = Workbook()
        first = wb.active
        first.append(["Manufacturer"])
        first.append(["Poly"])
        second = wb.create_sheet("Other")
        second.append(["Ignored"])
        second.append(["Row"])
        path = tmp_path / "two_sheets.xlsx"
        wb.save(path)
        wb.close()

        parsed = decoder.decode(path)

        assert parsed.headers == ["Manufacturer"]
        assert parsed.rows[0].cells == ["Poly"]

    def test_missing_file(self, decoder: ExcelDecoder, tmp_path: Path):
        with pytest.raises(SourceFileNotFoundError):
            decoder.decode(tmp_path / "missing.xlsx")

    def test_encrypted_container_is_password_protected(self, decoder: ExcelDecoder, tmp_path: Path):
        path = tmp_path / "locked.xlsx"
        path.write_bytes(OLE2_SIGNATURE + b"\x00" * 504 + ENCRYPTION_STREAM_NAMES[0] + b"\x00" * 64)

        with pytest.raises(PasswordProtectedError) as exc_info:
            decoder.decode(path)

        assert "password" in exc_info.value.user_message.lower()

    def test_renamed_legacy_workbook_is_a_read_error(self, decoder: ExcelDecoder, tmp_path: Path):
        path = tmp_path / "legacy.xlsx"
        path.write_bytes(OLE2_SIGNATURE + b"\x00" * 504)

        with pytest.raises(SourceReadError):
            decoder.decode(path)

    def test_not_a_workbook_is_a_read_error(self, decoder: ExcelDecoder, tmp_path: Path):
        path = tmp_path / "garbage.xlsx"
        path.write_bytes(b"this is not a zip archive")

        with pytest.raises(SourceReadError):
            decoder.decode(path)

    @patch("equipment_import.parsers.excel_parser.load_workbook")
    def test_password_message_from_open_failure(self, mock_load, decoder: ExcelDecoder, tmp_path: Path):
        path = tmp_path / "locked.xlsx"
        path.write_bytes(b"PK\x03\x04")
        mock_load.side_effect = Exception("Workbook is encrypted")

        with pytest.raises(PasswordProtectedError):
            decoder.decode(path)


class TestExcelDecoderXls:
    """Decoding legacy .xls workbooks through xlrd."""

    def test_typed_cells(self, decoder: ExcelDecoder, tmp_path: Path):
        book = mock_xls_book([
            [text("Manufacturer"), text("Cost"), text("Released"), text("In stock"), text("Check")],
            [
                text("Poly"),
                number(2500.0),
                xls_cell(xlrd.XL_CELL_DATE, 45352.0),
                xls_cell(xlrd.XL_CELL_BOOLEAN, 1),
                xls_cell(xlrd.XL_CELL_ERROR, 0x07),
            ],
            [xls_cell(xlrd.XL_CELL_EMPTY, ""), xls_cell(xlrd.XL_CELL_BLANK, "")],
            [text("Cisco"), number(99.5)],
        ])

        with patch.object(xlrd, "open_workbook", return_value=book) as mock_open:
            parsed = decoder.decode(tmp_path / "legacy.xls")

        mock_open.assert_called_once()
        assert parsed.file_type == FileType.XLS
        assert parsed.headers == ["Manufacturer", "Cost", "Released", "In stock", "Check"]
        assert parsed.rows[0].cells == ["Poly", "2500", "2024-03-01", "true", "ERROR: #DIV/0!"]
        assert parsed.rows[1].row_number == 4
        assert parsed.rows[1].cells == ["Cisco", "99.50"]
        assert parsed.total_rows == 4
        book.release_resources.assert_called_once()

    def test_book_is_released_on_failure(self, decoder: ExcelDecoder, tmp_path: Path):
        book = mock_xls_book([[text("Manufacturer")]])

        with patch.object(xlrd, "open_workbook", return_value=book):
            with pytest.raises(EmptyFileError):
                decoder.decode(tmp_path / "header_only.xls")

        book.release_resources.assert_called_once()

    def test_unexpected_sheet_failure_is_a_parse_error(self, decoder: ExcelDecoder, tmp_path: Path):
        book = mock_xls_book([[text("Manufacturer")], [text("Poly")]])
        book.sheet_by_index.return_value.row.side_effect = RuntimeError("corrupt record")

        with patch.object(xlrd, "open_workbook", return_value=book):
            with pytest.raises(SourceParseError):
                decoder.decode(tmp_path / "corrupt.xls")

    @pytest.mark.parametrize("message,expected", [
        ("Workbook is encrypted", PasswordProtectedError),
        ("No such file or directory: 'legacy.xls'", SourceFileNotFoundError),
        ("Unsupported format, or corrupt file", SourceReadError),
    ])
    def test_open_failures_are_classified(self, decoder: ExcelDecoder, tmp_path: Path, message, expected):
        with patch.object(xlrd, "open_workbook", side_effect=xlrd.XLRDError(message)):
            with pytest.raises(expected):
                decoder.decode(tmp_path / "legacy.xls")
