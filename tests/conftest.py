"""Pytest configuration and fixtures for the test suite.

Provides:
- A clean settings cache per test, so environment changes take effect
- Helpers for writing source files into tmp_path
"""
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from equipment_import.config import get_settings


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Run every test against default settings."""
    for name in (
        "EQUIPMENT_IMPORT_LOG_LEVEL",
        "EQUIPMENT_IMPORT_ENVIRONMENT",
        "EQUIPMENT_IMPORT_CSV_ENCODING",
        "EQUIPMENT_IMPORT_CSV_FALLBACK_ENCODING",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_text(tmp_path: Path) -> Callable[..., Path]:
    """Write text content to a file under tmp_path and return its path."""

    def _write(name: str, content: str, encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding=encoding, newline="")
        return path

    return _write


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Write rows to the first sheet of a new .xlsx workbook.

    Rows given as None are left empty in the sheet.
    """
    from openpyxl import Workbook

    def _write(name: str, rows: List[Optional[List[object]]]) -> Path:
        wb = Workbook()
        ws = wb.active
        for row_index, row in enumerate(rows, start=1):
            if row is None:
                continue
            for col_index, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=row_index, column=col_index, value=value)
        path = tmp_path / name
        wb.save(path)
        wb.close()
        return path

    return _write


@pytest.fixture
def equipment_headers() -> List[str]:
    return ["Manufacturer", "Model", "SKU", "Cost"]
