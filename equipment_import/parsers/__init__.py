"""Decoders for supported spreadsheet formats."""
from equipment_import.parsers.base_parser import Decoder
from equipment_import.parsers.csv_parser import CsvDecoder
from equipment_import.parsers.excel_parser import ExcelDecoder, format_cell_value
from equipment_import.parsers.parser_registry import (
    detect_file_type,
    get_decoder,
    get_supported_extensions,
    is_supported,
    parse_file,
)

__all__ = [
    "Decoder",
    "CsvDecoder",
    "ExcelDecoder",
    "format_cell_value",
    "detect_file_type",
    "get_decoder",
    "get_supported_extensions",
    "is_supported",
    "parse_file",
]
