"""Format dispatch: choose a decoder from the file extension."""
from pathlib import Path
from typing import Callable, Dict, List

import structlog

from equipment_import.errors.exceptions import UnsupportedFormatError
from equipment_import.models.parsed_file import FileType, ParsedFile
from equipment_import.parsers.base_parser import Decoder, PathLike
from equipment_import.parsers.csv_parser import CsvDecoder
from equipment_import.parsers.excel_parser import ExcelDecoder

logger = structlog.get_logger(__name__)


# Extension (lowercase, without dot) -> format tag
_EXTENSION_FILE_TYPES: Dict[str, FileType] = {
    "csv": FileType.CSV,
    "tsv": FileType.CSV,
    "xlsx": FileType.XLSX,
    "xlsm": FileType.XLSX,
    "xls": FileType.XLS,
}

# Format tag -> decoder factory. PDF is reserved and has no decoder.
_DECODER_REGISTRY: Dict[FileType, Callable[[], Decoder]] = {
    FileType.CSV: CsvDecoder,
    FileType.XLSX: ExcelDecoder,
    FileType.XLS: ExcelDecoder,
}


def get_extension(path: PathLike) -> str:
    """Lowercase extension without the leading dot ('' when there is none)."""
    return Path(path).suffix.lower().lstrip(".")


def detect_file_type(path: PathLike) -> FileType:
    """Map a path to its format tag.

    Raises:
        UnsupportedFormatError: If the extension has no registered decoder
    """
    extension = get_extension(path)
    file_type = _EXTENSION_FILE_TYPES.get(extension)
    if file_type is None or file_type not in _DECODER_REGISTRY:
        label = f".{extension}" if extension else "(no extension)"
        raise UnsupportedFormatError(f"Unsupported file format: {label}")
    return file_type


def get_decoder(file_type: FileType) -> Decoder:
    """Create the decoder for a format tag.

    Raises:
        UnsupportedFormatError: If no decoder handles the format
    """
    factory = _DECODER_REGISTRY.get(file_type)
    if factory is None:
        raise UnsupportedFormatError(f"Unsupported file format: .{file_type.value}")
    return factory()


def parse_file(path: PathLike) -> ParsedFile:
    """Decode a spreadsheet file into the uniform row model.

    Args:
        path: Path to a .csv, .tsv, .xlsx, .xlsm or .xls file

    Returns:
        ParsedFile with headers and at most MAX_ROWS non-blank data rows

    Raises:
        UnsupportedFormatError: If the extension is not recognized
        ImportPipelineError: Any decode failure from the selected decoder
    """
    file_type = detect_file_type(path)
    decoder = get_decoder(file_type)
    parsed = decoder.decode(path)
    logger.info(
        "import_file_parsed",
        file_name=parsed.file_name,
        file_type=parsed.file_type.value,
        header_count=len(parsed.headers),
        returned_rows=len(parsed.rows),
        total_rows=parsed.total_rows,
        truncated=parsed.truncated,
    )
    return parsed


def get_supported_extensions() -> List[str]:
    """List extensions that parse_file accepts."""
    return [ext for ext, file_type in _EXTENSION_FILE_TYPES.items() if file_type in _DECODER_REGISTRY]


def is_supported(path: PathLike) -> bool:
    """Check whether parse_file would accept the path's extension."""
    return get_extension(path) in get_supported_extensions()
