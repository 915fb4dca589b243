"""
Import format detection and routing.

Given a file name and its content, choose exactly one parser:

- spreadsheet extension -> workbook reader -> legacy report parser
- ".json" name or content starting with "{" -> JSON, then either the legacy
  report parser (sheet-like keys) or the backup reader
- anything else -> sectioned text importer

The result says whether usable data was found so the host can report
success, "nothing found" or failure. Merging is left to the host.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .backup import parse_backup
from .csv_codec import parse_delimited_text
from .legacy_parser import LegacyLayout, looks_like_legacy, parse_legacy_report
from .logging_utils import get_logger, log_warning
from .models import PartialState
from .workbook_reader import WorkbookReadError, is_spreadsheet_name, read_workbook


STATUS_SUCCESS = 'success'
STATUS_EMPTY = 'empty'
STATUS_FAILED = 'failed'

FORMAT_WORKBOOK = 'workbook'
FORMAT_LEGACY_JSON = 'legacy_json'
FORMAT_JSON_BACKUP = 'json_backup'
FORMAT_DELIMITED_TEXT = 'delimited_text'


class StructuralParseError(Exception):
    """Raised when content claimed to be a structured format cannot be parsed."""
    pass


@dataclass
class ImportResult:
    """
    Outcome of one import.

    Attributes:
        status: "success", "empty" (nothing recognised) or "failed"
        source_format: Parser that handled the content ("" when none did)
        partial: Parsed partial state (empty unless status is "success")
        message: Human-readable outcome
    """
    status: str
    source_format: str = ''
    partial: PartialState = field(default_factory=PartialState)
    message: str = ''

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS


def decode_text(content: Union[bytes, str]) -> str:
    """Decode file content as UTF-8, dropping a BOM and replacing bad bytes."""
    if isinstance(content, str):
        return content.lstrip('\ufeff')
    return content.decode('utf-8-sig', errors='replace')


def _result(source_format: str, partial: PartialState, found_message: str) -> ImportResult:
    if partial.is_empty():
        return ImportResult(
            status=STATUS_EMPTY,
            source_format=source_format,
            message="No valid data found",
        )
    return ImportResult(
        status=STATUS_SUCCESS,
        source_format=source_format,
        partial=partial,
        message=f"{found_message} ({', '.join(partial.present_fields())})",
    )


def dispatch(
    filename: str,
    content: Union[bytes, str],
    layout: Optional[LegacyLayout] = None
) -> ImportResult:
    """
    Route content to the matching parser.

    Args:
        filename: Original file name (only the extension matters)
        content: Raw bytes, or already decoded text
        layout: Legacy report layout (defaults to the 2025 report)

    Returns:
        ImportResult with status "success" or "empty"

    Raises:
        StructuralParseError: If a workbook cannot be read, or a ".json" file
            is not valid JSON
    """
    logger = get_logger('dispatcher')
    name = filename.lower()

    if is_spreadsheet_name(name):
        if isinstance(content, str):
            raise StructuralParseError(f"Workbook content for '{filename}' must be bytes")
        try:
            sheets = read_workbook(content)
        except WorkbookReadError as e:
            raise StructuralParseError(str(e))
        if not looks_like_legacy(sheets):
            logger.debug(f"No legacy report sheets in '{filename}': {list(sheets)}")
            return _result(FORMAT_WORKBOOK, PartialState(), '')
        return _result(FORMAT_WORKBOOK, parse_legacy_report(sheets, layout), "Workbook imported")

    text = decode_text(content)

    if name.endswith('.json') or text.strip().startswith('{'):
        try:
            data = json.loads(text)
        except ValueError as e:
            if name.endswith('.json'):
                raise StructuralParseError(f"Invalid JSON file '{filename}': {e}")
            log_warning(f"'{filename}' looks like JSON but does not parse, reading as text", logger)
            return _result(FORMAT_DELIMITED_TEXT, parse_delimited_text(text), "Text imported")

        if isinstance(data, dict) and looks_like_legacy(data.keys()):
            return _result(FORMAT_LEGACY_JSON, parse_legacy_report(data, layout), "Legacy report imported")
        return _result(FORMAT_JSON_BACKUP, parse_backup(data), "JSON backup imported")

    return _result(FORMAT_DELIMITED_TEXT, parse_delimited_text(text), "Text imported")


def import_file(
    filename: str,
    content: Union[bytes, str],
    layout: Optional[LegacyLayout] = None
) -> ImportResult:
    """
    Import boundary: like dispatch(), but failures become a "failed" result.

    Args:
        filename: Original file name
        content: Raw bytes or decoded text
        layout: Legacy report layout

    Returns:
        ImportResult; never raises for bad content
    """
    try:
        return dispatch(filename, content, layout)
    except StructuralParseError as e:
        return ImportResult(status=STATUS_FAILED, message=str(e))


def import_path(path: Union[str, Path], layout: Optional[LegacyLayout] = None) -> ImportResult:
    """
    Read a file from disk and import it.

    Returns:
        ImportResult; a missing or unreadable file is a "failed" result
    """
    file_path = Path(path)
    try:
        content = file_path.read_bytes()
    except OSError as e:
        return ImportResult(status=STATUS_FAILED, message=f"Cannot read {file_path}: {e}")
    return import_file(file_path.name, content, layout)
