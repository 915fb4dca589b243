"""
Hours Tracker - personal time tracking and reporting.

This package records hours per activity per day, monthly objective progress
and dated news items, and imports/exports them as JSON backups, sectioned
text files and legacy monthly report workbooks.
"""

__version__ = '1.0.0'

from .models import AppState, PartialState, default_state
from .csv_codec import serialize_state, parse_delimited_text
from .legacy_parser import LegacyReportParser, parse_legacy_report, default_layout
from .dispatcher import ImportResult, StructuralParseError, dispatch, import_file, import_path
from .store import StateStore

__all__ = [
    'AppState',
    'PartialState',
    'default_state',
    'serialize_state',
    'parse_delimited_text',
    'LegacyReportParser',
    'parse_legacy_report',
    'default_layout',
    'ImportResult',
    'StructuralParseError',
    'dispatch',
    'import_file',
    'import_path',
    'StateStore',
]
