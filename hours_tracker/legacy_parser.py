"""
Parser for the legacy monthly report workbook.

The legacy report is a bundle of named sheets (from a spreadsheet or a JSON
dump of one): one hours grid per month ("Hours October", ...) and a free-form
"monthly report" sheet holding an objectives block and a news block. Nothing
about the layout is fixed, so extraction is a chain of small detectors, each
returning None when its heuristic does not match. Every detector failure
skips the affected sheet, row or cell; the parser never raises on content.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .activity_resolver import ActivityResolver
from .date_utils import day_key, is_number, month_key, parse_absolute_date, parse_header_date
from .ids import prefixed_id
from .logging_utils import get_logger
from .matrix import Grid, cell_at, cell_to_text, normalize_to_matrix, parse_hours_cell
from .models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    HoursData,
    MonthlyProgress,
    NewsItem,
    Objective,
    PartialState,
)


# Number of rows searched for the date header of an hours sheet
HEADER_SEARCH_ROWS = 10

# Date cells of the target month needed for a row to count as a header
MIN_HEADER_DATE_CELLS = 4

# Objective descriptions must be longer than this
MIN_DESCRIPTION_LENGTH = 5

# Summed monthly progress at or above this marks an objective completed
COMPLETION_THRESHOLD = 0.99

# First column of the objectives monthly block (progress, note pairs)
OBJECTIVE_FIRST_MONTH_COLUMN = 3

ACTIVITY_HEADER = 'activity'

OBJECTIVE_HEADER_LABELS = ('description', 'objective', 'objectives', 'goal', 'goals')
OBJECTIVE_HEADER_CELLS = ('target', 'status')

LEGACY_SHEET_MARKERS = ('monthly report', 'hours ')

MONTH_NAMES = [
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
]


@dataclass
class MonthSheet:
    """
    One monthly hours sheet to look for.

    Attributes:
        sheet_fragment: Case-insensitive part of the sheet name (e.g., "hours october")
        month: Month number 1-12
        year: Year used for the resulting month and day keys
    """
    sheet_fragment: str
    month: int
    year: int

    @property
    def month_key(self) -> str:
        return month_key(self.year, self.month)


@dataclass
class LegacyLayout:
    """
    Where the legacy report keeps its data.

    Attributes:
        months: Hours sheets to read, in report order (also the order of the
            progress/note column pairs in the objectives block)
        main_sheet_fragment: Part of the name of the sheet with objectives and news
        objectives_marker: Text in the first cell of the row above the objectives block
        news_marker: Text in the first cell of the row that ends the objectives block
    """
    months: List[MonthSheet] = field(default_factory=list)
    main_sheet_fragment: str = 'monthly report'
    objectives_marker: str = 'objectives for 2025'
    news_marker: str = 'news of the month'


def default_layout(year: int = 2025, months: Sequence[int] = (10, 11, 12)) -> LegacyLayout:
    """
    Build the layout of the legacy report for a year.

    Args:
        year: Report year
        months: Month numbers that have an hours sheet

    Returns:
        LegacyLayout with "hours <month name>" fragments
    """
    return LegacyLayout(
        months=[MonthSheet(f"hours {MONTH_NAMES[m - 1]}", m, year) for m in months],
        objectives_marker=f"objectives for {year}",
    )


def looks_like_legacy(sheet_names) -> bool:
    """True if any sheet or key name marks a legacy report bundle."""
    for name in sheet_names:
        lowered = str(name).lower()
        if any(marker in lowered for marker in LEGACY_SHEET_MARKERS):
            return True
    return False


# ---------------------------------------------------------------------------
# Detectors
# ---------------------------------------------------------------------------

def find_sheet(sheets: Mapping[str, Any], fragment: str) -> Optional[Grid]:
    """First sheet whose name contains fragment (case-insensitive), as a grid."""
    needle = fragment.lower()
    for name, rows in sheets.items():
        if needle in str(name).lower():
            return normalize_to_matrix(rows)
    return None


def _is_activity_label(cell) -> bool:
    return isinstance(cell, str) and ACTIVITY_HEADER in cell.lower()


def count_month_dates(row: Sequence[Any], month: int) -> int:
    """Number of cells in row that parse as a day of the given month."""
    count = 0
    for cell in row:
        parsed = parse_header_date(cell)
        if parsed and parsed[0] == month:
            count += 1
    return count


def find_header_row(matrix: Grid, month: int) -> Optional[int]:
    """
    Locate the date header row of an hours sheet.

    Within the first rows, the earliest row qualifies that has at least
    four cells dated in the target month, or that carries an "activity"
    label next to at least one such date.

    Returns:
        Row index or None
    """
    for index, row in enumerate(matrix[:HEADER_SEARCH_ROWS]):
        dates = count_month_dates(row, month)
        if dates >= MIN_HEADER_DATE_CELLS:
            return index
        if dates and any(_is_activity_label(cell) for cell in row):
            return index
    return None


def find_activity_column(header_row: Sequence[Any]) -> Optional[int]:
    """
    Column holding activity names.

    An "activity" header cell wins; otherwise column 0 when it is text.
    """
    for index, cell in enumerate(header_row):
        if _is_activity_label(cell):
            return index
    if header_row and isinstance(header_row[0], str):
        return 0
    return None


def map_date_columns(header_row: Sequence[Any], sheet: MonthSheet) -> Dict[int, str]:
    """Column index -> day key for every header cell dated in the sheet's month."""
    columns: Dict[int, str] = {}
    for index, cell in enumerate(header_row):
        parsed = parse_header_date(cell)
        if parsed and parsed[0] == sheet.month:
            columns[index] = day_key(sheet.year, sheet.month, parsed[1])
    return columns


def find_objectives_start(matrix: Grid, marker: str) -> Optional[int]:
    """Index of the row right after the objectives marker row."""
    needle = marker.lower()
    for index, row in enumerate(matrix):
        if needle in cell_to_text(cell_at(row, 0)).lower():
            return index + 1
    return None


def is_objectives_header(row: Sequence[Any]) -> bool:
    """True for the column caption row that usually follows the marker."""
    first = cell_to_text(cell_at(row, 0)).strip().lower()
    if first in OBJECTIVE_HEADER_LABELS:
        return True
    return any(
        isinstance(cell, str) and cell.strip().lower() in OBJECTIVE_HEADER_CELLS
        for cell in row
    )


def is_news_marker(row: Sequence[Any], marker: str) -> bool:
    return marker.lower() in cell_to_text(cell_at(row, 0)).lower()


def objective_description(row: Sequence[Any]) -> Optional[str]:
    """First cell when it reads like a description rather than a blank or a number."""
    first = cell_at(row, 0)
    if isinstance(first, str) and len(first) > MIN_DESCRIPTION_LENGTH:
        return first
    return None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class LegacyReportParser:
    """
    Extracts hours, activities, objectives and news from a legacy bundle.

    Example:
        >>> parser = LegacyReportParser(default_layout(2025))
        >>> partial = parser.parse({"Hours November": [["Activity", "1-Nov"], ["Design", 4]]})
        >>> list(partial.hours)
        ['2025-11']
    """

    def __init__(
        self,
        layout: Optional[LegacyLayout] = None,
        resolver: Optional[ActivityResolver] = None
    ):
        """
        Initialize the parser.

        Args:
            layout: Sheet layout (defaults to the 2025 October-December report)
            resolver: Caller-owned activity lookup table (a fresh one if None)
        """
        self.layout = layout or default_layout()
        self.resolver = resolver if resolver is not None else ActivityResolver()
        self.logger = get_logger('legacy_parser')

    def parse(self, sheets: Mapping[str, Any]) -> PartialState:
        """
        Parse a bundle of named sheets.

        Args:
            sheets: Sheet name -> grid or list of records

        Returns:
            PartialState with whatever could be recognised (possibly empty)
        """
        partial = PartialState()

        hours: HoursData = {}
        rows_read = 0
        for sheet in self.layout.months:
            rows_read += self._parse_hours_sheet(sheets, sheet, hours)

        if rows_read:
            partial.hours = hours
            partial.activities = self.resolver.activities()

        main = find_sheet(sheets, self.layout.main_sheet_fragment)
        if main is None:
            self.logger.debug(f"No sheet matching '{self.layout.main_sheet_fragment}'")
        else:
            objectives = self.parse_objectives(main)
            news = self.parse_news(main)
            if objectives:
                partial.objectives = objectives
            if news:
                partial.news = news
            if not objectives and not news:
                self.logger.debug("Main sheet holds no objectives or news")

        return partial

    def _parse_hours_sheet(
        self,
        sheets: Mapping[str, Any],
        sheet: MonthSheet,
        hours: HoursData
    ) -> int:
        """
        Read one month sheet into hours.

        Returns:
            Number of activity rows read (0 when the sheet was skipped)
        """
        matrix = find_sheet(sheets, sheet.sheet_fragment)
        if matrix is None:
            self.logger.debug(f"No sheet matching '{sheet.sheet_fragment}', skipping")
            return 0

        header_index = find_header_row(matrix, sheet.month)
        if header_index is None:
            self.logger.debug(f"No date header row in '{sheet.sheet_fragment}', skipping")
            return 0

        header_row = matrix[header_index]
        activity_column = find_activity_column(header_row)
        if activity_column is None:
            self.logger.debug(f"No activity column in '{sheet.sheet_fragment}', skipping")
            return 0

        date_columns = map_date_columns(header_row, sheet)
        self.logger.debug(
            f"'{sheet.sheet_fragment}': header row {header_index}, "
            f"activity column {activity_column}, {len(date_columns)} date column(s)"
        )

        rows_read = 0
        for row in matrix[header_index + 1:]:
            activity_id = self.resolver.get_or_create_id(cell_at(row, activity_column))
            if not activity_id:
                continue
            rows_read += 1
            for column, day in date_columns.items():
                value = parse_hours_cell(cell_at(row, column))
                if value is not None and value > 0:
                    hours.setdefault(sheet.month_key, {}).setdefault(activity_id, {})[day] = value
        return rows_read

    def parse_objectives(self, matrix: Grid) -> List[Objective]:
        """
        Read the objectives block of the main sheet.

        Rows between the objectives marker and the news marker whose first
        cell reads like a description become objectives; each month of the
        layout reads a (progress, note) column pair.
        """
        objectives: List[Objective] = []
        start = find_objectives_start(matrix, self.layout.objectives_marker)
        if start is None:
            self.logger.debug("No objectives block found")
            return objectives

        seen = set()
        for offset, row in enumerate(matrix[start:]):
            if is_news_marker(row, self.layout.news_marker):
                break
            if offset == 0 and is_objectives_header(row):
                continue
            description = objective_description(row)
            if description is None or description in seen:
                continue
            seen.add(description)
            objectives.append(self._build_objective(description, row))
        return objectives

    def _build_objective(self, description: str, row: Sequence[Any]) -> Objective:
        monthly: Dict[str, MonthlyProgress] = {}
        for position, sheet in enumerate(self.layout.months):
            column = OBJECTIVE_FIRST_MONTH_COLUMN + 2 * position
            progress = cell_at(row, column)
            monthly[sheet.month_key] = MonthlyProgress(
                progress=float(progress) if is_number(progress) else 0.0,
                note=cell_to_text(cell_at(row, column + 1)),
            )

        objective = Objective(
            id=prefixed_id('obj'),
            description=description,
            target=1.0,
            status=STATUS_IN_PROGRESS,
            monthly_data=monthly,
        )
        if objective.total_progress() >= COMPLETION_THRESHOLD:
            objective.status = STATUS_COMPLETED
        return objective

    def parse_news(self, matrix: Grid) -> List[NewsItem]:
        """Rows whose first cell is a date and second cell is text become news."""
        news: List[NewsItem] = []
        for row in matrix:
            date_text = parse_absolute_date(cell_at(row, 0))
            if date_text is None:
                continue
            text = cell_at(row, 1)
            if isinstance(text, str) and text:
                news.append(NewsItem(id=prefixed_id('news'), date=date_text, text=text, tags=[]))
        return news


def parse_legacy_report(
    sheets: Mapping[str, Any],
    layout: Optional[LegacyLayout] = None,
    resolver: Optional[ActivityResolver] = None
) -> PartialState:
    """
    Convenience function to parse a legacy bundle.

    Args:
        sheets: Sheet name -> grid or list of records
        layout: Sheet layout (defaults to the 2025 October-December report)
        resolver: Caller-owned activity lookup table

    Returns:
        PartialState (empty when nothing was recognised)
    """
    return LegacyReportParser(layout, resolver).parse(sheets)
