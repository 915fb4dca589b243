"""
Sectioned text export and import.

serialize_state() writes the full state as bracketed sections (see
csv_schema); parse_delimited_text() reads such text back into a
PartialState. The importer is line oriented and forgiving: unknown sections,
short lines and unparseable numbers are skipped or defaulted rather than
rejected.
"""

import math
from typing import Dict, List, Optional

from .csv_schema import CSVSchema
from .logging_utils import get_logger
from .matrix import leading_number
from .models import (
    DEFAULT_COLOR,
    DEFAULT_USER_NAME,
    DEFAULT_YEAR,
    Activity,
    AppState,
    HoursData,
    Meta,
    MonthlyProgress,
    NewsItem,
    Objective,
    PartialState,
    normalize_status,
    now_iso,
)


def format_number(value: float) -> str:
    """Shortest text for a number: 4.0 -> "4", 3.5 -> "3.5"."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_bool(value: bool) -> str:
    return 'true' if value else 'false'


class CSVExporter:
    """
    Writes AppState as sectioned text.

    Every section is emitted even when empty, so an import of the output
    replaces every collection.
    """

    def serialize(self, state: AppState) -> str:
        lines: List[str] = []
        self._section(lines, CSVSchema.META, [self._meta_line(state.meta)])
        self._section(lines, CSVSchema.ACTIVITIES, [self._activity_line(a) for a in state.activities])
        self._section(lines, CSVSchema.OBJECTIVES, [self._objective_line(o) for o in state.objectives])
        self._section(lines, CSVSchema.OBJECTIVES_MONTHLY, [
            self._join([objective.id, month, format_number(entry.progress), self._text(entry.note)])
            for objective in state.objectives
            for month, entry in objective.monthly_data.items()
        ])
        self._section(lines, CSVSchema.NEWS, [self._news_line(n) for n in state.news])
        self._section(lines, CSVSchema.HOURS, [
            self._join([month, activity_id, day, format_number(hours)])
            for month, activities in state.hours.items()
            for activity_id, days in activities.items()
            for day, hours in days.items()
        ], trailing_blank=False)
        return '\n'.join(lines)

    def _section(self, lines: List[str], section: str, rows: List[str], trailing_blank: bool = True):
        lines.append(CSVSchema.section_line(section))
        lines.append(CSVSchema.header_line(section))
        lines.extend(rows)
        if trailing_blank:
            lines.append('')

    def _join(self, fields: List[str]) -> str:
        return CSVSchema.DELIMITER.join(fields)

    def _text(self, text: Optional[str]) -> str:
        return CSVSchema.escape_text(text or '')

    def _meta_line(self, meta: Meta) -> str:
        return self._join([str(meta.year), self._text(meta.user_name), meta.last_updated])

    def _activity_line(self, activity: Activity) -> str:
        return self._join([
            activity.id,
            self._text(activity.name),
            self._text(activity.description),
            activity.color,
            format_bool(activity.is_active),
        ])

    def _objective_line(self, objective: Objective) -> str:
        return self._join([
            objective.id,
            self._text(objective.description),
            format_number(objective.target),
            objective.status,
            objective.deadline or '',
        ])

    def _news_line(self, item: NewsItem) -> str:
        tags = CSVSchema.TAG_SEPARATOR.join(self._text(tag) for tag in item.tags)
        return self._join([item.id, item.date, self._text(item.text), tags])


class CSVImporter:
    """
    Reads sectioned text into a PartialState.

    Collections are supplied when their section header appears in the text;
    META is supplied once a META data row parses. OBJECTIVES_MONTHLY rows
    attach to objectives read earlier in the same text; rows for unknown
    objective ids are dropped.
    """

    def __init__(self):
        self.logger = get_logger('csv_codec')

    def parse(self, text: str) -> PartialState:
        state = PartialState()
        objectives_by_id: Dict[str, Objective] = {}
        section = ''

        for line_num, raw_line in enumerate(text.split('\n'), start=1):
            line = raw_line.strip()
            if not line:
                continue

            section_name = CSVSchema.parse_section_line(line)
            if section_name is not None:
                section = section_name
                self._open_section(state, section)
                continue

            if CSVSchema.is_header_line(line):
                continue

            parts = line.split(CSVSchema.DELIMITER)
            if len(parts) < 2:
                self.logger.debug(f"Line {line_num}: too few fields, skipped")
                continue

            if section == CSVSchema.META:
                state.meta = self._parse_meta(parts)
            elif section == CSVSchema.ACTIVITIES:
                state.activities.append(self._parse_activity(parts))
            elif section == CSVSchema.OBJECTIVES:
                objective = self._parse_objective(parts)
                objectives_by_id[objective.id] = objective
                state.objectives.append(objective)
            elif section == CSVSchema.OBJECTIVES_MONTHLY:
                self._parse_monthly(parts, objectives_by_id, line_num)
            elif section == CSVSchema.NEWS:
                state.news.append(self._parse_news(parts))
            elif section == CSVSchema.HOURS:
                self._parse_hours(parts, state.hours, line_num)

        return state

    @staticmethod
    def _open_section(state: PartialState, section: str):
        if section == CSVSchema.ACTIVITIES and state.activities is None:
            state.activities = []
        elif section == CSVSchema.OBJECTIVES and state.objectives is None:
            state.objectives = []
        elif section == CSVSchema.NEWS and state.news is None:
            state.news = []
        elif section == CSVSchema.HOURS and state.hours is None:
            state.hours = {}

    @staticmethod
    def _fields(parts: List[str], count: int) -> List[str]:
        """Pad or cut parts to exactly count fields."""
        return (parts + [''] * count)[:count]

    def _parse_meta(self, parts: List[str]) -> Meta:
        year, user_name, last_updated = self._fields(parts, 3)
        parsed_year = leading_number(year)
        return Meta(
            year=int(parsed_year) if parsed_year else DEFAULT_YEAR,
            user_name=CSVSchema.unescape_text(user_name) or DEFAULT_USER_NAME,
            last_updated=last_updated or now_iso(),
        )

    def _parse_activity(self, parts: List[str]) -> Activity:
        activity_id, name, description, color, is_active = self._fields(parts, 5)
        return Activity(
            id=activity_id,
            name=CSVSchema.unescape_text(name),
            description=CSVSchema.unescape_text(description),
            color=color or DEFAULT_COLOR,
            is_active=is_active == 'true',
        )

    def _parse_objective(self, parts: List[str]) -> Objective:
        objective_id, description, target, status, deadline = self._fields(parts, 5)
        parsed_target = leading_number(target)
        return Objective(
            id=objective_id,
            description=CSVSchema.unescape_text(description),
            target=parsed_target if parsed_target and parsed_target > 0 else 1.0,
            status=normalize_status(status),
            deadline=deadline or None,
            monthly_data={},
        )

    def _parse_monthly(self, parts: List[str], objectives_by_id: Dict[str, Objective], line_num: int):
        objective_id, month, progress, note = self._fields(parts, 4)
        objective = objectives_by_id.get(objective_id)
        if objective is None:
            self.logger.debug(f"Line {line_num}: unknown objective '{objective_id}', skipped")
            return
        objective.monthly_data[month] = MonthlyProgress(
            progress=leading_number(progress) or 0.0,
            note=CSVSchema.unescape_text(note),
        )

    def _parse_news(self, parts: List[str]) -> NewsItem:
        news_id, date, text, tags = self._fields(parts, 4)
        return NewsItem(
            id=news_id,
            date=date,
            text=CSVSchema.unescape_text(text),
            tags=[CSVSchema.unescape_text(t) for t in tags.split(CSVSchema.TAG_SEPARATOR)] if tags else [],
        )

    def _parse_hours(self, parts: List[str], hours: HoursData, line_num: int):
        month, activity_id, day, value = self._fields(parts, 4)
        parsed = leading_number(value)
        if parsed is None or not math.isfinite(parsed):
            self.logger.warning(f"Line {line_num}: invalid hours value '{value}', skipped")
            return
        hours.setdefault(month, {}).setdefault(activity_id, {})[day] = parsed


def serialize_state(state: AppState) -> str:
    """
    Convert the full state to sectioned text.

    Args:
        state: Application state

    Returns:
        Text with [META], [ACTIVITIES], [OBJECTIVES], [OBJECTIVES_MONTHLY],
        [NEWS] and [HOURS] sections
    """
    return CSVExporter().serialize(state)


def parse_delimited_text(text: str) -> PartialState:
    """
    Parse sectioned text.

    Args:
        text: Text as produced by serialize_state (or hand edited)

    Returns:
        PartialState; empty if no known section was found
    """
    return CSVImporter().parse(text)
