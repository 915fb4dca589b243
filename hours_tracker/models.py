"""
Data models for the hours tracker.

This module defines the canonical application state: activities, objectives,
news items and the sparse hours mapping, plus the partial state returned by
every importer and merged into the live state by the host.
"""

import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional


# month key -> activity id -> day key -> hours
HoursData = Dict[str, Dict[str, Dict[str, float]]]

STATUS_IN_PROGRESS = 'In Progress'
STATUS_COMPLETED = 'Completed'
STATUS_BLOCKED = 'Blocked'

OBJECTIVE_STATUSES = (STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_BLOCKED)

DEFAULT_COLOR = '#3b82f6'
DEFAULT_YEAR = 2025
DEFAULT_USER_NAME = 'User'
DEFAULT_HOUR_LIMIT = 24


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def current_month_key() -> str:
    """Month key (YYYY-MM) for today."""
    return date.today().strftime('%Y-%m')


def _as_str(value: Any, default: str = '') -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        value = float(value)
        return value if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        return parsed if math.isfinite(parsed) else default
    return default


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return default


def normalize_status(value: Any) -> str:
    """Map arbitrary status text onto one of the known objective statuses."""
    text = _as_str(value).strip()
    for status in OBJECTIVE_STATUSES:
        if text.lower() == status.lower():
            return status
    return STATUS_IN_PROGRESS


@dataclass
class Activity:
    """
    A tracked activity.

    Attributes:
        id: Opaque identifier (e.g., "act_k3j9x2a")
        name: Display name
        color: Hex color used by charts
        is_active: Inactive activities are hidden but never deleted
        description: Optional free text
    """
    id: str
    name: str
    color: str = DEFAULT_COLOR
    is_active: bool = True
    description: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'color': self.color,
            'isActive': self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Activity':
        return cls(
            id=_as_str(data.get('id')),
            name=_as_str(data.get('name')),
            color=_as_str(data.get('color')) or DEFAULT_COLOR,
            is_active=_as_bool(data.get('isActive'), True),
            description=_as_str(data.get('description')),
        )


@dataclass
class MonthlyProgress:
    """Progress contribution and note for one objective in one month."""
    progress: float = 0.0
    note: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'progress': self.progress, 'note': self.note}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MonthlyProgress':
        return cls(
            progress=_as_float(data.get('progress'), 0.0),
            note=_as_str(data.get('note')),
        )


@dataclass
class Objective:
    """
    A yearly objective tracked month by month.

    Attributes:
        id: Opaque identifier
        description: What the objective is about
        target: Total progress that counts as done (1 means 100%)
        status: One of OBJECTIVE_STATUSES
        deadline: Optional YYYY-MM-DD date
        monthly_data: Month key (YYYY-MM) -> MonthlyProgress
    """
    id: str
    description: str
    target: float = 1.0
    status: str = STATUS_IN_PROGRESS
    deadline: Optional[str] = None
    monthly_data: Dict[str, MonthlyProgress] = field(default_factory=dict)

    def total_progress(self) -> float:
        """Sum of progress across all months."""
        return sum(entry.progress for entry in self.monthly_data.values())

    def completion_ratio(self) -> float:
        """Total progress relative to target, capped at 1.0."""
        if self.target <= 0:
            return 0.0
        return min(1.0, self.total_progress() / self.target)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'id': self.id,
            'description': self.description,
            'target': self.target,
            'status': self.status,
            'monthlyData': {month: entry.to_dict() for month, entry in self.monthly_data.items()},
        }
        if self.deadline:
            data['deadline'] = self.deadline
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Objective':
        target = _as_float(data.get('target'), 1.0)
        monthly_raw = data.get('monthlyData')
        monthly_data = {}
        if isinstance(monthly_raw, dict):
            for month, entry in monthly_raw.items():
                if isinstance(entry, dict):
                    monthly_data[str(month)] = MonthlyProgress.from_dict(entry)
        return cls(
            id=_as_str(data.get('id')),
            description=_as_str(data.get('description')),
            target=target if target > 0 else 1.0,
            status=normalize_status(data.get('status')),
            deadline=_as_str(data.get('deadline')) or None,
            monthly_data=monthly_data,
        )


@dataclass
class NewsItem:
    """A dated log entry."""
    id: str
    date: str
    text: str
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'date': self.date, 'text': self.text, 'tags': list(self.tags)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NewsItem':
        tags = data.get('tags')
        return cls(
            id=_as_str(data.get('id')),
            date=_as_str(data.get('date')),
            text=_as_str(data.get('text')),
            tags=[_as_str(t) for t in tags] if isinstance(tags, list) else [],
        )


@dataclass
class Meta:
    """Owner and bookkeeping information."""
    year: int = DEFAULT_YEAR
    user_name: str = DEFAULT_USER_NAME
    last_updated: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {'year': self.year, 'userName': self.user_name, 'lastUpdated': self.last_updated}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Meta':
        return cls(
            year=int(_as_float(data.get('year'), DEFAULT_YEAR)),
            user_name=_as_str(data.get('userName')) or DEFAULT_USER_NAME,
            last_updated=_as_str(data.get('lastUpdated')) or now_iso(),
        )


@dataclass
class Settings:
    """User preferences."""
    theme: str = 'light'
    hour_limit_per_day: float = DEFAULT_HOUR_LIMIT
    current_month: str = field(default_factory=current_month_key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'theme': self.theme,
            'hourLimitPerDay': self.hour_limit_per_day,
            'currentMonth': self.current_month,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        theme = _as_str(data.get('theme'))
        limit = _as_float(data.get('hourLimitPerDay'), DEFAULT_HOUR_LIMIT)
        return cls(
            theme=theme if theme in ('light', 'dark') else 'light',
            hour_limit_per_day=limit if limit > 0 else DEFAULT_HOUR_LIMIT,
            current_month=_as_str(data.get('currentMonth')) or current_month_key(),
        )


def hours_to_dict(hours: HoursData) -> Dict[str, Any]:
    """Deep copy of an hours mapping (plain dicts, JSON ready)."""
    return {
        month: {act_id: dict(days) for act_id, days in activities.items()}
        for month, activities in hours.items()
    }


def hours_from_dict(data: Dict[str, Any]) -> HoursData:
    """
    Coerce a decoded hours mapping into HoursData.

    Levels that are not mappings and values that are not finite numbers
    are dropped.
    """
    hours: HoursData = {}
    for month, activities in data.items():
        if not isinstance(activities, dict):
            continue
        month_map = hours.setdefault(str(month), {})
        for act_id, days in activities.items():
            if not isinstance(days, dict):
                continue
            day_map = month_map.setdefault(str(act_id), {})
            for day, value in days.items():
                parsed = _as_float(value, math.nan)
                if not math.isnan(parsed):
                    day_map[str(day)] = parsed
    return hours


@dataclass
class AppState:
    """The aggregate root held by the application."""
    meta: Meta = field(default_factory=Meta)
    settings: Settings = field(default_factory=Settings)
    activities: List[Activity] = field(default_factory=list)
    objectives: List[Objective] = field(default_factory=list)
    news: List[NewsItem] = field(default_factory=list)
    hours: HoursData = field(default_factory=dict)

    def find_activity(self, activity_id: str) -> Optional[Activity]:
        for activity in self.activities:
            if activity.id == activity_id:
                return activity
        return None

    def find_objective(self, objective_id: str) -> Optional[Objective]:
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'meta': self.meta.to_dict(),
            'settings': self.settings.to_dict(),
            'activities': [a.to_dict() for a in self.activities],
            'objectives': [o.to_dict() for o in self.objectives],
            'news': [n.to_dict() for n in self.news],
            'hours': hours_to_dict(self.hours),
        }


@dataclass
class PartialState:
    """
    A subset of AppState fields produced by an import.

    A field left as None was not supplied. Supplied fields replace the
    corresponding AppState field wholesale when merged.
    """
    meta: Optional[Meta] = None
    settings: Optional[Settings] = None
    activities: Optional[List[Activity]] = None
    objectives: Optional[List[Objective]] = None
    news: Optional[List[NewsItem]] = None
    hours: Optional[HoursData] = None

    def present_fields(self) -> List[str]:
        """Names of the supplied fields, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.present_fields()

    def merge_into(self, state: AppState, touch: bool = True) -> AppState:
        """
        Return a new AppState with the supplied fields replaced.

        Args:
            state: Current application state (left untouched)
            touch: Stamp meta.last_updated with the current time

        Returns:
            Merged state
        """
        updates = {name: getattr(self, name) for name in self.present_fields()}
        merged = replace(state, **updates)
        if touch:
            merged = replace(merged, meta=replace(merged.meta, last_updated=now_iso()))
        return merged


def default_state() -> AppState:
    """Fresh seed state used on first start and after a reset."""
    return AppState()
