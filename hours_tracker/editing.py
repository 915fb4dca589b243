"""
State editing operations.

Each operation reads the current state and returns a PartialState holding
the updated collection, ready to be merged by the host. Inputs are never
mutated.
"""

import copy
import math
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Union

from .date_utils import month_of_day, parse_month_key, shift_month
from .ids import prefixed_id
from .models import (
    DEFAULT_COLOR,
    OBJECTIVE_STATUSES,
    STATUS_IN_PROGRESS,
    Activity,
    AppState,
    MonthlyProgress,
    NewsItem,
    Objective,
    PartialState,
)


def set_hours(state: AppState, activity_id: str, day: str, hours: float) -> PartialState:
    """
    Set the hours of an activity on a day.

    Zero removes the entry; emptied activity and month levels are pruned so
    the mapping stays sparse.

    Args:
        state: Current state
        activity_id: Activity to book on
        day: Day key (YYYY-MM-DD)
        hours: Hours, 0 to settings.hour_limit_per_day

    Returns:
        PartialState with hours

    Raises:
        ValueError: If the day is malformed or hours are out of range
    """
    try:
        month = month_of_day(day)
    except ValueError:
        raise ValueError(f"Invalid day: '{day}' (expected YYYY-MM-DD)")

    if not isinstance(hours, (int, float)) or isinstance(hours, bool) or not math.isfinite(hours):
        raise ValueError(f"Hours must be a number, got: {hours!r}")
    if hours < 0:
        raise ValueError(f"Hours value cannot be negative: {hours}")
    limit = state.settings.hour_limit_per_day
    if hours > limit:
        raise ValueError(f"Hours value {hours} exceeds the daily limit of {limit}")

    new_hours = copy.deepcopy(state.hours)
    if hours == 0:
        days = new_hours.get(month, {}).get(activity_id)
        if days is not None:
            days.pop(day, None)
            if not days:
                del new_hours[month][activity_id]
            if not new_hours[month]:
                del new_hours[month]
    else:
        new_hours.setdefault(month, {}).setdefault(activity_id, {})[day] = float(hours)
    return PartialState(hours=new_hours)


def add_activity(
    state: AppState,
    name: str,
    color: str = DEFAULT_COLOR,
    description: str = ''
) -> PartialState:
    """
    Append a new active activity.

    Raises:
        ValueError: If the name is blank
    """
    clean = (name or '').strip()
    if not clean:
        raise ValueError("Activity name cannot be empty")
    activity = Activity(
        id=prefixed_id('act'),
        name=clean,
        color=color or DEFAULT_COLOR,
        is_active=True,
        description=description.strip(),
    )
    return PartialState(activities=list(state.activities) + [activity])


def _update_activity(state: AppState, activity_id: str, **changes) -> PartialState:
    if state.find_activity(activity_id) is None:
        raise KeyError(f"Unknown activity: {activity_id}")
    return PartialState(activities=[
        replace(a, **changes) if a.id == activity_id else a
        for a in state.activities
    ])


def toggle_activity(state: AppState, activity_id: str) -> PartialState:
    """Flip the active flag of an activity (activities are never deleted)."""
    activity = state.find_activity(activity_id)
    if activity is None:
        raise KeyError(f"Unknown activity: {activity_id}")
    return _update_activity(state, activity_id, is_active=not activity.is_active)


def set_activity_color(state: AppState, activity_id: str, color: str) -> PartialState:
    return _update_activity(state, activity_id, color=color)


def add_objective(state: AppState, description: str, target: float = 1.0) -> PartialState:
    """
    Append a new objective with no monthly data.

    Raises:
        ValueError: If the description is blank or the target is not positive
    """
    if not description or not description.strip():
        raise ValueError("Objective description cannot be empty")
    if target <= 0:
        raise ValueError(f"Objective target must be positive, got: {target}")
    objective = Objective(
        id=prefixed_id('obj'),
        description=description.strip(),
        target=float(target),
        status=STATUS_IN_PROGRESS,
    )
    return PartialState(objectives=list(state.objectives) + [objective])


def update_objective_month(
    state: AppState,
    objective_id: str,
    month: str,
    progress: Optional[float] = None,
    note: Optional[str] = None
) -> PartialState:
    """
    Update progress and/or note of an objective for one month.

    A missing month entry starts from zero progress and an empty note.

    Raises:
        KeyError: If the objective does not exist
        ValueError: If the month key is malformed or progress is not finite
    """
    parse_month_key(month)
    if progress is not None and not math.isfinite(progress):
        raise ValueError(f"Progress must be a finite number, got: {progress}")

    objectives = []
    found = False
    for objective in state.objectives:
        if objective.id != objective_id:
            objectives.append(objective)
            continue
        found = True
        monthly = dict(objective.monthly_data)
        entry = monthly.get(month, MonthlyProgress())
        monthly[month] = MonthlyProgress(
            progress=entry.progress if progress is None else float(progress),
            note=entry.note if note is None else note,
        )
        objectives.append(replace(objective, monthly_data=monthly))

    if not found:
        raise KeyError(f"Unknown objective: {objective_id}")
    return PartialState(objectives=objectives)


def set_objective_status(state: AppState, objective_id: str, status: str) -> PartialState:
    """
    Set an objective's status explicitly.

    Raises:
        KeyError: If the objective does not exist
        ValueError: If the status is not one of OBJECTIVE_STATUSES
    """
    if status not in OBJECTIVE_STATUSES:
        raise ValueError(f"Unknown status: {status!r}")
    if state.find_objective(objective_id) is None:
        raise KeyError(f"Unknown objective: {objective_id}")
    return PartialState(objectives=[
        replace(o, status=status) if o.id == objective_id else o
        for o in state.objectives
    ])


def add_news(
    state: AppState,
    text: str,
    tags: Union[str, Iterable[str]] = (),
    day: Optional[str] = None
) -> PartialState:
    """
    Prepend a news entry (newest first).

    Args:
        state: Current state
        text: Entry body
        tags: Tag list, or a comma-separated string
        day: YYYY-MM-DD date (defaults to today)

    Raises:
        ValueError: If the text is blank
    """
    if not text or not text.strip():
        raise ValueError("News text cannot be empty")
    if isinstance(tags, str):
        tags = tags.split(',')
    clean_tags = [t.strip() for t in tags if t and t.strip()]
    item = NewsItem(
        id=prefixed_id('news'),
        date=day or date.today().isoformat(),
        text=text,
        tags=clean_tags,
    )
    return PartialState(news=[item] + list(state.news))


def change_month(state: AppState, delta: int) -> PartialState:
    """Move settings.current_month by delta months."""
    month = shift_month(state.settings.current_month, delta)
    return PartialState(settings=replace(state.settings, current_month=month))
