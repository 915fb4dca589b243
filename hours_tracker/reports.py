"""
Report aggregates over the hours mapping.

These are the numbers the dashboard and calendar views show: per-activity
totals and shares for a month, per-day totals against the daily limit, and
a month-by-month breakdown across several months.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .date_utils import days_in_month, parse_month_key
from .models import AppState


@dataclass
class ActivityTotal:
    """Hours of one activity in a month and its share of the month total (0-100)."""
    activity_id: str
    total: float
    percentage: float


@dataclass
class DailyTotal:
    date: str
    total: float


@dataclass
class ActivityBreakdown:
    """
    Hours of one activity across several months.

    Attributes:
        activity_id: Activity identifier
        name: Activity name
        per_month: Month key -> hours
        total: Sum over the months
    """
    activity_id: str
    name: str
    per_month: Dict[str, float] = field(default_factory=dict)
    total: float = 0.0


def _month_hours(state: AppState, month: str, activity_id: str) -> float:
    return sum(state.hours.get(month, {}).get(activity_id, {}).values())


def activity_totals(state: AppState, month: str) -> List[ActivityTotal]:
    """
    Totals per known activity for a month, in activity order.

    Percentages are relative to the grand total of the month; all zero when
    nothing was booked.
    """
    totals = [(a.id, _month_hours(state, month, a.id)) for a in state.activities]
    grand_total = sum(total for _, total in totals)
    return [
        ActivityTotal(
            activity_id=activity_id,
            total=total,
            percentage=(total / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for activity_id, total in totals
    ]


def daily_totals(state: AppState, month: str) -> List[DailyTotal]:
    """Total hours of known activities for every day of a month."""
    year, month_number = parse_month_key(month)
    month_data = state.hours.get(month, {})
    known = [a.id for a in state.activities]
    return [
        DailyTotal(
            date=day,
            total=sum(month_data.get(activity_id, {}).get(day, 0) for activity_id in known),
        )
        for day in days_in_month(year, month_number)
    ]


def over_limit_days(state: AppState, month: str) -> List[DailyTotal]:
    """Days whose total exceeds settings.hour_limit_per_day."""
    limit = state.settings.hour_limit_per_day
    return [d for d in daily_totals(state, month) if d.total > limit]


def monthly_breakdown(state: AppState, months: Sequence[str]) -> List[ActivityBreakdown]:
    """Per-activity hours for each month, sorted by overall total (largest first)."""
    rows = []
    for activity in state.activities:
        row = ActivityBreakdown(activity_id=activity.id, name=activity.name)
        for month in months:
            hours = _month_hours(state, month, activity.id)
            row.per_month[month] = hours
            row.total += hours
        rows.append(row)
    return sorted(rows, key=lambda r: r.total, reverse=True)


@dataclass
class MonthSummary:
    """Everything the summary command prints for one month."""
    month: str
    activity_names: Dict[str, str]
    totals: List[ActivityTotal]
    days: List[DailyTotal]
    over_limit: List[DailyTotal]
    objectives: List[tuple]

    @property
    def grand_total(self) -> float:
        return sum(t.total for t in self.totals)

    def format_summary(self) -> str:
        """
        Format the summary as a human-readable string.

        Returns:
            Formatted summary text
        """
        lines = [
            "\n" + "=" * 60,
            f"MONTH SUMMARY {self.month}",
            "=" * 60,
            "\nActivities:",
        ]
        booked = [t for t in self.totals if t.total > 0]
        if not booked:
            lines.append("  (no hours booked)")
        for total in sorted(booked, key=lambda t: t.total, reverse=True):
            name = self.activity_names.get(total.activity_id, total.activity_id)
            lines.append(f"  {name}: {total.total:.2f} hours ({total.percentage:.1f}%)")
        lines.append(f"\nTotal: {self.grand_total:.2f} hours")

        worked_days = [d for d in self.days if d.total > 0]
        lines.append(f"Days with hours: {len(worked_days)}")

        if self.over_limit:
            lines.append("\nOver daily limit:")
            for day in self.over_limit:
                lines.append(f"  - {day.date}: {day.total:.2f} hours")

        if self.objectives:
            lines.append("\nObjectives:")
            for description, status, ratio in self.objectives:
                lines.append(f"  [{status}] {ratio * 100:.0f}% {description}")

        lines.append("=" * 60 + "\n")
        return "\n".join(lines)


def summarize_month(state: AppState, month: str) -> MonthSummary:
    """Collect the aggregates of one month."""
    return MonthSummary(
        month=month,
        activity_names={a.id: a.name for a in state.activities},
        totals=activity_totals(state, month),
        days=daily_totals(state, month),
        over_limit=over_limit_days(state, month),
        objectives=[(o.description, o.status, o.completion_ratio()) for o in state.objectives],
    )
