"""
Activity name to identifier resolution for imports.

Spreadsheet rows only carry activity names. The resolver turns each name
into a stable activity id for the duration of one import, creating the
activity record on first sight.
"""

from typing import Callable, Dict, List, Optional

from .ids import generate_id
from .models import Activity


ACTIVITY_PALETTE = [
    '#3b82f6', '#f97316', '#a8a29e', '#f59e0b', '#06b6d4',
    '#84cc16', '#eab308', '#78716c', '#ec4899', '#6366f1',
]

# Footer rows of hours sheets, not activities
SUMMARY_LABELS = ('total', 'sum')


class ActivityResolver:
    """
    Session-scoped lookup table from activity name to Activity.

    The table is owned by the caller: create one per import so that
    independent imports never share identities. The application's existing
    activity list is not consulted, so importing the same source twice
    creates two sets of activities.

    Example:
        >>> resolver = ActivityResolver()
        >>> first = resolver.get_or_create_id("Design")
        >>> first == resolver.get_or_create_id("  Design ")
        True
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        """
        Initialize an empty resolver.

        Args:
            id_factory: Returns the random part of new ids (defaults to generate_id)
        """
        self.id_factory = id_factory or generate_id
        self._by_name: Dict[str, Activity] = {}

    def __len__(self) -> int:
        return len(self._by_name)

    def get_or_create_id(self, name) -> str:
        """
        Resolve a name to an activity id.

        Args:
            name: Raw cell value holding the activity name

        Returns:
            Activity id, or "" for non-text, blank, "total" or "sum" names
        """
        if not isinstance(name, str):
            return ''
        clean = name.strip()
        if not clean or clean.lower() in SUMMARY_LABELS:
            return ''

        existing = self._by_name.get(clean)
        if existing is not None:
            return existing.id

        activity = Activity(
            id=f"act_{self.id_factory()}",
            name=clean,
            color=ACTIVITY_PALETTE[len(self._by_name) % len(ACTIVITY_PALETTE)],
            is_active=True,
            description='',
        )
        self._by_name[clean] = activity
        return activity.id

    def activities(self) -> List[Activity]:
        """Activities created so far, in creation order."""
        return list(self._by_name.values())
