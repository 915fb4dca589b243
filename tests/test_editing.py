"""
Tests for state editing operations.
"""

import pytest

from hours_tracker.editing import (
    add_activity,
    add_news,
    add_objective,
    change_month,
    set_activity_color,
    set_hours,
    set_objective_status,
    toggle_activity,
    update_objective_month,
)
from hours_tracker.models import (
    STATUS_BLOCKED,
    STATUS_IN_PROGRESS,
    Activity,
    AppState,
    MonthlyProgress,
    NewsItem,
    Objective,
    Settings,
)


@pytest.fixture
def state():
    return AppState(
        settings=Settings(hour_limit_per_day=10, current_month='2025-12'),
        activities=[Activity(id='act_1', name='Design'), Activity(id='act_2', name='Review')],
        objectives=[Objective(id='obj_1', description='Grow',
                              monthly_data={'2025-10': MonthlyProgress(0.2, 'start')})],
        news=[NewsItem(id='n1', date='2025-10-01', text='Old')],
        hours={'2025-10': {'act_1': {'2025-10-01': 4.0}}},
    )


class TestSetHours:
    """Tests for set_hours function."""

    def test_set_new_value(self, state):
        partial = set_hours(state, 'act_2', '2025-11-03', 2.5)

        assert partial.present_fields() == ['hours']
        assert partial.hours['2025-11'] == {'act_2': {'2025-11-03': 2.5}}
        assert partial.hours['2025-10'] == state.hours['2025-10']

    def test_input_not_mutated(self, state):
        set_hours(state, 'act_1', '2025-10-02', 3)
        assert state.hours == {'2025-10': {'act_1': {'2025-10-01': 4.0}}}

    def test_zero_removes_and_prunes(self, state):
        """Test that removing the last entry prunes emptied levels."""
        partial = set_hours(state, 'act_1', '2025-10-01', 0)
        assert partial.hours == {}

    def test_zero_on_missing_entry(self, state):
        partial = set_hours(state, 'act_2', '2025-10-05', 0)
        assert partial.hours == state.hours

    @pytest.mark.parametrize("hours", [-1, 10.5, float('nan'), float('inf')])
    def test_out_of_range(self, state, hours):
        with pytest.raises(ValueError):
            set_hours(state, 'act_1', '2025-10-01', hours)

    def test_invalid_day(self, state):
        with pytest.raises(ValueError, match="Invalid day"):
            set_hours(state, 'act_1', '01/10/2025', 1)


class TestActivities:
    """Tests for activity operations."""

    def test_add_activity(self, state):
        partial = add_activity(state, '  Writing ', description=' docs ')
        new = partial.activities[-1]

        assert len(partial.activities) == 3
        assert new.id.startswith('act_')
        assert new.name == 'Writing'
        assert new.description == 'docs'
        assert new.is_active is True

    def test_add_blank_activity(self, state):
        with pytest.raises(ValueError):
            add_activity(state, '   ')

    def test_toggle_activity(self, state):
        partial = toggle_activity(state, 'act_2')

        assert partial.activities[1].is_active is False
        assert partial.activities[0].is_active is True
        assert state.activities[1].is_active is True

    def test_set_color(self, state):
        partial = set_activity_color(state, 'act_1', '#ef4444')
        assert partial.activities[0].color == '#ef4444'

    def test_unknown_activity(self, state):
        with pytest.raises(KeyError):
            toggle_activity(state, 'act_9')
        with pytest.raises(KeyError):
            set_activity_color(state, 'act_9', '#000000')


class TestObjectives:
    """Tests for objective operations."""

    def test_add_objective(self, state):
        partial = add_objective(state, 'Ship it', target=3)
        new = partial.objectives[-1]

        assert new.id.startswith('obj_')
        assert new.target == 3.0
        assert new.status == STATUS_IN_PROGRESS
        assert new.monthly_data == {}

    def test_add_objective_invalid(self, state):
        with pytest.raises(ValueError):
            add_objective(state, '')
        with pytest.raises(ValueError):
            add_objective(state, 'X', target=0)

    def test_update_month_keeps_other_field(self, state):
        """Test that updating only the note keeps the progress."""
        partial = update_objective_month(state, 'obj_1', '2025-10', note='halfway')
        assert partial.objectives[0].monthly_data['2025-10'] == MonthlyProgress(0.2, 'halfway')
        assert state.objectives[0].monthly_data['2025-10'].note == 'start'

    def test_update_new_month(self, state):
        partial = update_objective_month(state, 'obj_1', '2025-11', progress=0.3)
        assert partial.objectives[0].monthly_data['2025-11'] == MonthlyProgress(0.3, '')

    def test_update_invalid(self, state):
        with pytest.raises(KeyError):
            update_objective_month(state, 'obj_9', '2025-10', progress=0.1)
        with pytest.raises(ValueError):
            update_objective_month(state, 'obj_1', 'October', progress=0.1)

    def test_set_status(self, state):
        partial = set_objective_status(state, 'obj_1', STATUS_BLOCKED)
        assert partial.objectives[0].status == STATUS_BLOCKED

    def test_set_unknown_status(self, state):
        with pytest.raises(ValueError):
            set_objective_status(state, 'obj_1', 'Done')
        with pytest.raises(KeyError):
            set_objective_status(state, 'obj_9', STATUS_BLOCKED)


class TestNewsAndMonth:
    """Tests for news entries and month navigation."""

    def test_add_news_is_prepended(self, state):
        partial = add_news(state, 'Launched', tags='web, seo,', day='2025-11-02')
        item = partial.news[0]

        assert item.text == 'Launched'
        assert item.tags == ['web', 'seo']
        assert item.date == '2025-11-02'
        assert partial.news[1].id == 'n1'

    def test_add_blank_news(self, state):
        with pytest.raises(ValueError):
            add_news(state, '  ')

    def test_change_month(self, state):
        assert change_month(state, 1).settings.current_month == '2026-01'
        assert change_month(state, -2).settings.current_month == '2025-10'
        assert state.settings.current_month == '2025-12'
