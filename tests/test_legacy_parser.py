"""
Tests for the legacy monthly report parser.

This module tests the individual detectors as well as full parses of
minimal report bundles.
"""

import itertools
from datetime import datetime

import pytest

from hours_tracker.activity_resolver import ActivityResolver
from hours_tracker.legacy_parser import (
    LegacyReportParser,
    MonthSheet,
    default_layout,
    find_activity_column,
    find_header_row,
    find_objectives_start,
    find_sheet,
    is_objectives_header,
    looks_like_legacy,
    map_date_columns,
    parse_legacy_report,
)
from hours_tracker.models import STATUS_COMPLETED, STATUS_IN_PROGRESS


# Serials of 2025-10-01 .. 2025-10-04
OCT_1, OCT_2, OCT_3, OCT_4 = 45931, 45932, 45933, 45934


@pytest.fixture
def resolver():
    counter = itertools.count(1)
    return ActivityResolver(id_factory=lambda: str(next(counter)))


def main_sheet(*rows):
    return {"Marcel 2025 monthly report": [list(r) for r in rows]}


class TestDefaultLayout:
    """Tests for default_layout function."""

    def test_default_months(self):
        """Test the October to December layout."""
        layout = default_layout(2025)
        assert [m.sheet_fragment for m in layout.months] == [
            'hours october', 'hours november', 'hours december'
        ]
        assert [m.month_key for m in layout.months] == ['2025-10', '2025-11', '2025-12']
        assert layout.objectives_marker == 'objectives for 2025'

    def test_custom_year_and_months(self):
        """Test a layout for other months."""
        layout = default_layout(2026, [1, 2])
        assert layout.months[1] == MonthSheet('hours february', 2, 2026)
        assert layout.objectives_marker == 'objectives for 2026'


class TestDetectors:
    """Tests for the detector functions."""

    def test_looks_like_legacy(self):
        """Test sheet name markers."""
        assert looks_like_legacy(["Sheet1", "Hours October"])
        assert looks_like_legacy(["Marcel 2025 Monthly Report"])
        assert not looks_like_legacy(["activities", "hours"])

    def test_find_sheet_case_insensitive(self):
        """Test case-insensitive fragment lookup."""
        sheets = {"Summary": [[1]], "HOURS November": [["x"]]}
        assert find_sheet(sheets, "hours november") == [["x"]]
        assert find_sheet(sheets, "hours october") is None

    def test_header_row_needs_four_dates(self):
        """Test the date-count rule."""
        matrix = [
            ["Hours October"],
            ["Task", OCT_1, OCT_2, OCT_3],
            ["Task", OCT_1, OCT_2, OCT_3, OCT_4],
        ]
        assert find_header_row(matrix, 10) == 2

    def test_header_row_with_activity_label(self):
        """Test that an activity label plus a date qualifies."""
        matrix = [["Activity", "1-Nov", "2-Nov"], ["Design", 4, 1]]
        assert find_header_row(matrix, 11) == 0

    def test_header_row_earliest_wins(self):
        """Test that the first qualifying row is used."""
        row = ["Task", OCT_1, OCT_2, OCT_3, OCT_4]
        assert find_header_row([row, list(row)], 10) == 0

    def test_header_row_wrong_month(self):
        """Test that dates of another month do not count."""
        matrix = [["Task", OCT_1, OCT_2, OCT_3, OCT_4]]
        assert find_header_row(matrix, 11) is None

    def test_header_row_search_is_limited(self):
        """Test that only the first ten rows are searched."""
        matrix = [[] for _ in range(10)] + [["Task", OCT_1, OCT_2, OCT_3, OCT_4]]
        assert find_header_row(matrix, 10) is None

    def test_activity_column_label_wins(self):
        """Test that an activity header beats column 0."""
        assert find_activity_column(["Week", "Activity name", "1-Nov"]) == 1

    def test_activity_column_defaults_to_text_column_zero(self):
        """Test the column 0 fallback."""
        assert find_activity_column(["Task", OCT_1]) == 0
        assert find_activity_column([None, OCT_1]) is None

    def test_map_date_columns(self):
        """Test column to day key mapping."""
        header = ["Activity", "1-Nov", "bad", "30-Nov", "1-Dec"]
        columns = map_date_columns(header, MonthSheet("hours november", 11, 2025))
        assert columns == {1: '2025-11-01', 3: '2025-11-30'}

    def test_find_objectives_start(self):
        """Test the marker search."""
        matrix = [["Intro"], ["OBJECTIVES FOR 2025 (team)"], ["x"]]
        assert find_objectives_start(matrix, "objectives for 2025") == 2
        assert find_objectives_start(matrix, "objectives for 2026") is None

    def test_is_objectives_header(self):
        """Test caption row detection."""
        assert is_objectives_header(["Objective", "Target", "Status"])
        assert is_objectives_header(["Goals"])
        assert not is_objectives_header(["Improve X", None, None, 0.1])


class TestHoursExtraction:
    """Tests for hours sheet parsing."""

    def test_minimal_bundle(self, resolver):
        """Test the smallest useful hours sheet."""
        sheets = {"Hours November": [["Activity", "1-Nov", "2-Nov"], ["Design", 4, "3,5"]]}

        partial = parse_legacy_report(sheets, resolver=resolver)

        design_id = resolver.get_or_create_id("Design")
        assert partial.hours["2025-11"][design_id]["2025-11-01"] == 4
        assert partial.hours["2025-11"][design_id]["2025-11-02"] == 3.5
        assert [a.name for a in partial.activities] == ["Design"]
        assert partial.objectives is None
        assert partial.news is None

    def test_sparse_values(self, resolver):
        """Test that zero, blank and unparseable cells are omitted."""
        sheets = {"Hours October": [
            ["Hours October 2025"],
            [],
            ["Task", OCT_1, OCT_2, OCT_3, OCT_4],
            ["Newsletter", 2, "", "1,5", 0],
            ["Website", "n/a", None, 0.0, "2"],
            ["Total", 2, 0, 1.5, 2],
        ]}

        partial = parse_legacy_report(sheets, resolver=resolver)

        newsletter = resolver.get_or_create_id("Newsletter")
        website = resolver.get_or_create_id("Website")
        assert partial.hours["2025-10"][newsletter] == {'2025-10-01': 2.0, '2025-10-03': 1.5}
        assert partial.hours["2025-10"][website] == {'2025-10-04': 2.0}
        assert len(partial.activities) == 2

    def test_record_sheet(self, resolver):
        """Test sheets given as keyed records."""
        sheets = {"Hours November": [
            {"Activity": "Design", "1-Nov": 4, "2-Nov": 1},
            {"Activity": "Review", "2-Nov": "2,5"},
        ]}

        partial = parse_legacy_report(sheets, resolver=resolver)

        review = resolver.get_or_create_id("Review")
        assert partial.hours["2025-11"][review] == {'2025-11-02': 2.5}

    def test_datetime_header_cells(self, resolver):
        """Test headers read from a workbook as datetime values."""
        header = ["Activity"] + [datetime(2025, 12, d) for d in range(1, 5)]
        sheets = {"Hours December": [header, ["Design", 1, 2, 3, 4]]}

        partial = parse_legacy_report(sheets, resolver=resolver)

        design = resolver.get_or_create_id("Design")
        assert partial.hours["2025-12"][design]["2025-12-04"] == 4

    def test_same_activity_across_months(self, resolver):
        """Test that one name maps to one id across sheets."""
        sheets = {
            "Hours October": [["Activity", "1-Oct"], ["Design", 1]],
            "Hours November": [["Activity", "1-Nov"], ["Design", 2]],
        }

        partial = parse_legacy_report(sheets, resolver=resolver)

        assert len(partial.activities) == 1
        design = partial.activities[0].id
        assert partial.hours["2025-10"][design] == {'2025-10-01': 1.0}
        assert partial.hours["2025-11"][design] == {'2025-11-01': 2.0}

    def test_missing_header_yields_nothing(self, resolver):
        """Test that a sheet without a header row is skipped."""
        sheets = {"Hours October": [["Notes"], ["Design", 1, 2]]}

        partial = parse_legacy_report(sheets, resolver=resolver)

        assert partial.is_empty()

    def test_unconfigured_month_ignored(self, resolver):
        """Test that sheets outside the layout are not read."""
        sheets = {"Hours March": [["Activity", "1-Mar"], ["Design", 1]]}
        assert parse_legacy_report(sheets, resolver=resolver).is_empty()

    def test_shared_resolver_reuses_ids(self, resolver):
        """Test a caller-owned resolver across two parses."""
        sheets = {"Hours November": [["Activity", "1-Nov"], ["Design", 4]]}

        first = LegacyReportParser(resolver=resolver).parse(sheets)
        second = LegacyReportParser(resolver=resolver).parse(sheets)

        assert first.activities[0].id == second.activities[0].id


class TestObjectivesExtraction:
    """Tests for objectives parsing."""

    def test_objective_below_threshold(self):
        """Test an objective whose progress sums to less than 0.99."""
        sheets = main_sheet(
            ["Objectives for 2025"],
            ["Improve X", None, None, 0.1, "note1", 0.2, "note2", 0.3, "note3"],
            ["News of the month"],
        )

        partial = parse_legacy_report(sheets)

        assert len(partial.objectives) == 1
        objective = partial.objectives[0]
        assert objective.description == "Improve X"
        assert objective.target == 1
        assert objective.status == STATUS_IN_PROGRESS
        assert objective.monthly_data['2025-10'].progress == 0.1
        assert objective.monthly_data['2025-10'].note == 'note1'
        assert objective.monthly_data['2025-11'].progress == 0.2
        assert objective.monthly_data['2025-12'].progress == 0.3
        assert objective.monthly_data['2025-12'].note == 'note3'
        assert objective.id.startswith('obj_')

    def test_objective_completed(self):
        """Test the completion heuristic."""
        sheets = main_sheet(
            ["Objectives for 2025"],
            ["Ship the redesign", None, None, 0.5, "", 0.3, "", 0.2, ""],
        )

        objective = parse_legacy_report(sheets).objectives[0]

        assert objective.status == STATUS_COMPLETED

    def test_caption_row_is_skipped(self):
        """Test that the column caption row is not an objective."""
        sheets = main_sheet(
            ["Objectives for 2025"],
            ["Objective", "Target", "Status", "October", "Note", "November", "Note"],
            ["Write the documentation", None, None, 0.1],
        )

        objectives = parse_legacy_report(sheets).objectives

        assert [o.description for o in objectives] == ["Write the documentation"]

    def test_non_numeric_progress_and_missing_cells(self):
        """Test defaults for text progress and short rows."""
        sheets = main_sheet(
            ["Objectives for 2025"],
            ["Improve images", None, None, "50%", 12],
        )

        objective = parse_legacy_report(sheets).objectives[0]

        assert objective.monthly_data['2025-10'].progress == 0
        assert objective.monthly_data['2025-10'].note == '12'
        assert objective.monthly_data['2025-12'].note == ''

    def test_duplicates_and_short_rows_skipped(self):
        """Test exact-duplicate and short descriptions."""
        sheets = main_sheet(
            ["Objectives for 2025"],
            ["Improve X", None, None, 0.1],
            ["Improve X", None, None, 0.5],
            ["abc"],
            [42],
            [],
        )

        objectives = parse_legacy_report(sheets).objectives

        assert len(objectives) == 1
        assert objectives[0].monthly_data['2025-10'].progress == 0.1

    def test_news_marker_ends_block(self):
        """Test that rows after the news marker are not objectives."""
        sheets = main_sheet(
            ["Objectives for 2025"],
            ["Improve X"],
            ["News of the month"],
            ["Something long enough"],
        )

        objectives = parse_legacy_report(sheets).objectives

        assert [o.description for o in objectives] == ["Improve X"]

    def test_no_marker(self):
        """Test a main sheet without an objectives block."""
        partial = parse_legacy_report(main_sheet(["Improve X"]))

        assert partial.objectives is None
        assert partial.news is None


class TestNewsExtraction:
    """Tests for news parsing."""

    def test_serial_dated_rows(self):
        """Test rows with a serial date and text."""
        sheets = main_sheet(
            ["News of the month"],
            [45950, "Found a fix for the sticky header"],
            [45986, "Majestic backlinks report"],
        )

        news = parse_legacy_report(sheets).news

        assert [(n.date, n.text) for n in news] == [
            ('2025-10-20', "Found a fix for the sticky header"),
            ('2025-11-25', "Majestic backlinks report"),
        ]
        assert news[0].tags == []
        assert news[0].id.startswith('news_')

    def test_rows_that_are_not_news(self):
        """Test small numbers, missing text and non-text bodies."""
        sheets = main_sheet(
            [12, "Row number, not a date"],
            [45950],
            [45950, 3.5],
            [45950, ""],
        )

        assert parse_legacy_report(sheets).news is None

    def test_datetime_dated_rows(self):
        """Test news dated with datetime cells."""
        sheets = main_sheet([datetime(2025, 12, 25), "Husqvarna sticker"])

        news = parse_legacy_report(sheets).news

        assert news[0].date == '2025-12-25'


class TestMalformedBundles:
    """Tests for bundles whose structure does not match a sheet grid."""

    @pytest.mark.parametrize("sheet", [5, {"a": 1}, "text", None, [1, 2, 3]])
    def test_sheet_that_is_not_a_grid(self, sheet):
        """Test that a non-grid sheet value is skipped."""
        assert parse_legacy_report({"Hours November": sheet}).is_empty()

    def test_null_row_in_hours_sheet(self, resolver):
        """Test that a null row between data rows is skipped."""
        sheets = {"Hours November": [["Activity", "1-Nov", "2-Nov"], None, ["Design", 4, 1]]}

        partial = parse_legacy_report(sheets, resolver=resolver)

        design = resolver.get_or_create_id("Design")
        assert partial.hours["2025-11"][design] == {'2025-11-01': 4.0, '2025-11-02': 1.0}

    def test_null_row_in_main_sheet(self):
        sheets = {"Marcel 2025 monthly report": [
            ["Objectives for 2025"],
            None,
            ["Improve the website"],
            None,
            [45931, "Launch"],
        ]}

        partial = parse_legacy_report(sheets)

        assert [o.description for o in partial.objectives] == ["Improve the website"]
        assert [n.text for n in partial.news] == ["Launch"]

    def test_out_of_range_serials(self):
        """Test that huge numbers are not dates and do not abort the parse."""
        sheets = {
            "Marcel 2025 monthly report": [[45931, "Launch"], [12500000, "budget"]],
            "Hours October": [[99999999, "Activity", "1-Oct"], [None, "Design", 3]],
        }

        partial = parse_legacy_report(sheets)

        assert [n.date for n in partial.news] == ['2025-10-01']
        assert partial.hours["2025-10"][partial.activities[0].id] == {'2025-10-01': 3.0}


class TestEmptyResults:
    """Tests for sheets that are found but hold nothing usable."""

    def test_main_sheet_without_content(self):
        """Test that an unrelated main sheet supplies nothing."""
        sheets = main_sheet(["Some title"], ["unrelated", "cells"])
        assert parse_legacy_report(sheets).is_empty()

    def test_news_only_keeps_objectives_unsupplied(self):
        partial = parse_legacy_report(main_sheet([45931, "Launch"]))

        assert partial.objectives is None
        assert len(partial.news) == 1

    def test_header_without_activity_rows(self, resolver):
        """Test that a header alone supplies no hours."""
        sheets = {"Hours November": [["Activity", "1-Nov", "2-Nov"], ["Total", 4, 1]]}
        assert parse_legacy_report(sheets, resolver=resolver).is_empty()
