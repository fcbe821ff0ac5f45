"""Tests for range filtering, daily grouping and overtime."""

from datetime import date, datetime

import pytest

from worklog.aggregation import (
    DayGroup,
    compute_overtime,
    compute_stats,
    compute_totals,
    day_overtime,
    filter_by_range,
    group_by_day,
    hours_by_project,
    preset_range,
    project_label,
    resolve_project,
)
from worklog.models import Activity, WeeklyWorkHours


class TestFilterByRange:
    def test_running_activity_excluded(self, make_activity, morning):
        stopped = make_activity("a", morning, 3600)
        running = Activity(
            id="r",
            project_id="1",
            activity_code="",
            description="",
            start_time=morning,
            end_time=None,
            duration_seconds=0,
        )

        assert filter_by_range([stopped, running]) == [stopped]

    def test_bounds_are_inclusive_whole_days(self, make_activity):
        first_instant = make_activity("start", datetime(2024, 3, 10, 0, 0, 0), 60)
        last_instant = make_activity("end", datetime(2024, 3, 12, 23, 59, 59, 999000), 60)
        before = make_activity("before", datetime(2024, 3, 9, 23, 59, 59), 60)
        after = make_activity("after", datetime(2024, 3, 13, 0, 0, 0), 60)

        selected = filter_by_range(
            [first_instant, last_instant, before, after], date(2024, 3, 10), date(2024, 3, 12)
        )

        assert {a.id for a in selected} == {"start", "end"}

    def test_end_bound_includes_last_microsecond(self, make_activity):
        late = make_activity("late", datetime(2024, 3, 12, 23, 59, 59, 999500), 60)

        selected = filter_by_range([late], date(2024, 3, 12), date(2024, 3, 12))

        assert selected == [late]
        assert [g.day for g in group_by_day(selected)] == [date(2024, 3, 12)]

    def test_missing_bound_is_unbounded(self, make_activity):
        old = make_activity("old", datetime(2020, 1, 1, 9), 60)
        new = make_activity("new", datetime(2024, 3, 12, 9), 60)

        assert {a.id for a in filter_by_range([old, new], start=date(2024, 1, 1))} == {"new"}
        assert {a.id for a in filter_by_range([old, new], end=date(2023, 1, 1))} == {"old"}

    def test_uses_start_time_not_end_time(self, make_activity):
        overnight = make_activity("late", datetime(2024, 3, 11, 23, 0), 7200)

        assert filter_by_range([overnight], date(2024, 3, 12), date(2024, 3, 12)) == []

    def test_sorted_most_recent_first(self, make_activity):
        a = make_activity("a", datetime(2024, 3, 10, 9), 60)
        b = make_activity("b", datetime(2024, 3, 12, 9), 60)
        c = make_activity("c", datetime(2024, 3, 11, 9), 60)

        assert [x.id for x in filter_by_range([a, b, c])] == ["b", "c", "a"]


class TestGroupByDay:
    def test_three_days_three_groups(self, make_activity):
        activities = [
            make_activity("a", datetime(2024, 3, 10, 9), 3600),
            make_activity("b", datetime(2024, 3, 12, 9), 1800),
            make_activity("c", datetime(2024, 3, 11, 9), 600),
            make_activity("d", datetime(2024, 3, 12, 14), 7200),
            make_activity("e", datetime(2024, 3, 10, 15), 900),
        ]

        groups = group_by_day(activities)

        assert [g.day for g in groups] == [date(2024, 3, 12), date(2024, 3, 11), date(2024, 3, 10)]
        for group in groups:
            assert group.total_seconds == sum(a.duration_seconds for a in group.activities)
        assert groups[0].total_seconds == 9000
        assert [a.id for a in groups[0].activities] == ["d", "b"]

    def test_empty(self):
        assert group_by_day([]) == []


class TestOvertime:
    def test_tuesday_ten_hours_gives_two(self, make_activity):
        # 2024-03-12 is a Tuesday.
        groups = group_by_day([make_activity("a", datetime(2024, 3, 12, 8), 10 * 3600)])

        assert compute_overtime(groups, WeeklyWorkHours()) == pytest.approx(2.0)

    def test_below_threshold_contributes_zero(self, make_activity):
        groups = group_by_day([make_activity("a", datetime(2024, 3, 12, 8), 4 * 3600)])

        assert compute_overtime(groups, WeeklyWorkHours()) == 0.0

    def test_weekend_threshold_is_zero_by_default(self, make_activity):
        saturday = group_by_day([make_activity("a", datetime(2024, 3, 16, 8), 5400)])

        assert compute_overtime(saturday, WeeklyWorkHours()) == pytest.approx(1.5)

    def test_summed_across_days(self, make_activity):
        groups = group_by_day(
            [
                make_activity("mon", datetime(2024, 3, 11, 8), 9 * 3600),
                make_activity("tue", datetime(2024, 3, 12, 8), 6 * 3600),
                make_activity("wed", datetime(2024, 3, 13, 8), 11 * 3600),
            ]
        )

        assert compute_overtime(groups, WeeklyWorkHours()) == pytest.approx(4.0)

    def test_custom_schedule(self, make_activity):
        hours = WeeklyWorkHours(tuesday=6)
        group = DayGroup(day=date(2024, 3, 12), total_seconds=7 * 3600)

        assert day_overtime(group, hours) == pytest.approx(1.0)

    def test_absent_days_are_not_overtime(self):
        assert compute_overtime([], WeeklyWorkHours()) == 0


class TestTotals:
    def test_totals(self, make_activity, morning):
        totals = compute_totals(
            [make_activity("a", morning, 3600), make_activity("b", morning, 1800)]
        )

        assert totals.total_seconds == 5400
        assert totals.total_hours == 1.5
        assert totals.sessions == 2

    def test_compute_stats_combines(self, make_activity):
        activities = [
            make_activity("in", datetime(2024, 3, 12, 8), 10 * 3600),
            make_activity("out", datetime(2024, 2, 1, 8), 10 * 3600),
        ]

        stats = compute_stats(activities, WeeklyWorkHours(), date(2024, 3, 1), date(2024, 3, 31))

        assert [a.id for a in stats.activities] == ["in"]
        assert stats.totals.sessions == 1
        assert stats.overtime_hours == pytest.approx(2.0)
        assert len(stats.groups) == 1


class TestPresets:
    today = date(2024, 3, 14)  # Thursday

    def test_today(self):
        assert preset_range("today", self.today) == (self.today, self.today)

    def test_week(self):
        assert preset_range("week", self.today) == (date(2024, 3, 7), self.today)

    def test_thirty_days(self):
        assert preset_range("30days", self.today) == (date(2024, 2, 13), self.today)

    def test_month(self):
        assert preset_range("month", self.today) == (date(2024, 3, 1), self.today)

    def test_this_week_starts_monday(self):
        assert preset_range("this_week", self.today) == (date(2024, 3, 11), self.today)
        assert preset_range("this_week", date(2024, 3, 17)) == (date(2024, 3, 11), date(2024, 3, 17))

    def test_all_and_custom(self):
        assert preset_range("all", self.today) == (None, None)
        assert preset_range("custom", self.today, date(2024, 1, 1), None) == (date(2024, 1, 1), None)

    def test_unknown(self):
        with pytest.raises(ValueError):
            preset_range("fortnight", self.today)


class TestProjectResolution:
    def test_dangling_project_is_unassigned(self, projects, make_activity, morning):
        activities = [
            make_activity("a", morning, 3600, project_id="1"),
            make_activity("b", morning, 1800, project_id="deleted"),
            make_activity("c", morning, 600, project_id="gone"),
        ]

        assert resolve_project(projects, "deleted") is None
        assert project_label(projects, "deleted") == "Unassigned"
        assert project_label(projects, "2") == "Servers"
        assert hours_by_project(activities, projects) == [("Website", 3600), ("Unassigned", 2400)]
