"""Tests for duration formatting and console summaries."""

from datetime import date, datetime

from worklog.aggregation import compute_stats
from worklog.models import WeeklyWorkHours
from worklog.reporting import (
    SummaryPrinter,
    format_clock,
    format_duration,
    format_hours_label,
    round_hours,
)


class TestFormatDuration:
    def test_hours_and_minutes(self):
        assert format_duration(5400) == "1h 30m"

    def test_under_a_minute(self):
        assert format_duration(59) == "0h 0m"

    def test_minutes_truncate(self):
        assert format_duration(3600 + 59 * 60 + 59) == "1h 59m"

    def test_long_durations(self):
        assert format_duration(30 * 3600) == "30h 0m"


def test_round_hours_half_up():
    assert round_hours(1.25) == 1.3
    assert round_hours(1.24) == 1.2
    assert round_hours(0.05) == 0.1
    assert round_hours(7.0) == 7.0


def test_format_hours_label():
    assert format_hours_label(0.5) == "30 min"
    assert format_hours_label(2) == "2 h"
    assert format_hours_label(2.5) == "2 h 30 min"


def test_format_clock():
    assert format_clock(3725) == "01:02:05"


class TestSummaryPrinter:
    def test_print_stats(self, capsys, projects, make_activity):
        activities = [
            make_activity("aaaaaaaa1", datetime(2024, 3, 12, 8), 10 * 3600, project_id="1"),
            make_activity("bbbbbbbb2", datetime(2024, 3, 11, 8), 1800, project_id="missing"),
        ]
        stats = compute_stats(activities, WeeklyWorkHours(), date(2024, 3, 1), date(2024, 3, 31))

        SummaryPrinter(projects, WeeklyWorkHours()).print_stats(stats, date(2024, 3, 12))

        out = capsys.readouterr().out
        assert "Total time: 10.5 h" in out
        assert "Overtime:   2.0 h" in out
        assert "Sessions:   2" in out
        assert "Today  total 10h 0m +" in out
        assert "Unassigned" in out

    def test_print_log_empty(self, capsys, projects):
        stats = compute_stats([], WeeklyWorkHours())

        SummaryPrinter(projects, WeeklyWorkHours()).print_log(stats, date(2024, 3, 12))

        assert "No activity recorded" in capsys.readouterr().out

    def test_print_running(self, capsys, projects, manager):
        activity = manager.start_timer("1", "DEV", "api")
        activity.start_time = datetime(2024, 3, 12, 9, 0, 0)

        SummaryPrinter(projects, WeeklyWorkHours()).print_running(
            activity, datetime(2024, 3, 12, 10, 0, 5)
        )

        out = capsys.readouterr().out
        assert "Running:" in out
        assert "Elapsed: 01:00:05" in out
