"""Formatting helpers and console rendering for CLI output."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Sequence

from .aggregation import DashboardStats, day_overtime, hours_by_project, project_label
from .lifecycle import elapsed_seconds
from .models import Activity, Project, WeeklyWorkHours


def format_duration(seconds: float) -> str:
    """Render as ``"Xh Ym"``, truncating leftover seconds."""
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes = remainder // 60
    return f"{hours}h {minutes}m"


def format_clock(seconds: float) -> str:
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def round_hours(hours: float) -> float:
    """One decimal place, halves rounded up."""
    return math.floor(hours * 10 + 0.5) / 10


def format_hours_label(hours: float) -> str:
    whole = math.floor(hours)
    minutes = math.floor((hours - whole) * 60 + 0.5)
    if whole == 0:
        return f"{minutes} min"
    if minutes == 0:
        return f"{whole} h"
    return f"{whole} h {minutes} min"


def format_day_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    return day.strftime("%A %d %B")


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, projects: Sequence[Project], weekly_hours: WeeklyWorkHours) -> None:
        self.projects = list(projects)
        self.weekly_hours = weekly_hours

    def print_stats(self, stats: DashboardStats, today: date) -> None:
        start = stats.start.isoformat() if stats.start else "beginning"
        end = stats.end.isoformat() if stats.end else "now"
        print(f"Summary from {start} to {end}")
        print("-" * 40)
        print(f"Total time: {round_hours(stats.totals.total_hours)} h")
        print(f"Overtime:   {round_hours(stats.overtime_hours)} h")
        print(f"Sessions:   {stats.totals.sessions}")

        per_project = hours_by_project(stats.activities, self.projects)
        if per_project:
            print()
            print("By project:")
            for name, seconds in per_project[:10]:
                print(f"  {name[:30]:<30} {format_duration(seconds)}")

        self.print_log(stats, today)

    def print_log(self, stats: DashboardStats, today: date) -> None:
        if not stats.groups:
            print("No activity recorded in the selected period.")
            return
        for group in stats.groups:
            marker = " +" if day_overtime(group, self.weekly_hours) > 0 else ""
            print()
            print(
                f"{format_day_label(group.day, today)}  "
                f"total {format_duration(group.total_seconds)}{marker}"
            )
            for activity in group.activities:
                print("  " + self.describe(activity))

    def print_running(self, activity: Optional[Activity], now: datetime) -> None:
        if activity is None:
            print("No timer running.")
            return
        print(f"Running: {self.describe(activity)}")
        print(f"Elapsed: {format_clock(elapsed_seconds(activity, now))}")

    def describe(self, activity: Activity) -> str:
        label = project_label(self.projects, activity.project_id)
        details = activity.description or "No details"
        duration = "running" if activity.is_running else format_duration(activity.duration_seconds)
        return f"{activity.id[:8]}  {label[:24]:<24} [{activity.activity_code}] {details[:40]:<40} {duration}"
