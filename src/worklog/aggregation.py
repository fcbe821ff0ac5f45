"""Pure aggregation over logged activities: ranges, daily totals, overtime."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence

from .models import UNASSIGNED_LABEL, Activity, Project, WeeklyWorkHours

PRESETS: tuple[str, ...] = ("today", "week", "30days", "month", "this_week", "all", "custom")

_DAY_START = time(0, 0, 0, 0)
_DAY_END = time.max


@dataclass(slots=True)
class DayGroup:
    day: date
    activities: list[Activity] = field(default_factory=list)
    total_seconds: int = 0

    @property
    def hours(self) -> float:
        return self.total_seconds / 3600


@dataclass(slots=True)
class Totals:
    total_seconds: int
    sessions: int

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600


@dataclass(slots=True)
class DashboardStats:
    start: Optional[date]
    end: Optional[date]
    activities: list[Activity]
    groups: list[DayGroup]
    totals: Totals
    overtime_hours: float


def preset_range(
    preset: str,
    today: date,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> tuple[Optional[date], Optional[date]]:
    """Resolve a named range to inclusive ``(start, end)`` dates."""
    if preset == "today":
        return today, today
    if preset == "week":
        return today - timedelta(days=7), today
    if preset == "30days":
        return today - timedelta(days=30), today
    if preset == "month":
        return today.replace(day=1), today
    if preset == "this_week":
        return today - timedelta(days=today.weekday()), today
    if preset == "all":
        return None, None
    if preset == "custom":
        return start, end
    raise ValueError(f"Unknown range preset: {preset!r}")


def filter_by_range(
    activities: Iterable[Activity],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[Activity]:
    """Stopped activities whose start falls in ``[start, end]``, newest first."""
    lower = datetime.combine(start, _DAY_START) if start else None
    upper = datetime.combine(end, _DAY_END) if end else None
    selected = [
        activity
        for activity in activities
        if activity.end_time is not None
        and (lower is None or activity.start_time >= lower)
        and (upper is None or activity.start_time <= upper)
    ]
    selected.sort(key=lambda item: item.start_time, reverse=True)
    return selected


def group_by_day(activities: Iterable[Activity]) -> list[DayGroup]:
    groups: dict[date, DayGroup] = {}
    ordered = sorted(activities, key=lambda item: item.start_time, reverse=True)
    for activity in ordered:
        key = activity.start_time.date()
        group = groups.get(key)
        if group is None:
            group = groups[key] = DayGroup(day=key)
        group.activities.append(activity)
        group.total_seconds += activity.duration_seconds
    return sorted(groups.values(), key=lambda item: item.day, reverse=True)


def day_overtime(group: DayGroup, weekly_hours: WeeklyWorkHours) -> float:
    threshold = weekly_hours.hours_for(group.day)
    return max(group.hours - threshold, 0.0)


def compute_overtime(groups: Iterable[DayGroup], weekly_hours: WeeklyWorkHours) -> float:
    return sum(day_overtime(group, weekly_hours) for group in groups)


def compute_totals(activities: Sequence[Activity]) -> Totals:
    return Totals(
        total_seconds=sum(activity.duration_seconds for activity in activities),
        sessions=len(activities),
    )


def compute_stats(
    activities: Iterable[Activity],
    weekly_hours: WeeklyWorkHours,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> DashboardStats:
    selected = filter_by_range(activities, start, end)
    groups = group_by_day(selected)
    return DashboardStats(
        start=start,
        end=end,
        activities=selected,
        groups=groups,
        totals=compute_totals(selected),
        overtime_hours=compute_overtime(groups, weekly_hours),
    )


def resolve_project(projects: Iterable[Project], project_id: str) -> Optional[Project]:
    return next((project for project in projects if project.id == project_id), None)


def project_label(projects: Iterable[Project], project_id: str) -> str:
    project = resolve_project(projects, project_id)
    return project.name if project else UNASSIGNED_LABEL


def hours_by_project(
    activities: Iterable[Activity], projects: Sequence[Project]
) -> list[tuple[str, int]]:
    """Seconds per project name, largest first; dangling ids fold together."""
    totals: defaultdict[str, int] = defaultdict(int)
    for activity in activities:
        totals[project_label(projects, activity.project_id)] += activity.duration_seconds
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)
