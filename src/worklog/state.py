"""In-memory worklog state loaded from, and saved to, a key/value store."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError

from .models import (
    INITIAL_PROJECTS,
    Activity,
    PredefinedActivity,
    Project,
    WeeklyWorkHours,
)
from .schemas import (
    decode_activities,
    decode_predefined,
    decode_projects,
    decode_weekly_hours,
    encode_activities,
    encode_predefined,
    encode_projects,
    encode_weekly_hours,
)
from .store import KeyValueStore

logger = logging.getLogger(__name__)

PROJECTS_KEY = "wl_projects"
ACTIVITIES_KEY = "wl_activities"
PREDEFINED_KEY = "wl_predefined"
WEEKLY_HOURS_KEY = "wl_weekly_hours"
LEGACY_DAILY_HOURS_KEY = "wl_daily_hours"

T = TypeVar("T")


def _default_projects() -> list[Project]:
    return [
        Project(id=p.id, name=p.name, client=p.client, color=p.color)
        for p in INITIAL_PROJECTS
    ]


@dataclass(slots=True)
class WorklogState:
    """Owns the four collections and writes each one back after a change."""

    store: KeyValueStore
    projects: list[Project] = field(default_factory=_default_projects)
    activities: list[Activity] = field(default_factory=list)
    predefined: list[PredefinedActivity] = field(default_factory=list)
    weekly_hours: WeeklyWorkHours = field(default_factory=WeeklyWorkHours)

    @classmethod
    def load(cls, store: KeyValueStore) -> "WorklogState":
        state = cls(store=store)
        state.reload()
        return state

    def reload(self) -> None:
        """Reinitialize every collection from the store."""
        self.projects = _read(self.store, PROJECTS_KEY, decode_projects, _default_projects)
        self.activities = _read(self.store, ACTIVITIES_KEY, decode_activities, list)
        self.predefined = _read(self.store, PREDEFINED_KEY, decode_predefined, list)
        self.weekly_hours = _read(
            self.store,
            WEEKLY_HOURS_KEY,
            decode_weekly_hours,
            lambda: _legacy_weekly_hours(self.store),
        )
        logger.debug(
            "Loaded %d projects, %d activities, %d glossary entries.",
            len(self.projects),
            len(self.activities),
            len(self.predefined),
        )

    def save_projects(self) -> None:
        self.store.set(PROJECTS_KEY, encode_projects(self.projects))

    def save_activities(self) -> None:
        self.store.set(ACTIVITIES_KEY, encode_activities(self.activities))

    def save_predefined(self) -> None:
        self.store.set(PREDEFINED_KEY, encode_predefined(self.predefined))

    def save_weekly_hours(self) -> None:
        self.store.set(WEEKLY_HOURS_KEY, encode_weekly_hours(self.weekly_hours))

    def save_all(self) -> None:
        self.save_projects()
        self.save_activities()
        self.save_predefined()
        self.save_weekly_hours()

    def find_activity(self, activity_id: str) -> Optional[Activity]:
        return next((a for a in self.activities if a.id == activity_id), None)

    def find_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)


def _read(
    store: KeyValueStore,
    key: str,
    decode: Callable[[str], T],
    default: Callable[[], T],
) -> T:
    raw = store.get(key)
    if raw is None:
        return default()
    try:
        return decode(raw)
    except ValidationError:
        logger.warning("Stored document %r is unreadable; using defaults.", key)
        return default()


def _legacy_weekly_hours(store: KeyValueStore) -> WeeklyWorkHours:
    raw = store.get(LEGACY_DAILY_HOURS_KEY)
    if raw is None:
        return WeeklyWorkHours()
    try:
        hours = float(raw)
    except ValueError:
        logger.warning("Legacy daily hours %r is not a number; ignoring.", raw)
        return WeeklyWorkHours()
    if not math.isfinite(hours) or hours < 0:
        logger.warning("Legacy daily hours %r is out of range; ignoring.", raw)
        return WeeklyWorkHours()
    logger.info("Migrating legacy daily hours (%s) to a weekly schedule.", hours)
    return WeeklyWorkHours.from_daily(hours)
