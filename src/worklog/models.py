"""Domain models for logged work."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional


WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

PROJECT_COLORS: tuple[str, ...] = (
    "blue",
    "indigo",
    "purple",
    "pink",
    "rose",
    "orange",
    "amber",
    "emerald",
    "teal",
    "cyan",
)

NO_ACTIVITY_CODE = "---"
UNASSIGNED_LABEL = "Unassigned"


@dataclass(slots=True)
class Project:
    id: str
    name: str
    client: str
    color: str


@dataclass(slots=True)
class PredefinedActivity:
    """Glossary entry that can be picked as an activity code."""

    id: str
    code: str
    description: str


@dataclass(slots=True)
class Activity:
    """A single logged unit of work.

    ``end_time`` stays ``None`` while the timer is running.
    """

    id: str
    project_id: str
    activity_code: str
    description: str
    start_time: datetime
    end_time: Optional[datetime]
    duration_seconds: int

    @property
    def is_running(self) -> bool:
        return self.end_time is None


@dataclass(slots=True)
class WeeklyWorkHours:
    """Expected hours per weekday, used as the overtime threshold."""

    monday: float = 8.0
    tuesday: float = 8.0
    wednesday: float = 8.0
    thursday: float = 8.0
    friday: float = 8.0
    saturday: float = 0.0
    sunday: float = 0.0

    @classmethod
    def from_daily(cls, hours: float) -> "WeeklyWorkHours":
        return cls(
            monday=hours,
            tuesday=hours,
            wednesday=hours,
            thursday=hours,
            friday=hours,
        )

    def hours_for(self, day: date) -> float:
        return getattr(self, WEEKDAYS[day.weekday()])

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


DEFAULT_WEEKLY_HOURS = WeeklyWorkHours()

INITIAL_PROJECTS: tuple[Project, ...] = (
    Project(id="1", name="Internal Web Development", client="Company X", color="blue"),
    Project(id="2", name="Server Maintenance", client="Cloud Service", color="emerald"),
)
