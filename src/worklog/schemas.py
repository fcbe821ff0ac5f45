"""Pydantic models for the persisted and exchanged form of worklog records.

Field names use the camelCase keys of the browser-era backup files
(``projectId``, ``startTime``, ``weeklyHours`` ...), so existing backups load
unchanged.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from .models import Activity, PredefinedActivity, Project, WeeklyWorkHours


class RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectRecord(RecordModel):
    id: str
    name: str
    client: str = ""
    color: str = ""

    @classmethod
    def from_model(cls, project: Project) -> "ProjectRecord":
        return cls(
            id=project.id, name=project.name, client=project.client, color=project.color
        )

    def to_model(self) -> Project:
        return Project(id=self.id, name=self.name, client=self.client, color=self.color)


class PredefinedRecord(RecordModel):
    id: str
    code: str
    description: str = ""

    @classmethod
    def from_model(cls, entry: PredefinedActivity) -> "PredefinedRecord":
        return cls(id=entry.id, code=entry.code, description=entry.description)

    def to_model(self) -> PredefinedActivity:
        return PredefinedActivity(id=self.id, code=self.code, description=self.description)


class ActivityRecord(RecordModel):
    id: str
    project_id: str = ""
    activity_code: str = ""
    description: str = ""
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_seconds: int = Field(default=0, ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_local_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Older files stored UTC strings ending in "Z".
        if value is not None and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @classmethod
    def from_model(cls, activity: Activity) -> "ActivityRecord":
        return cls(
            id=activity.id,
            project_id=activity.project_id,
            activity_code=activity.activity_code,
            description=activity.description,
            start_time=activity.start_time,
            end_time=activity.end_time,
            duration_seconds=activity.duration_seconds,
        )

    def to_model(self) -> Activity:
        return Activity(
            id=self.id,
            project_id=self.project_id,
            activity_code=self.activity_code,
            description=self.description,
            start_time=self.start_time,
            end_time=self.end_time,
            duration_seconds=self.duration_seconds,
        )


class WeeklyHoursRecord(RecordModel):
    monday: float = Field(default=8.0, ge=0)
    tuesday: float = Field(default=8.0, ge=0)
    wednesday: float = Field(default=8.0, ge=0)
    thursday: float = Field(default=8.0, ge=0)
    friday: float = Field(default=8.0, ge=0)
    saturday: float = Field(default=0.0, ge=0)
    sunday: float = Field(default=0.0, ge=0)

    @classmethod
    def from_model(cls, hours: WeeklyWorkHours) -> "WeeklyHoursRecord":
        return cls(**hours.as_dict())

    def to_model(self) -> WeeklyWorkHours:
        return WeeklyWorkHours(**self.model_dump())


class BackupDocument(RecordModel):
    """Full snapshot; every top-level collection may be missing on import."""

    projects: Optional[list[ProjectRecord]] = None
    activities: Optional[list[ActivityRecord]] = None
    predefined: Optional[list[PredefinedRecord]] = None
    weekly_hours: Optional[WeeklyHoursRecord] = None


_PROJECTS = TypeAdapter(list[ProjectRecord])
_ACTIVITIES = TypeAdapter(list[ActivityRecord])
_PREDEFINED = TypeAdapter(list[PredefinedRecord])


def encode_projects(projects: Sequence[Project]) -> str:
    return _dump(_PROJECTS, [ProjectRecord.from_model(p) for p in projects])


def decode_projects(raw: str) -> list[Project]:
    return [record.to_model() for record in _PROJECTS.validate_json(raw)]


def encode_activities(activities: Sequence[Activity]) -> str:
    return _dump(_ACTIVITIES, [ActivityRecord.from_model(a) for a in activities])


def decode_activities(raw: str) -> list[Activity]:
    return [record.to_model() for record in _ACTIVITIES.validate_json(raw)]


def encode_predefined(entries: Sequence[PredefinedActivity]) -> str:
    return _dump(_PREDEFINED, [PredefinedRecord.from_model(e) for e in entries])


def decode_predefined(raw: str) -> list[PredefinedActivity]:
    return [record.to_model() for record in _PREDEFINED.validate_json(raw)]


def encode_weekly_hours(hours: WeeklyWorkHours) -> str:
    return WeeklyHoursRecord.from_model(hours).model_dump_json(by_alias=True)


def decode_weekly_hours(raw: str) -> WeeklyWorkHours:
    return WeeklyHoursRecord.model_validate_json(raw).to_model()


def _dump(adapter: TypeAdapter, records: list) -> str:
    return adapter.dump_json(records, by_alias=True).decode("utf-8")
