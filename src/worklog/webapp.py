"""FastAPI application that exposes the worklog over a local JSON API."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from .aggregation import (
    PRESETS,
    DashboardStats,
    compute_stats,
    day_overtime,
    hours_by_project,
    preset_range,
    project_label,
)
from .assistant import parse_activity_input, summarize_work
from .backup import BACKUP_FILENAME, dump_backup, import_backup
from .catalog import (
    add_predefined,
    add_project,
    delete_predefined,
    delete_project,
    set_weekly_hours,
    update_project,
)
from .config import AppSettings
from .exceptions import (
    ActivityNotFound,
    BackupImportError,
    InvalidActivityUpdate,
    MultipleRunningActivities,
    PredefinedNotFound,
    ProjectNotFound,
    WorklogError,
)
from .lifecycle import ActivityManager, elapsed_seconds
from .models import NO_ACTIVITY_CODE, Activity, Project
from .reporting import format_duration, round_hours
from .schemas import ActivityRecord, PredefinedRecord, ProjectRecord, WeeklyHoursRecord
from .state import WorklogState
from .store import KeyValueStore, SqliteStore

logger = logging.getLogger(__name__)


class TimerStartPayload(BaseModel):
    project_id: str = Field(min_length=1)
    activity_code: str = ""
    description: str = ""

    model_config = ConfigDict(extra="forbid")


class ManualActivityPayload(BaseModel):
    project_id: str = Field(min_length=1)
    activity_code: str = ""
    description: str = ""
    day: date
    duration_seconds: int = Field(gt=0)

    model_config = ConfigDict(extra="forbid")


class ProjectPayload(BaseModel):
    name: str = Field(min_length=1)
    client: str = ""

    model_config = ConfigDict(extra="forbid")


class PredefinedPayload(BaseModel):
    code: str = Field(min_length=1)
    description: str = Field(min_length=1)

    model_config = ConfigDict(extra="forbid")


class ParsePayload(BaseModel):
    text: str = Field(min_length=1)
    day: Optional[date] = None

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    store: Optional[KeyValueStore] = None,
    settings: Optional[AppSettings] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_settings = settings or AppSettings.from_env()
    resolved_store = store or SqliteStore(resolved_settings.resolved_db_path())
    state = WorklogState.load(resolved_store)
    manager = ActivityManager(state)
    lock = threading.Lock()

    app = FastAPI(title="Worklog", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.worklog = state

    @app.on_event("startup")
    async def _startup() -> None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        store_obj = request.app.state.worklog.store
        return {
            "database_path": str(getattr(store_obj, "db_path", "")) or None,
            "assistant_enabled": resolved_settings.assistant_enabled,
            "timer_running": _active_or_409(manager) is not None,
        }

    @app.get("/api/state")
    def full_state() -> Dict[str, Any]:
        return {
            "projects": [_project_payload(p) for p in state.projects],
            "activities": [_activity_payload(a, state.projects) for a in state.activities],
            "predefined": [
                PredefinedRecord.from_model(e).model_dump(mode="json") for e in state.predefined
            ],
            "weekly_hours": state.weekly_hours.as_dict(),
        }

    @app.get("/api/timer")
    def timer() -> Dict[str, Any]:
        active = _active_or_409(manager)
        if active is None:
            return {"running": False, "activity": None, "elapsed_seconds": 0}
        return {
            "running": True,
            "activity": _activity_payload(active, state.projects),
            "elapsed_seconds": elapsed_seconds(active, datetime.now()),
        }

    @app.post("/api/timer/start", status_code=201)
    def start_timer(payload: TimerStartPayload) -> Dict[str, Any]:
        with lock:
            try:
                activity = manager.start_timer(
                    payload.project_id, payload.activity_code, payload.description
                )
            except MultipleRunningActivities as exc:
                raise HTTPException(status_code=409, detail=str(exc)) from exc
        if activity is None:
            raise HTTPException(status_code=409, detail="A timer is already running.")
        return _activity_payload(activity, state.projects)

    @app.post("/api/timer/stop")
    def stop_timer() -> Dict[str, Any]:
        with lock:
            try:
                activity = manager.stop_timer()
            except MultipleRunningActivities as exc:
                raise HTTPException(status_code=409, detail=str(exc)) from exc
        if activity is None:
            return {"stopped": False, "activity": None}
        return {"stopped": True, "activity": _activity_payload(activity, state.projects)}

    @app.post("/api/activities", status_code=201)
    def add_activity(payload: ManualActivityPayload) -> Dict[str, Any]:
        with lock:
            activity = manager.add_manual_activity(
                payload.project_id,
                payload.activity_code or NO_ACTIVITY_CODE,
                payload.description,
                payload.day.isoformat(),
                payload.duration_seconds,
            )
        return _activity_payload(activity, state.projects)

    @app.put("/api/activities/{activity_id}")
    def edit_activity(activity_id: str, payload: ManualActivityPayload) -> Dict[str, Any]:
        with lock:
            try:
                activity = manager.edit_activity(
                    activity_id,
                    project_id=payload.project_id,
                    activity_code=payload.activity_code,
                    description=payload.description,
                    date_str=payload.day.isoformat(),
                    duration_seconds=payload.duration_seconds,
                )
            except ActivityNotFound as exc:
                raise HTTPException(status_code=404, detail="Activity not found") from exc
            except InvalidActivityUpdate as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _activity_payload(activity, state.projects)

    @app.delete("/api/activities/{activity_id}")
    def delete_activity(
        activity_id: str,
        confirm: bool = Query(default=False, description="Confirm the deletion."),
    ) -> Dict[str, Any]:
        with lock:
            try:
                deleted = manager.delete_activity(activity_id, lambda *_: confirm)
            except ActivityNotFound as exc:
                raise HTTPException(status_code=404, detail="Activity not found") from exc
        if not deleted:
            raise _confirmation_required("This action cannot be undone.")
        return {"deleted": activity_id}

    @app.get("/api/overview")
    def overview(
        preset: str = Query(default="month", description=f"One of {', '.join(PRESETS)}."),
        start: Optional[date] = Query(default=None, description="Start date (custom preset)."),
        end: Optional[date] = Query(default=None, description="End date (custom preset)."),
    ) -> Dict[str, Any]:
        try:
            range_start, range_end = preset_range(preset, date.today(), start, end)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if range_start and range_end and range_end < range_start:
            raise HTTPException(
                status_code=400, detail="end date must be on or after start date"
            )
        stats = compute_stats(state.activities, state.weekly_hours, range_start, range_end)
        return _overview_payload(stats, state)

    @app.get("/api/projects")
    def list_projects() -> Dict[str, Any]:
        return {"projects": [_project_payload(p) for p in state.projects]}

    @app.post("/api/projects", status_code=201)
    def create_project(payload: ProjectPayload) -> Dict[str, Any]:
        with lock:
            project = add_project(state, payload.name, payload.client)
        return _project_payload(project)

    @app.put("/api/projects/{project_id}")
    def rename_project(project_id: str, payload: ProjectPayload) -> Dict[str, Any]:
        with lock:
            existing = state.find_project(project_id)
            if existing is None:
                raise HTTPException(status_code=404, detail="Project not found")
            updated = Project(
                id=project_id,
                name=payload.name.strip(),
                client=payload.client.strip(),
                color=existing.color,
            )
            update_project(state, updated)
        return _project_payload(updated)

    @app.delete("/api/projects/{project_id}")
    def remove_project(project_id: str, confirm: bool = Query(default=False)) -> Dict[str, Any]:
        with lock:
            try:
                deleted = delete_project(state, project_id, lambda *_: confirm)
            except ProjectNotFound as exc:
                raise HTTPException(status_code=404, detail="Project not found") from exc
        if not deleted:
            raise _confirmation_required("Activities will keep a dangling project reference.")
        return {"deleted": project_id}

    @app.get("/api/predefined")
    def list_predefined() -> Dict[str, Any]:
        return {
            "predefined": [
                PredefinedRecord.from_model(e).model_dump(mode="json") for e in state.predefined
            ]
        }

    @app.post("/api/predefined", status_code=201)
    def create_predefined(payload: PredefinedPayload) -> Dict[str, Any]:
        with lock:
            entry = add_predefined(state, payload.code, payload.description)
        return PredefinedRecord.from_model(entry).model_dump(mode="json")

    @app.delete("/api/predefined/{entry_id}")
    def remove_predefined(entry_id: str, confirm: bool = Query(default=False)) -> Dict[str, Any]:
        with lock:
            try:
                deleted = delete_predefined(state, entry_id, lambda *_: confirm)
            except PredefinedNotFound as exc:
                raise HTTPException(status_code=404, detail="Glossary entry not found") from exc
        if not deleted:
            raise _confirmation_required("The entry will no longer be selectable.")
        return {"deleted": entry_id}

    @app.get("/api/weekly-hours")
    def get_weekly_hours() -> Dict[str, Any]:
        return state.weekly_hours.as_dict()

    @app.put("/api/weekly-hours")
    def put_weekly_hours(payload: WeeklyHoursRecord) -> Dict[str, Any]:
        with lock:
            hours = set_weekly_hours(state, payload.to_model())
        return hours.as_dict()

    @app.get("/api/backup")
    def export_endpoint() -> Response:
        return Response(
            content=dump_backup(state),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{BACKUP_FILENAME}"'},
        )

    @app.post("/api/backup")
    def import_endpoint(
        document: Dict[str, Any] = Body(...),
        confirm: bool = Query(default=False, description="Confirm overwriting all data."),
    ) -> Dict[str, Any]:
        with lock:
            try:
                restored = import_backup(
                    state, document, require_confirmation=True, confirm=lambda *_: confirm
                )
            except BackupImportError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
        if not restored:
            raise _confirmation_required("Restoring will overwrite all current data.")
        return {
            "restored": True,
            "projects": len(state.projects),
            "activities": len(state.activities),
            "predefined": len(state.predefined),
        }

    @app.post("/api/assistant/summary")
    async def assistant_summary(
        preset: str = Query(default="month"),
        start: Optional[date] = Query(default=None),
        end: Optional[date] = Query(default=None),
    ) -> Dict[str, Any]:
        try:
            range_start, range_end = preset_range(preset, date.today(), start, end)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        stats = compute_stats(state.activities, state.weekly_hours, range_start, range_end)
        if not stats.activities:
            raise HTTPException(status_code=400, detail="No activities in the selected period.")
        report = await summarize_work(stats.activities, list(state.projects), resolved_settings)
        return {"report": report}

    @app.post("/api/assistant/parse", status_code=201)
    async def assistant_parse(payload: ParsePayload) -> Dict[str, Any]:
        parsed = await parse_activity_input(payload.text, list(state.projects), resolved_settings)
        if parsed is None:
            raise HTTPException(
                status_code=422, detail="The entry could not be interpreted."
            )
        day = payload.day or date.today()
        with lock:
            activity = manager.add_manual_activity(
                parsed.project_id,
                parsed.code,
                parsed.description,
                day.isoformat(),
                parsed.duration_seconds,
            )
        return _activity_payload(activity, state.projects)

    @app.exception_handler(WorklogError)
    async def _worklog_error(request: Request, exc: WorklogError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def _active_or_409(manager: ActivityManager) -> Optional[Activity]:
    try:
        return manager.active_activity()
    except MultipleRunningActivities as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def _confirmation_required(message: str) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"Confirmation required: {message} Repeat the request with confirm=true.",
    )


def _project_payload(project: Project) -> Dict[str, Any]:
    return ProjectRecord.from_model(project).model_dump(mode="json")


def _activity_payload(activity: Activity, projects: list[Project]) -> Dict[str, Any]:
    payload = ActivityRecord.from_model(activity).model_dump(mode="json")
    payload["project_name"] = project_label(projects, activity.project_id)
    payload["duration_label"] = format_duration(activity.duration_seconds)
    return payload


def _overview_payload(stats: DashboardStats, state: WorklogState) -> Dict[str, Any]:
    return {
        "start": stats.start.isoformat() if stats.start else None,
        "end": stats.end.isoformat() if stats.end else None,
        "totals": {
            "total_seconds": stats.totals.total_seconds,
            "total_hours": round_hours(stats.totals.total_hours),
            "overtime_hours": round_hours(stats.overtime_hours),
            "sessions": stats.totals.sessions,
        },
        "days": [
            {
                "date": group.day.isoformat(),
                "total_seconds": group.total_seconds,
                "total_label": format_duration(group.total_seconds),
                "over_threshold": day_overtime(group, state.weekly_hours) > 0,
                "activities": [_activity_payload(a, state.projects) for a in group.activities],
            }
            for group in stats.groups
        ],
        "project_totals": [
            {"project_name": name, "seconds": seconds}
            for name, seconds in hours_by_project(stats.activities, state.projects)
        ],
    }
