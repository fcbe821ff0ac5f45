"""Command-line interface for the worklog."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from pathlib import Path
from typing import NoReturn, Optional

import typer

from .config import AppSettings
from .exceptions import WorklogError
from .models import NO_ACTIVITY_CODE, WeeklyWorkHours
from .state import WorklogState
from .store import SqliteStore

app = typer.Typer(help="Single-user timesheet: timers, manual entries and overtime.")

DB_OPTION = typer.Option(
    None,
    "--db",
    path_type=Path,
    envvar="WORKLOG_DB",
    help="Location of the worklog SQLite database.",
)


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _settings(db_path: Optional[Path]) -> AppSettings:
    settings = AppSettings.from_env()
    if db_path is not None:
        settings.db_path = db_path
    return settings


def _load_state(db_path: Optional[Path]) -> WorklogState:
    return WorklogState.load(SqliteStore(_settings(db_path).resolved_db_path()))


def _confirmer(assume_yes: bool):
    def confirm(title: str, message: str) -> bool:
        if assume_yes:
            return True
        return typer.confirm(f"{title}: {message}", default=False)

    return confirm


def _parse_day(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid date {value!r}; expected YYYY-MM-DD.") from exc


def _resolve_activity_id(state: WorklogState, prefix: str) -> str:
    matches = [a.id for a in state.activities if a.id.startswith(prefix)]
    if len(matches) != 1:
        _fail(f"No unique activity matches {prefix!r}.")
    return matches[0]


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


@app.command()
def start(
    project_id: str = typer.Argument(..., help="Project to log time against."),
    code: str = typer.Option("", "--code", "-c", help="Activity code."),
    description: str = typer.Option("", "--description", "-d", help="Free-text details."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Start a timer."""
    from .lifecycle import ActivityManager
    from .reporting import SummaryPrinter

    state = _load_state(db_path)
    if state.find_project(project_id) is None:
        _fail(f"Unknown project {project_id!r}.")
    try:
        activity = ActivityManager(state).start_timer(project_id, code, description)
    except WorklogError as exc:
        _fail(str(exc))
    if activity is None:
        _fail("A timer is already running; stop it first.")
    typer.echo("Started: " + SummaryPrinter(state.projects, state.weekly_hours).describe(activity))


@app.command()
def stop(db_path: Optional[Path] = DB_OPTION) -> None:
    """Stop the running timer (at least 15 minutes are recorded)."""
    from .lifecycle import ActivityManager
    from .reporting import SummaryPrinter

    state = _load_state(db_path)
    try:
        activity = ActivityManager(state).stop_timer()
    except WorklogError as exc:
        _fail(str(exc))
    if activity is None:
        typer.echo("No timer running.")
        return
    typer.echo("Stopped: " + SummaryPrinter(state.projects, state.weekly_hours).describe(activity))


@app.command()
def status(db_path: Optional[Path] = DB_OPTION) -> None:
    """Show the running timer and its elapsed time."""
    from .lifecycle import ActivityManager
    from .reporting import SummaryPrinter

    state = _load_state(db_path)
    try:
        active = ActivityManager(state).active_activity()
    except WorklogError as exc:
        _fail(str(exc))
    SummaryPrinter(state.projects, state.weekly_hours).print_running(active, datetime.now())


@app.command()
def add(
    project_id: str = typer.Argument(..., help="Project to log time against."),
    hours: float = typer.Option(8.0, "--hours", min=0.5, max=18.0, help="Duration in hours."),
    day: Optional[str] = typer.Option(None, "--date", help="Day (YYYY-MM-DD). Defaults to today."),
    code: str = typer.Option("", "--code", "-c", help="Activity code."),
    description: str = typer.Option("", "--description", "-d", help="Free-text details."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Log a manual entry ending at 18:00 on the chosen day."""
    from .lifecycle import ActivityManager
    from .reporting import SummaryPrinter

    target = _parse_day(day) or date.today()
    state = _load_state(db_path)
    if state.find_project(project_id) is None:
        _fail(f"Unknown project {project_id!r}.")
    activity = ActivityManager(state).add_manual_activity(
        project_id,
        code or NO_ACTIVITY_CODE,
        description,
        target.isoformat(),
        int(hours * 3600),
    )
    typer.echo("Added: " + SummaryPrinter(state.projects, state.weekly_hours).describe(activity))


@app.command()
def edit(
    activity_id: str = typer.Argument(..., help="Activity id or unique prefix."),
    project_id: Optional[str] = typer.Option(None, "--project", help="New project id."),
    hours: Optional[float] = typer.Option(None, "--hours", min=0.5, max=18.0, help="New duration."),
    day: Optional[str] = typer.Option(None, "--date", help="New day (YYYY-MM-DD)."),
    code: Optional[str] = typer.Option(None, "--code", "-c", help="New activity code."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New details."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Rewrite a stopped activity; it is pinned to 18:00 on its day."""
    from .lifecycle import ActivityManager
    from .reporting import SummaryPrinter

    state = _load_state(db_path)
    existing = state.find_activity(_resolve_activity_id(state, activity_id))
    target = _parse_day(day) or existing.start_time.date()
    try:
        activity = ActivityManager(state).edit_activity(
            existing.id,
            project_id=project_id or existing.project_id,
            activity_code=existing.activity_code if code is None else code,
            description=existing.description if description is None else description,
            date_str=target.isoformat(),
            duration_seconds=int(hours * 3600) if hours is not None else existing.duration_seconds,
        )
    except WorklogError as exc:
        _fail(str(exc))
    typer.echo("Updated: " + SummaryPrinter(state.projects, state.weekly_hours).describe(activity))


@app.command()
def delete(
    activity_id: str = typer.Argument(..., help="Activity id or unique prefix."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Delete an activity from the log."""
    from .lifecycle import ActivityManager

    state = _load_state(db_path)
    target = _resolve_activity_id(state, activity_id)
    if ActivityManager(state).delete_activity(target, _confirmer(yes)):
        typer.echo(f"Deleted {target}.")
    else:
        typer.echo("Nothing deleted.")


@app.command()
def log(
    preset: str = typer.Option("all", "--range", help="all, this_week or month."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """List stopped activities grouped by day, most recent first."""
    from .aggregation import compute_stats, preset_range
    from .reporting import SummaryPrinter

    state = _load_state(db_path)
    today = date.today()
    try:
        start_day, end_day = preset_range(preset, today)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    stats = compute_stats(state.activities, state.weekly_hours, start_day, end_day)
    SummaryPrinter(state.projects, state.weekly_hours).print_log(stats, today)


@app.command()
def stats(
    preset: str = typer.Option(
        "month", "--range", help="today, week, 30days, month, this_week, all or custom."
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Custom start (YYYY-MM-DD)."),
    end: Optional[str] = typer.Option(None, "--end", help="Custom end (YYYY-MM-DD)."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Print totals, overtime and the daily log for a date range."""
    from .aggregation import compute_stats, preset_range
    from .reporting import SummaryPrinter

    state = _load_state(db_path)
    today = date.today()
    try:
        start_day, end_day = preset_range(preset, today, _parse_day(start), _parse_day(end))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    result = compute_stats(state.activities, state.weekly_hours, start_day, end_day)
    SummaryPrinter(state.projects, state.weekly_hours).print_stats(result, today)


@app.command()
def projects(db_path: Optional[Path] = DB_OPTION) -> None:
    """List projects."""
    state = _load_state(db_path)
    for project in state.projects:
        typer.echo(f"{project.id:<32} {project.name:<30} {project.client:<20} {project.color}")


@app.command("project-add")
def project_add(
    name: str = typer.Argument(..., help="Project name."),
    client: str = typer.Option("", "--client", help="Client name."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Create a project."""
    from .catalog import add_project

    if not name.strip():
        raise typer.BadParameter("Project name is required.")
    project = add_project(_load_state(db_path), name, client)
    typer.echo(f"Added project {project.id} ({project.name}).")


@app.command("project-delete")
def project_delete(
    project_id: str = typer.Argument(..., help="Project id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Delete a project; its activities are kept as unassigned."""
    from .catalog import delete_project

    try:
        deleted = delete_project(_load_state(db_path), project_id, _confirmer(yes))
    except WorklogError as exc:
        _fail(str(exc))
    typer.echo(f"Deleted project {project_id}." if deleted else "Nothing deleted.")


@app.command()
def glossary(db_path: Optional[Path] = DB_OPTION) -> None:
    """List predefined activity codes."""
    state = _load_state(db_path)
    if not state.predefined:
        typer.echo("The glossary is empty.")
    for entry in state.predefined:
        typer.echo(f"{entry.id:<32} {entry.code:<12} {entry.description}")


@app.command("glossary-add")
def glossary_add(
    code: str = typer.Argument(..., help="Short activity code."),
    description: str = typer.Argument(..., help="What the code stands for."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Add an activity code to the glossary."""
    from .catalog import add_predefined

    if not code.strip() or not description.strip():
        raise typer.BadParameter("Both code and description are required.")
    entry = add_predefined(_load_state(db_path), code, description)
    typer.echo(f"Added {entry.code} ({entry.id}).")


@app.command("glossary-delete")
def glossary_delete(
    entry_id: str = typer.Argument(..., help="Glossary entry id."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Remove an activity code from the glossary."""
    from .catalog import delete_predefined

    try:
        deleted = delete_predefined(_load_state(db_path), entry_id, _confirmer(yes))
    except WorklogError as exc:
        _fail(str(exc))
    typer.echo(f"Deleted {entry_id}." if deleted else "Nothing deleted.")


@app.command()
def hours(
    monday: Optional[float] = typer.Option(None, min=0, max=24),
    tuesday: Optional[float] = typer.Option(None, min=0, max=24),
    wednesday: Optional[float] = typer.Option(None, min=0, max=24),
    thursday: Optional[float] = typer.Option(None, min=0, max=24),
    friday: Optional[float] = typer.Option(None, min=0, max=24),
    saturday: Optional[float] = typer.Option(None, min=0, max=24),
    sunday: Optional[float] = typer.Option(None, min=0, max=24),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Show or change the expected hours per weekday."""
    from .catalog import set_weekly_hours

    state = _load_state(db_path)
    changes = {
        name: value
        for name, value in {
            "monday": monday,
            "tuesday": tuesday,
            "wednesday": wednesday,
            "thursday": thursday,
            "friday": friday,
            "saturday": saturday,
            "sunday": sunday,
        }.items()
        if value is not None
    }
    if changes:
        merged = {**state.weekly_hours.as_dict(), **changes}
        set_weekly_hours(state, WeeklyWorkHours(**merged))
    for name, value in state.weekly_hours.as_dict().items():
        typer.echo(f"{name.capitalize():<10} {value:g} h")


@app.command("export")
def export_command(
    output: Path = typer.Option(
        Path("worklog_backup.json"), "--output", "-o", path_type=Path, help="Backup file."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Write a full JSON backup."""
    from .backup import dump_backup

    output.write_text(dump_backup(_load_state(db_path)), encoding="utf-8")
    typer.echo(f"Backup written to {output}.")


@app.command("import")
def import_command(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, path_type=Path),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Restore a JSON backup, overwriting the collections it contains."""
    from .backup import import_backup

    state = _load_state(db_path)
    try:
        restored = import_backup(
            state,
            source.read_text(encoding="utf-8"),
            require_confirmation=True,
            confirm=_confirmer(yes),
        )
    except WorklogError as exc:
        _fail(str(exc))
    if restored:
        typer.echo(
            f"Restored {len(state.projects)} projects, {len(state.activities)} activities, "
            f"{len(state.predefined)} glossary entries."
        )
    else:
        typer.echo("Restore cancelled; nothing changed.")


@app.command()
def report(
    preset: str = typer.Option("month", "--range", help="Range preset to summarize."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Ask the assistant for a written report of the selected range."""
    from .aggregation import filter_by_range, preset_range
    from .assistant import summarize_work

    settings = _settings(db_path)
    state = WorklogState.load(SqliteStore(settings.resolved_db_path()))
    try:
        start_day, end_day = preset_range(preset, date.today())
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    selected = filter_by_range(state.activities, start_day, end_day)
    if not selected:
        typer.echo("No activity recorded in the selected period.")
        return
    typer.echo(asyncio.run(summarize_work(selected, state.projects, settings)))


@app.command()
def parse(
    text: str = typer.Argument(..., help='e.g. "two hours of code review on the website"'),
    day: Optional[str] = typer.Option(None, "--date", help="Day (YYYY-MM-DD). Defaults to today."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Log an entry described in natural language."""
    from .assistant import parse_activity_input
    from .lifecycle import ActivityManager
    from .reporting import SummaryPrinter

    target = _parse_day(day) or date.today()
    settings = _settings(db_path)
    state = WorklogState.load(SqliteStore(settings.resolved_db_path()))
    parsed = asyncio.run(parse_activity_input(text, state.projects, settings))
    if parsed is None:
        _fail("The entry could not be interpreted (assistant unavailable or unclear input).")
    activity = ActivityManager(state).add_manual_activity(
        parsed.project_id,
        parsed.code,
        parsed.description,
        target.isoformat(),
        parsed.duration_seconds,
    )
    typer.echo("Added: " + SummaryPrinter(state.projects, state.weekly_hours).describe(activity))


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    db_path: Optional[Path] = DB_OPTION,
    open_browser: bool = typer.Option(
        True,
        "--open-browser/--no-open-browser",
        help="Automatically launch the API docs in your default browser.",
    ),
) -> None:
    """Start the local JSON API."""
    from .server_runner import run_dashboard

    run_dashboard(
        host=host,
        port=port,
        settings=_settings(db_path),
        open_browser=open_browser,
    )
