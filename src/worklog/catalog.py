"""Manage projects, the activity-code glossary and the weekly schedule."""

from __future__ import annotations

import logging
import random
from typing import Optional

from .exceptions import PredefinedNotFound, ProjectNotFound
from .lifecycle import ConfirmCallback, new_id
from .models import PROJECT_COLORS, PredefinedActivity, Project, WeeklyWorkHours
from .state import WorklogState

logger = logging.getLogger(__name__)

DELETE_PROJECT_PROMPT = (
    "Delete project",
    "Are you sure you want to delete this project? Its activities will be kept "
    "but will no longer reference a project.",
)
DELETE_PREDEFINED_PROMPT = (
    "Delete glossary entry",
    "Are you sure you want to remove this activity from the glossary? "
    "It will no longer be available for quick selection.",
)


def pick_color(projects: list[Project], rng: Optional[random.Random] = None) -> str:
    """Pick a random color that differs from the last project's color."""
    last_color = projects[-1].color if projects else None
    choices = [color for color in PROJECT_COLORS if color != last_color]
    return (rng or random).choice(choices)


def add_project(
    state: WorklogState,
    name: str,
    client: str,
    *,
    rng: Optional[random.Random] = None,
) -> Project:
    project = Project(
        id=new_id(),
        name=name.strip(),
        client=client.strip(),
        color=pick_color(state.projects, rng),
    )
    state.projects.append(project)
    state.save_projects()
    logger.info("Added project %s (%s).", project.id, project.name)
    return project


def update_project(state: WorklogState, project: Project) -> Project:
    for index, existing in enumerate(state.projects):
        if existing.id == project.id:
            state.projects[index] = project
            state.save_projects()
            return project
    raise ProjectNotFound(project.id)


def delete_project(state: WorklogState, project_id: str, confirm: ConfirmCallback) -> bool:
    """Remove a project; activities keep their now dangling reference."""
    if state.find_project(project_id) is None:
        raise ProjectNotFound(project_id)
    if not confirm(*DELETE_PROJECT_PROMPT):
        return False
    state.projects = [p for p in state.projects if p.id != project_id]
    state.save_projects()
    logger.info("Deleted project %s.", project_id)
    return True


def add_predefined(state: WorklogState, code: str, description: str) -> PredefinedActivity:
    entry = PredefinedActivity(id=new_id(), code=code.strip(), description=description.strip())
    state.predefined.append(entry)
    state.save_predefined()
    return entry


def delete_predefined(state: WorklogState, entry_id: str, confirm: ConfirmCallback) -> bool:
    if not any(entry.id == entry_id for entry in state.predefined):
        raise PredefinedNotFound(entry_id)
    if not confirm(*DELETE_PREDEFINED_PROMPT):
        return False
    state.predefined = [entry for entry in state.predefined if entry.id != entry_id]
    state.save_predefined()
    return True


def set_weekly_hours(state: WorklogState, hours: WeeklyWorkHours) -> WeeklyWorkHours:
    negative = [day for day, value in hours.as_dict().items() if value < 0]
    if negative:
        raise ValueError(f"Weekly hours must be non-negative: {', '.join(negative)}")
    state.weekly_hours = hours
    state.save_weekly_hours()
    return hours
