"""Tests for project, glossary and schedule management."""

import random

import pytest

from worklog.aggregation import compute_stats, project_label
from worklog.catalog import (
    add_predefined,
    add_project,
    delete_predefined,
    delete_project,
    pick_color,
    set_weekly_hours,
    update_project,
)
from worklog.exceptions import PredefinedNotFound, ProjectNotFound
from worklog.models import PROJECT_COLORS, Project, WeeklyWorkHours
from worklog.state import WorklogState


def _yes(title, message):
    return True


def _no(title, message):
    return False


class TestProjects:
    def test_add_project_avoids_previous_color(self, state):
        for seed in range(50):
            previous = state.projects[-1].color
            project = add_project(state, f"P{seed}", "Client", rng=random.Random(seed))
            assert project.color != previous
            assert project.color in PROJECT_COLORS

    def test_pick_color_without_projects(self):
        assert pick_color([], random.Random(0)) in PROJECT_COLORS

    def test_add_project_persists(self, state, store):
        project = add_project(state, "  New  ", " Client ")

        assert project.name == "New"
        assert project.client == "Client"
        assert WorklogState.load(store).find_project(project.id) is not None

    def test_update_project(self, state):
        update_project(state, Project(id="1", name="Renamed", client="C", color="blue"))

        assert state.find_project("1").name == "Renamed"

    def test_update_unknown_project(self, state):
        with pytest.raises(ProjectNotFound):
            update_project(state, Project(id="zzz", name="x", client="", color="blue"))

    def test_delete_does_not_cascade(self, state, manager):
        activity = manager.add_manual_activity("1", "DEV", "", "2024-03-15", 3600)

        assert delete_project(state, "1", _yes) is True

        assert state.find_project("1") is None
        assert state.find_activity(activity.id).project_id == "1"
        assert project_label(state.projects, "1") == "Unassigned"
        stats = compute_stats(state.activities, state.weekly_hours)
        assert stats.totals.sessions == 1

    def test_declined_delete(self, state):
        assert delete_project(state, "1", _no) is False
        assert state.find_project("1") is not None


class TestGlossary:
    def test_add_and_delete(self, state, store):
        entry = add_predefined(state, " DEV ", " Development ")

        assert (entry.code, entry.description) == ("DEV", "Development")
        assert delete_predefined(state, entry.id, _yes) is True
        assert WorklogState.load(store).predefined == []

    def test_declined_delete(self, state):
        entry = add_predefined(state, "OPS", "Operations")

        assert delete_predefined(state, entry.id, _no) is False
        assert state.predefined == [entry]

    def test_delete_unknown(self, state):
        with pytest.raises(PredefinedNotFound):
            delete_predefined(state, "missing", _yes)


class TestWeeklyHours:
    def test_set_weekly_hours(self, state, store):
        set_weekly_hours(state, WeeklyWorkHours(monday=6, saturday=2))

        reloaded = WorklogState.load(store)
        assert reloaded.weekly_hours.monday == 6
        assert reloaded.weekly_hours.saturday == 2

    def test_negative_hours_rejected(self, state):
        with pytest.raises(ValueError):
            set_weekly_hours(state, WeeklyWorkHours(sunday=-1))
        assert state.weekly_hours == WeeklyWorkHours()
