"""Pytest configuration for worklog tests."""

from datetime import datetime, timedelta
from itertools import count

import pytest

from worklog.lifecycle import ActivityManager
from worklog.models import Activity, Project
from worklog.state import WorklogState
from worklog.store import MemoryStore


@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def state(store):
    """State loaded from an empty store (seed projects, no activities)."""
    return WorklogState.load(store)


@pytest.fixture
def manager(state):
    """Activity manager with predictable ids."""
    ids = count(1)
    return ActivityManager(state, id_factory=lambda: f"act-{next(ids)}")


@pytest.fixture
def make_activity():
    """Build a stopped activity starting at ``start`` lasting ``seconds``."""

    def _make(activity_id, start, seconds, project_id="1", code="DEV"):
        return Activity(
            id=activity_id,
            project_id=project_id,
            activity_code=code,
            description=f"work {activity_id}",
            start_time=start,
            end_time=start + timedelta(seconds=seconds),
            duration_seconds=seconds,
        )

    return _make


@pytest.fixture
def projects():
    return [
        Project(id="1", name="Website", client="Acme", color="blue"),
        Project(id="2", name="Servers", client="Cloud", color="teal"),
    ]


@pytest.fixture
def morning():
    return datetime(2024, 3, 12, 9, 0, 0)
