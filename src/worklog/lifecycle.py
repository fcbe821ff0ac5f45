"""Create, start, stop, edit and delete activities."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from .exceptions import ActivityNotFound, InvalidActivityUpdate, MultipleRunningActivities
from .models import NO_ACTIVITY_CODE, Activity
from .state import WorklogState

logger = logging.getLogger(__name__)

MIN_TIMER_SECONDS = 900
MANUAL_END_HOUR = 18
DATE_FMT = "%Y-%m-%d"

# Shown to the user before an irreversible action; returns True to proceed.
ConfirmCallback = Callable[[str, str], bool]

DELETE_ACTIVITY_PROMPT = (
    "Delete activity",
    "Are you sure you want to delete this activity from the log? "
    "This action cannot be undone.",
)


def new_id() -> str:
    return uuid.uuid4().hex


def manual_end_time(date_str: str) -> datetime:
    """Manual entries end at 18:00 local time on their day."""
    day = datetime.strptime(date_str, DATE_FMT)
    return day.replace(hour=MANUAL_END_HOUR, minute=0, second=0, microsecond=0)


def elapsed_seconds(activity: Activity, now: datetime) -> int:
    """Running time for display; never written back to the activity."""
    end = activity.end_time or now
    return max(int((end - activity.start_time).total_seconds()), 0)


class ActivityManager:
    """Owns the "at most one running activity" rule."""

    def __init__(
        self,
        state: WorklogState,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.state = state
        self._clock = clock
        self._id_factory = id_factory

    def _now(self) -> datetime:
        return self._clock() if self._clock is not None else datetime.now()

    def active_activity(self) -> Optional[Activity]:
        running = [a for a in self.state.activities if a.is_running]
        if len(running) > 1:
            raise MultipleRunningActivities([a.id for a in running])
        return running[0] if running else None

    def start_timer(
        self, project_id: str, activity_code: str, description: str
    ) -> Optional[Activity]:
        """Start a new timer; returns None if one is already running."""
        current = self.active_activity()
        if current is not None:
            logger.warning(
                "Timer %s is already running; start request ignored.", current.id
            )
            return None

        activity = Activity(
            id=self._id_factory(),
            project_id=project_id,
            activity_code=activity_code,
            description=description or "",
            start_time=self._now(),
            end_time=None,
            duration_seconds=0,
        )
        self.state.activities.append(activity)
        self.state.save_activities()
        logger.info("Started timer %s for project %s.", activity.id, project_id)
        return activity

    def stop_timer(self) -> Optional[Activity]:
        current = self.active_activity()
        if current is None:
            return None

        end = self._now()
        elapsed = int((end - current.start_time).total_seconds())
        current.end_time = end
        current.duration_seconds = max(elapsed, MIN_TIMER_SECONDS)
        self.state.save_activities()
        logger.info(
            "Stopped timer %s after %ds (recorded %ds).",
            current.id,
            elapsed,
            current.duration_seconds,
        )
        return current

    def add_manual_activity(
        self,
        project_id: str,
        activity_code: str,
        description: str,
        date_str: str,
        duration_seconds: int,
    ) -> Activity:
        if duration_seconds < 0:
            raise ValueError("duration_seconds must be non-negative")
        end = manual_end_time(date_str)
        activity = Activity(
            id=self._id_factory(),
            project_id=project_id,
            activity_code=activity_code,
            description=description,
            start_time=end - timedelta(seconds=duration_seconds),
            end_time=end,
            duration_seconds=duration_seconds,
        )
        self.state.activities.append(activity)
        self.state.save_activities()
        logger.info("Logged %ds on %s for project %s.", duration_seconds, date_str, project_id)
        return activity

    def update_activity(self, updated: Activity) -> Activity:
        """Replace the stored record with the same id."""
        for index, existing in enumerate(self.state.activities):
            if existing.id != updated.id:
                continue
            if updated.is_running and not existing.is_running:
                raise InvalidActivityUpdate(updated.id, "a stopped activity cannot restart")
            if updated.duration_seconds < 0:
                raise InvalidActivityUpdate(updated.id, "duration must be non-negative")
            self.state.activities[index] = updated
            self.state.save_activities()
            return updated
        raise ActivityNotFound(updated.id)

    def edit_activity(
        self,
        activity_id: str,
        *,
        project_id: str,
        activity_code: str,
        description: str,
        date_str: str,
        duration_seconds: int,
    ) -> Activity:
        existing = self.state.find_activity(activity_id)
        if existing is None:
            raise ActivityNotFound(activity_id)
        if existing.is_running:
            raise InvalidActivityUpdate(activity_id, "stop the timer before editing it")
        end = manual_end_time(date_str)
        updated = replace(
            existing,
            project_id=project_id,
            activity_code=activity_code or NO_ACTIVITY_CODE,
            description=description.strip(),
            start_time=end - timedelta(seconds=duration_seconds),
            end_time=end,
            duration_seconds=duration_seconds,
        )
        return self.update_activity(updated)

    def delete_activity(self, activity_id: str, confirm: ConfirmCallback) -> bool:
        """Remove an activity once the user confirms; declining changes nothing."""
        if self.state.find_activity(activity_id) is None:
            raise ActivityNotFound(activity_id)
        if not confirm(*DELETE_ACTIVITY_PROMPT):
            return False
        self.state.activities = [a for a in self.state.activities if a.id != activity_id]
        self.state.save_activities()
        logger.info("Deleted activity %s.", activity_id)
        return True
