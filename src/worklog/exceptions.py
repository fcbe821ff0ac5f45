"""Exceptions raised by the worklog domain."""


class WorklogError(Exception):
    """Base exception for worklog errors."""


class ActivityNotFound(WorklogError):
    def __init__(self, activity_id: str) -> None:
        self.activity_id = activity_id
        super().__init__(f"No activity found for id={activity_id}")


class ProjectNotFound(WorklogError):
    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"No project found for id={project_id}")


class PredefinedNotFound(WorklogError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"No glossary entry found for id={entry_id}")


class MultipleRunningActivities(WorklogError):
    """More than one activity has no end time."""

    def __init__(self, activity_ids: list[str]) -> None:
        self.activity_ids = activity_ids
        super().__init__(
            f"Expected at most one running activity, found {len(activity_ids)}: "
            + ", ".join(activity_ids)
        )


class InvalidActivityUpdate(WorklogError):
    def __init__(self, activity_id: str, reason: str) -> None:
        self.activity_id = activity_id
        self.reason = reason
        super().__init__(f"Cannot update activity {activity_id}: {reason}")


class BackupImportError(WorklogError):
    """The backup document could not be parsed; nothing was applied."""
