"""Export the full worklog to a portable JSON document and restore from one."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from .exceptions import BackupImportError
from .lifecycle import ConfirmCallback
from .schemas import (
    ActivityRecord,
    BackupDocument,
    PredefinedRecord,
    ProjectRecord,
    WeeklyHoursRecord,
    encode_activities,
    encode_predefined,
    encode_projects,
    encode_weekly_hours,
)
from .state import (
    ACTIVITIES_KEY,
    PREDEFINED_KEY,
    PROJECTS_KEY,
    WEEKLY_HOURS_KEY,
    WorklogState,
)

logger = logging.getLogger(__name__)

BACKUP_FILENAME = "worklog_backup.json"

RESTORE_PROMPT = (
    "Restore backup",
    "Are you sure you want to restore data from the backup file? "
    "This will overwrite all current data.",
)


def export_backup(state: WorklogState) -> BackupDocument:
    return BackupDocument(
        projects=[ProjectRecord.from_model(p) for p in state.projects],
        activities=[ActivityRecord.from_model(a) for a in state.activities],
        predefined=[PredefinedRecord.from_model(e) for e in state.predefined],
        weekly_hours=WeeklyHoursRecord.from_model(state.weekly_hours),
    )


def dump_backup(state: WorklogState) -> str:
    """Pretty-printed JSON ready to be written to a file."""
    payload = export_backup(state).model_dump(mode="json", by_alias=True)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def parse_backup(document: Union[str, bytes, Mapping[str, Any], BackupDocument]) -> BackupDocument:
    if isinstance(document, BackupDocument):
        backup = document
    else:
        try:
            if isinstance(document, (str, bytes)):
                backup = BackupDocument.model_validate_json(document)
            else:
                backup = BackupDocument.model_validate(document)
        except ValidationError as exc:
            raise BackupImportError(f"Invalid backup file: {exc}") from exc

    running = [r.id for r in backup.activities or () if r.end_time is None]
    if len(running) > 1:
        raise BackupImportError(
            f"Invalid backup file: {len(running)} running activities ({', '.join(running)})"
        )
    return backup


def import_backup(
    state: WorklogState,
    document: Union[str, bytes, Mapping[str, Any], BackupDocument],
    require_confirmation: bool,
    confirm: Optional[ConfirmCallback] = None,
) -> bool:
    """Overwrite each collection present in ``document`` and reload the state.

    The whole document is validated before anything is written. Returns
    False when confirmation is required and not given.
    """
    backup = parse_backup(document)

    if require_confirmation and (confirm is None or not confirm(*RESTORE_PROMPT)):
        logger.info("Backup restore declined; nothing changed.")
        return False

    updates: dict[str, str] = {}
    if backup.projects is not None:
        updates[PROJECTS_KEY] = encode_projects([r.to_model() for r in backup.projects])
    if backup.activities is not None:
        updates[ACTIVITIES_KEY] = encode_activities([r.to_model() for r in backup.activities])
    if backup.predefined is not None:
        updates[PREDEFINED_KEY] = encode_predefined([r.to_model() for r in backup.predefined])
    if backup.weekly_hours is not None:
        updates[WEEKLY_HOURS_KEY] = encode_weekly_hours(backup.weekly_hours.to_model())

    for key, value in updates.items():
        state.store.set(key, value)
    state.reload()
    logger.info("Restored backup collections: %s", ", ".join(updates) or "none")
    return True
