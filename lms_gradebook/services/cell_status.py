from datetime import datetime, timezone
from enum import Enum


class CellStatus(str, Enum):
    GRADED = "graded"
    PENDING = "pending"
    LATE = "late"
    MISSING = "missing"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_cell_status(
    has_grade: bool,
    submitted_at: datetime | None,
    due_at: datetime | None,
) -> CellStatus:
    """
    Classify one (student, assignment) cell. First match wins:
    - a grade exists -> graded (submission timing is irrelevant)
    - a submission exists -> late if submitted after the due date, else pending
    - otherwise -> missing (also when there is no due date)

    This is the only place a CellStatus is produced.
    """
    if has_grade:
        return CellStatus.GRADED

    if submitted_at is not None:
        if due_at is not None and _as_utc(submitted_at) > _as_utc(due_at):
            return CellStatus.LATE
        return CellStatus.PENDING

    return CellStatus.MISSING
