from datetime import datetime, timedelta, timezone

import pytest

from lms_gradebook.services.cell_status import CellStatus, resolve_cell_status

DUE = datetime(2025, 1, 20, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "submitted_at, due_at",
    [
        (None, None),
        (None, DUE),
        (DUE + timedelta(days=3), DUE),
        (DUE - timedelta(days=3), DUE),
        (DUE, None),
    ],
)
def test_grade_always_wins(submitted_at, due_at):
    assert resolve_cell_status(True, submitted_at, due_at) is CellStatus.GRADED


def test_submission_before_due_is_pending():
    assert resolve_cell_status(False, datetime(2025, 1, 19, tzinfo=timezone.utc), DUE) is CellStatus.PENDING


def test_same_submission_against_earlier_due_is_late():
    submitted = datetime(2025, 1, 19, tzinfo=timezone.utc)
    due = datetime(2025, 1, 10, tzinfo=timezone.utc)
    assert resolve_cell_status(False, submitted, due) is CellStatus.LATE


def test_submission_exactly_at_due_is_pending():
    assert resolve_cell_status(False, DUE, DUE) is CellStatus.PENDING


def test_submission_without_due_date_is_pending():
    assert resolve_cell_status(False, DUE, None) is CellStatus.PENDING


def test_no_submission_is_missing_with_or_without_due_date():
    assert resolve_cell_status(False, None, None) is CellStatus.MISSING
    assert resolve_cell_status(False, None, DUE) is CellStatus.MISSING
    # not due yet still resolves to missing
    future = datetime.now(timezone.utc) + timedelta(days=30)
    assert resolve_cell_status(False, None, future) is CellStatus.MISSING


def test_naive_datetimes_are_treated_as_utc():
    submitted = datetime(2025, 1, 20, 1, 0)
    assert resolve_cell_status(False, submitted, DUE) is CellStatus.LATE
    assert resolve_cell_status(False, datetime(2025, 1, 19, 23, 0), DUE) is CellStatus.PENDING


def test_timezone_offsets_are_normalised():
    # 2025-01-20 01:00 at +02:00 is 2025-01-19 23:00 UTC
    submitted = datetime(2025, 1, 20, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    assert resolve_cell_status(False, submitted, DUE) is CellStatus.PENDING


def test_status_values_are_wire_strings():
    assert [s.value for s in CellStatus] == ["graded", "pending", "late", "missing"]
