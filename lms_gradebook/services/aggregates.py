from dataclasses import dataclass
from typing import Iterable, Optional

from lms_gradebook.core.config import GPA_SCALE
from lms_gradebook.services.cell_status import CellStatus

# (minimum percentage, fraction of the GPA scale, letter)
GRADE_THRESHOLDS = (
    (93, 1.0, "A"),
    (90, 0.925, "A-"),
    (87, 0.825, "B+"),
    (83, 0.75, "B"),
    (80, 0.675, "B-"),
    (77, 0.575, "C+"),
    (73, 0.5, "C"),
    (70, 0.425, "C-"),
    (67, 0.325, "D+"),
    (63, 0.25, "D"),
    (60, 0.175, "D-"),
    (0, 0.0, "F"),
)


@dataclass(frozen=True)
class StudentAggregate:
    total_points: float
    percentage: float
    gpa: Optional[float]


def _threshold_for(percentage: float):
    capped = min(max(percentage, 0.0), 100.0)
    for min_percent, multiplier, letter in GRADE_THRESHOLDS:
        if capped >= min_percent:
            return multiplier, letter
    return 0.0, "F"


def percentage_to_gpa(percentage: float, scale: float = GPA_SCALE) -> float:
    """Step function onto [0, scale]; extra credit above 100% is capped."""
    multiplier, _letter = _threshold_for(percentage)
    return round(scale * multiplier, 2)


def percentage_to_letter(percentage: float) -> str:
    _multiplier, letter = _threshold_for(percentage)
    return letter


def compute_aggregate(
    cells: Iterable[tuple[CellStatus, Optional[float]]],
    total_possible: float,
) -> StudentAggregate:
    """
    Reduce one student's (status, score) cells.

    total_possible is the sum of max points over every assignment in the
    matrix, not only the graded ones.
    """
    total_points = 0.0
    graded = 0
    for status, score in cells:
        if status is CellStatus.GRADED and score is not None:
            total_points += score
            graded += 1

    if total_possible > 0:
        percentage = round(total_points / total_possible * 100, 2)
    else:
        percentage = 0.0

    gpa = percentage_to_gpa(percentage) if graded else None
    return StudentAggregate(total_points=total_points, percentage=percentage, gpa=gpa)
