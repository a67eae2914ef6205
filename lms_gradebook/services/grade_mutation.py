import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lms_gradebook.core.errors import ConflictError, InternalError, InvalidInputError, NotFoundError
from lms_gradebook.models.assignment import Assignment
from lms_gradebook.models.course import Course
from lms_gradebook.models.enrollment import Enrollment
from lms_gradebook.models.grade import Grade
from lms_gradebook.models.submission import Submission
from lms_gradebook.models.user import User
from lms_gradebook.schemas.gradebook import GradeUpdate

logger = logging.getLogger(__name__)


@dataclass
class GradeUpdateResult:
    grade: Grade
    previous_points: Optional[float]


def _load_submission(db: Session, course: Course, submission_id: str) -> tuple[Submission, Assignment]:
    row = (
        db.query(Submission, Assignment)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .filter(Submission.id == submission_id, Submission.deleted_at.is_(None))
        .first()
    )
    if not row:
        raise NotFoundError("Submission not found")

    submission, assignment = row
    # a submission id from another course is a 404, never a 403
    if assignment.course_id != course.id:
        raise NotFoundError("Submission not found in this course")
    if assignment.deleted_at is not None:
        raise NotFoundError("Assignment has been deleted")

    enrolled = (
        db.query(Enrollment.id)
        .filter(Enrollment.course_id == course.id, Enrollment.student_id == submission.student_id)
        .first()
    )
    if not enrolled:
        raise NotFoundError("Student is not enrolled in this course")
    return submission, assignment


def _find_grade(db: Session, assignment_id: str, student_id: str) -> Optional[Grade]:
    return (
        db.query(Grade)
        .filter(Grade.assignment_id == assignment_id, Grade.student_id == student_id)
        .with_for_update()
        .first()
    )


def _live_points(grade: Optional[Grade]) -> Optional[float]:
    return grade.points if grade is not None and grade.deleted_at is None else None


def _check_expected(db: Session, payload: GradeUpdate, current: Optional[float]) -> None:
    if "expected_points" not in payload.model_fields_set or payload.expected_points == current:
        return
    db.rollback()
    raise ConflictError(
        "Grade was changed by someone else",
        details=[{"path": "expectedPoints", "message": f"Current value is {current}"}],
    )


def _apply(
    db: Session,
    existing: Optional[Grade],
    submission: Submission,
    grader: User,
    payload: GradeUpdate,
) -> Grade:
    now = datetime.now(timezone.utc)
    feedback_given = "feedback" in payload.model_fields_set

    if existing is None:
        grade = Grade(
            assignment_id=submission.assignment_id,
            student_id=submission.student_id,
            graded_by_id=grader.id,
            points=payload.grade,
            feedback=payload.feedback,
            graded_at=now,
        )
        db.add(grade)
        return grade

    existing.points = payload.grade
    existing.graded_by_id = grader.id
    existing.graded_at = now
    existing.deleted_at = None  # restore a soft-deleted row
    if feedback_given:
        existing.feedback = payload.feedback
    return existing


def update_grade(db: Session, course: Course, grader: User, payload: GradeUpdate) -> GradeUpdateResult:
    """
    Upsert the grade for the student and assignment behind payload.submission_id.

    The caller has already resolved `course` and checked the grader may manage it.
    Returns the stored grade and the score it replaced (None when there was no
    live grade). When payload.expected_points is set, the write only happens if
    the current score still equals it.
    """
    submission, assignment = _load_submission(db, course, payload.submission_id)

    if payload.grade > assignment.max_points:
        raise InvalidInputError(
            f"Grade cannot exceed maximum points ({assignment.max_points:g})",
            details=[{"path": "grade", "message": f"Grade must be {assignment.max_points:g} or less"}],
        )

    try:
        existing = _find_grade(db, assignment.id, submission.student_id)
        previous_points = _live_points(existing)
        _check_expected(db, payload, previous_points)

        grade = _apply(db, existing, submission, grader, payload)
        try:
            db.commit()
        except IntegrityError:
            # another request inserted the row first; fall back to updating it
            db.rollback()
            existing = _find_grade(db, assignment.id, submission.student_id)
            previous_points = _live_points(existing)
            _check_expected(db, payload, previous_points)
            grade = _apply(db, existing, submission, grader, payload)
            db.commit()
        db.refresh(grade)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Grade update failed: course=%s submission=%s", course.id, payload.submission_id
        )
        raise InternalError()

    logger.info(
        "Grade updated: courseId=%s assignmentId=%s studentId=%s previousPoints=%s newPoints=%s gradedBy=%s",
        course.id,
        assignment.id,
        submission.student_id,
        previous_points,
        payload.grade,
        grader.id,
    )
    return GradeUpdateResult(grade=grade, previous_points=previous_points)
