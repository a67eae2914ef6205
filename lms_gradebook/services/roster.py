import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lms_gradebook.core.errors import InternalError, NotFoundError
from lms_gradebook.models.assignment import Assignment
from lms_gradebook.models.course import Course
from lms_gradebook.models.enrollment import Enrollment
from lms_gradebook.models.grade import Grade
from lms_gradebook.models.submission import Submission
from lms_gradebook.models.user import User
from lms_gradebook.schemas.gradebook import GradebookFilters

logger = logging.getLogger(__name__)


@dataclass
class Roster:
    """Read-only snapshot of everything a gradebook matrix is built from."""

    course: Course
    students: list[User]
    assignments: list[Assignment]
    # keyed by (student_id, assignment_id)
    grades: dict[tuple[str, str], Grade] = field(default_factory=dict)
    submissions: dict[tuple[str, str], Submission] = field(default_factory=dict)


def _assignment_order_by():
    """
    Assignment ordering:
    - due_at NULLs last (SQLite-safe)
    - due_at ascending
    - assignment id ascending (stable tie-break)
    """
    return (
        Assignment.due_at.is_(None),
        Assignment.due_at.asc(),
        Assignment.id.asc(),
    )


def _load_course(db: Session, course_id: str) -> Course:
    course = (
        db.query(Course)
        .filter(Course.id == course_id, Course.deleted_at.is_(None))
        .first()
    )
    if not course:
        raise NotFoundError("Course not found")
    return course


def _load_students(db: Session, course_id: str, filters: GradebookFilters) -> list[User]:
    q = (
        db.query(User)
        .join(Enrollment, Enrollment.student_id == User.id)
        .filter(Enrollment.course_id == course_id, User.deleted_at.is_(None))
    )
    if filters.student_filter:
        q = q.filter(User.full_name.icontains(filters.student_filter, autoescape=True))
    return q.order_by(User.full_name.asc(), User.email.asc()).all()


def _load_assignments(db: Session, course_id: str, filters: GradebookFilters) -> list[Assignment]:
    q = db.query(Assignment).filter(
        Assignment.course_id == course_id,
        Assignment.deleted_at.is_(None),
        Assignment.is_published.is_(True),
    )
    if filters.assignment_id:
        q = q.filter(Assignment.id == filters.assignment_id)
    if filters.date_from:
        q = q.filter(Assignment.due_at >= filters.date_from)
    if filters.date_to:
        q = q.filter(Assignment.due_at <= filters.date_to)
    return q.order_by(*_assignment_order_by()).all()


def load_roster(db: Session, course_id: str, filters: GradebookFilters | None = None) -> Roster:
    """
    Load enrolled students and published, non-deleted assignments of a course,
    together with their live grades and submissions.

    Raises NotFoundError for a missing course and InternalError when the store fails.
    """
    filters = filters or GradebookFilters()
    try:
        course = _load_course(db, course_id)
        students = _load_students(db, course_id, filters)
        assignments = _load_assignments(db, course_id, filters)

        roster = Roster(course=course, students=students, assignments=assignments)
        if not students or not assignments:
            return roster

        student_ids = [s.id for s in students]
        assignment_ids = [a.id for a in assignments]

        grades = (
            db.query(Grade)
            .filter(
                Grade.assignment_id.in_(assignment_ids),
                Grade.student_id.in_(student_ids),
                Grade.deleted_at.is_(None),
            )
            .all()
        )
        submissions = (
            db.query(Submission)
            .filter(
                Submission.assignment_id.in_(assignment_ids),
                Submission.student_id.in_(student_ids),
                Submission.deleted_at.is_(None),
            )
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to load gradebook roster for course %s", course_id)
        raise InternalError()

    roster.grades = {(g.student_id, g.assignment_id): g for g in grades}
    roster.submissions = {(s.student_id, s.assignment_id): s for s in submissions}
    return roster
