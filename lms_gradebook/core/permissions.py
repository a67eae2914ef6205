from fastapi import Depends
from sqlalchemy.orm import Session

from lms_gradebook.core.current_user import get_current_user
from lms_gradebook.core.deps import get_db
from lms_gradebook.core.errors import ForbiddenError, NotFoundError
from lms_gradebook.models.course import Course
from lms_gradebook.models.user import User

ROLE_STUDENT = "student"
ROLE_INSTRUCTOR = "instructor"
ROLE_ADMIN = "admin"

STAFF_ROLES = (ROLE_INSTRUCTOR, ROLE_ADMIN)


def require_instructor(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in STAFF_ROLES:
        raise ForbiddenError("Instructor access required")
    return current_user


def can_manage_course(requester_id: str, requester_role: str, course: Course) -> bool:
    """Admins manage every course; instructors only the ones they own."""
    if requester_role == ROLE_ADMIN:
        return True
    return requester_role == ROLE_INSTRUCTOR and course.instructor_id == requester_id


def get_managed_course(
    course_id: str,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
) -> Course:
    """Resolve a live course the requester is allowed to grade."""
    course = (
        db.query(Course)
        .filter(Course.id == course_id, Course.deleted_at.is_(None))
        .first()
    )
    if not course:
        raise NotFoundError("Course not found")
    if not can_manage_course(instructor.id, instructor.role, course):
        raise ForbiddenError("Not instructor for this course")
    return course
