import json
import logging
import time

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from lms_gradebook.core.config import SLOW_GRADEBOOK_MS
from lms_gradebook.core.deps import get_db
from lms_gradebook.core.errors import InvalidInputError
from lms_gradebook.core.permissions import get_managed_course, require_instructor
from lms_gradebook.models.course import Course
from lms_gradebook.models.user import User
from lms_gradebook.schemas.gradebook import (
    GradebookFilters,
    GradebookMatrix,
    GradeRead,
    GradeUpdate,
    GradeUpdateResponse,
)
from lms_gradebook.services.csv_export import csv_filename, generate_gradebook_csv
from lms_gradebook.services.grade_mutation import update_grade
from lms_gradebook.services.matrix import build_matrix
from lms_gradebook.services.roster import load_roster

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"description": "Invalid input"},
    401: {"description": "Authentication required"},
    403: {"description": "Not instructor for this course"},
    404: {"description": "Course not found"},
}


def gradebook_filters(
    student_filter: str | None = Query(None, alias="studentFilter"),
    assignment_id: str | None = Query(None, alias="assignmentId"),
    date_from: str | None = Query(None, alias="dateFrom"),
    date_to: str | None = Query(None, alias="dateTo"),
    status: str | None = Query(None),
) -> GradebookFilters:
    try:
        return GradebookFilters(
            student_filter=student_filter,
            assignment_id=assignment_id,
            date_from=date_from,
            date_to=date_to,
            status=status,
        )
    except ValidationError as exc:
        details = [
            {"path": ".".join(str(p) for p in err["loc"]) or "filters", "message": err["msg"]}
            for err in exc.errors()
        ]
        raise InvalidInputError("Invalid filter parameters", details=details)


def _load_matrix(db: Session, course: Course, filters: GradebookFilters) -> GradebookMatrix:
    start = time.monotonic()
    matrix = build_matrix(load_roster(db, course.id, filters), filters)
    elapsed_ms = (time.monotonic() - start) * 1000

    logger.info(
        "Gradebook course=%s: %d students x %d assignments in %.2fms (filters: %s)",
        course.id,
        len(matrix.students),
        len(matrix.assignments),
        elapsed_ms,
        filters.model_dump_json(exclude_none=True),
    )
    if elapsed_ms > SLOW_GRADEBOOK_MS:
        logger.warning("Gradebook course=%s exceeded %dms (%.2fms)", course.id, SLOW_GRADEBOOK_MS, elapsed_ms)
    return matrix


@router.get("/{course_id}/gradebook", response_model=GradebookMatrix, responses=ERROR_RESPONSES)
def course_gradebook(
    course: Course = Depends(get_managed_course),
    filters: GradebookFilters = Depends(gradebook_filters),
    db: Session = Depends(get_db),
):
    return _load_matrix(db, course, filters)


@router.put(
    "/{course_id}/gradebook/grade",
    response_model=GradeUpdateResponse,
    responses={**ERROR_RESPONSES, 409: {"description": "Grade changed since it was read"}},
)
def put_grade(
    payload: GradeUpdate,
    course: Course = Depends(get_managed_course),
    grader: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    result = update_grade(db, course, grader, payload)
    return GradeUpdateResponse(
        grade=GradeRead.model_validate(result.grade),
        previous_points=result.previous_points,
    )


@router.get("/{course_id}/gradebook/export", responses=ERROR_RESPONSES)
def export_gradebook(
    course: Course = Depends(get_managed_course),
    filters: GradebookFilters = Depends(gradebook_filters),
    grader: User = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    start = time.monotonic()
    matrix = _load_matrix(db, course, filters)
    content = generate_gradebook_csv(matrix)
    filename = csv_filename(course.code)

    logger.info(
        json.dumps(
            {
                "action": "gradebook_export",
                "courseId": course.id,
                "instructorId": grader.id,
                "rowCount": len(matrix.students),
                "columnCount": len(matrix.assignments),
                "fileSize": len(content),
                "executionTime": f"{(time.monotonic() - start) * 1000:.2f}ms",
            }
        )
    )

    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
    )
