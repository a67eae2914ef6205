from lms_gradebook.schemas.gradebook import (
    GradebookAssignment,
    GradebookCell,
    GradebookFilters,
    GradebookMatrix,
    GradebookStudent,
)
from lms_gradebook.services.aggregates import compute_aggregate
from lms_gradebook.services.cell_status import resolve_cell_status
from lms_gradebook.services.roster import Roster


def build_matrix(roster: Roster, filters: GradebookFilters | None = None) -> GradebookMatrix:
    """Assemble the students x assignments grid. Pure: no I/O, no clock."""
    filters = filters or GradebookFilters()

    assignments = [
        GradebookAssignment(
            id=a.id,
            title=a.title,
            max_points=a.max_points,
            due_date=a.due_at,
        )
        for a in roster.assignments
    ]
    total_possible = sum(a.max_points for a in roster.assignments)

    students: list[GradebookStudent] = []
    for student in roster.students:
        cells: list[GradebookCell] = []
        for assignment in roster.assignments:
            key = (student.id, assignment.id)
            grade = roster.grades.get(key)
            submission = roster.submissions.get(key)

            status = resolve_cell_status(
                has_grade=grade is not None,
                submitted_at=submission.submitted_at if submission else None,
                due_at=assignment.due_at,
            )
            cells.append(
                GradebookCell(
                    assignment_id=assignment.id,
                    score=grade.points if grade else None,
                    status=status,
                    submission_id=submission.id if submission else None,
                )
            )

        # keep the row if any of its cells carries the requested status
        if filters.status != "all" and not any(c.status.value == filters.status for c in cells):
            continue

        agg = compute_aggregate(((c.status, c.score) for c in cells), total_possible)
        students.append(
            GradebookStudent(
                id=student.id,
                name=student.display_name,
                email=student.email,
                grades=cells,
                total_points=agg.total_points,
                percentage=agg.percentage,
                gpa=agg.gpa,
            )
        )

    return GradebookMatrix(
        students=students,
        assignments=assignments,
        course_id=roster.course.id,
        course_title=roster.course.title,
        course_code=roster.course.code,
    )
