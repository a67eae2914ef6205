import csv
import io
import re
from datetime import date

from lms_gradebook.schemas.gradebook import GradebookMatrix

# Excel needs the BOM to read the file as UTF-8
UTF8_BOM = "\ufeff"
NOT_AVAILABLE = "N/A"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def _fmt_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0")


def gradebook_csv_rows(matrix: GradebookMatrix) -> list[list[str]]:
    total_possible = sum(a.max_points for a in matrix.assignments)

    header = ["Student Name", "Email"]
    header += [f"{a.title} ({_fmt_number(a.max_points)})" for a in matrix.assignments]
    header += ["Total Points", "Percentage", "GPA"]

    rows = [header]
    for student in matrix.students:
        by_assignment = {cell.assignment_id: cell for cell in student.grades}
        scores = []
        for assignment in matrix.assignments:
            cell = by_assignment.get(assignment.id)
            if cell is None:
                scores.append(NOT_AVAILABLE)
            elif cell.score is not None:
                scores.append(_fmt_number(cell.score))
            else:
                scores.append(cell.status.value)

        rows.append(
            [student.name, student.email]
            + scores
            + [
                f"{_fmt_number(student.total_points)}/{_fmt_number(total_possible)}",
                f"{student.percentage:.1f}%",
                f"{student.gpa:.2f}" if student.gpa is not None else NOT_AVAILABLE,
            ]
        )
    return rows


def generate_gradebook_csv(matrix: GradebookMatrix) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(gradebook_csv_rows(matrix))
    return UTF8_BOM + buf.getvalue()


def csv_filename(course_code: str, today: date | None = None) -> str:
    today = today or date.today()
    safe_code = _UNSAFE_FILENAME_CHARS.sub("_", course_code)
    return f"{safe_code}_grades_{today.isoformat()}.csv"
