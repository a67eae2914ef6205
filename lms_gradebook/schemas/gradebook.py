import re
from datetime import datetime, time, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from lms_gradebook.core.config import FEEDBACK_MAX_LENGTH, STUDENT_FILTER_MAX_LENGTH
from lms_gradebook.services.cell_status import CellStatus

CUID_PATTERN = r"^c[a-z0-9]{24}$"

_TAG_RE = re.compile(r"<[^>]*>")


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ---------- matrix (read) ----------

class GradebookCell(CamelModel):
    assignment_id: str
    score: Optional[float] = None
    status: CellStatus
    submission_id: Optional[str] = None


class GradebookStudent(CamelModel):
    id: str
    name: str
    email: str
    grades: list[GradebookCell]
    total_points: float
    percentage: float
    gpa: Optional[float] = None


class GradebookAssignment(CamelModel):
    id: str
    title: str
    max_points: float
    due_date: Optional[datetime] = None


class GradebookMatrix(CamelModel):
    students: list[GradebookStudent]
    assignments: list[GradebookAssignment]
    course_id: str
    course_title: str
    course_code: str


# ---------- filters ----------

StatusFilter = Literal["all", "graded", "pending", "late", "missing"]


def _parse_when(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    # compare as naive UTC, the way rows come back from the store
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class GradebookFilters(CamelModel):
    student_filter: Optional[str] = Field(None, max_length=STUDENT_FILTER_MAX_LENGTH)
    assignment_id: Optional[str] = Field(None, pattern=CUID_PATTERN)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    status: StatusFilter = "all"

    @field_validator("student_filter", "assignment_id", "status", mode="before")
    @classmethod
    def _blank_to_default(cls, v, info):
        if v == "" or v is None:
            return "all" if info.field_name == "status" else None
        return v

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _parse_dates(cls, v, info):
        if v is None or v == "":
            return None
        if not isinstance(v, str):
            return v
        try:
            parsed = _parse_when(v)
        except ValueError:
            raise ValueError("Invalid date format")
        # a bare date as the upper bound covers the whole day
        if info.field_name == "date_to" and "T" not in v and len(v) == 10:
            parsed = datetime.combine(parsed.date(), time.max)
        return parsed

    @model_validator(mode="after")
    def _check_range(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("From date must be before or equal to To date")
        return self

    def is_active(self) -> bool:
        return any(
            (
                self.student_filter,
                self.assignment_id,
                self.date_from,
                self.date_to,
                self.status != "all",
            )
        )


# ---------- grade update (write) ----------

def _require_number(v, name: str):
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"{name} must be a number")
    return v


class GradeUpdate(CamelModel):
    submission_id: str = Field(pattern=CUID_PATTERN)
    grade: float = Field(ge=0, allow_inf_nan=False)
    feedback: Optional[str] = Field(None, max_length=FEEDBACK_MAX_LENGTH)
    # optional compare-and-swap: the score the client last saw (None = ungraded)
    expected_points: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    @field_validator("grade", mode="before")
    @classmethod
    def _grade_is_number(cls, v):
        return _require_number(v, "Grade")

    @field_validator("expected_points", mode="before")
    @classmethod
    def _expected_is_number(cls, v):
        if v is None:
            return v
        return _require_number(v, "Expected points")

    @field_validator("feedback")
    @classmethod
    def _strip_tags(cls, v):
        if v is None:
            return v
        return _TAG_RE.sub("", v).strip()


class GradeRead(CamelModel):
    id: str
    points: float
    student_id: str
    assignment_id: str
    graded_by_id: str
    graded_at: datetime
    feedback: Optional[str] = None
    deleted_at: Optional[datetime] = None


class GradeUpdateResponse(CamelModel):
    success: Literal[True] = True
    grade: GradeRead
    previous_points: Optional[float] = None
