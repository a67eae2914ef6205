from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms_gradebook.db.base_class import Base, new_id


class Grade(Base):
    """One score per (assignment, student); rows are upserted, never duplicated."""

    __tablename__ = "grades"

    id: Mapped[str] = mapped_column(String(25), primary_key=True, default=new_id)
    assignment_id: Mapped[str] = mapped_column(
        ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    graded_by_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)

    points: Mapped[float] = mapped_column(Float, nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text)
    graded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_grades_assignment_student"),
    )

    assignment = relationship("Assignment", back_populates="grades")
