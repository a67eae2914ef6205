from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from lms_gradebook.db.base_class import Base, new_id


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(String(25), primary_key=True, default=new_id)
    course_id = Column(String(25), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True)
    max_points = Column(Float, nullable=False, default=100)
    is_published = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    course = relationship("Course", back_populates="assignments")

    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete-orphan")
    grades = relationship("Grade", back_populates="assignment", cascade="all, delete-orphan")
