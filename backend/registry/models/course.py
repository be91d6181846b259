"""
Course model - a course students can be enrolled in.

Courses are managed exclusively by administrators. The course code is
stored uppercased and is globally unique.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, DateTime, String, CheckConstraint
from sqlalchemy.orm import relationship
from registry.database import Base


class Course(Base):
    """
    SQLAlchemy model for the courses table.

    Deleting a course leaves its students in place; the database sets their
    course_id to NULL (see Student.course_id).
    """
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique course identifier")
    course_name = Column(String(255), nullable=False,
                         doc="Display name of the course")
    course_code = Column(String(50), nullable=False, unique=True,
                         doc="Uppercased course code, unique across all courses")
    course_duration = Column(Integer, nullable=False, default=1,
                             doc="Course length in months (1-120)")
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc),
                        doc="Refreshed on every update by the timestamp trigger")

    # passive_deletes lets the database apply ON DELETE SET NULL
    students = relationship("Student", back_populates="course", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("course_duration > 0", name="ck_courses_duration_positive"),
    )

    def __repr__(self):
        return f"<Course(id={self.id}, code='{self.course_code}', name='{self.course_name}')>"
