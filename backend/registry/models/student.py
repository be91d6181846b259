"""
Student model - a student record, optionally enrolled in one course.

A student row may be claimed by one authentication identity through
user_id. That link is the only basis for a student reading its own row.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from registry.database import Base


class Student(Base):
    """
    SQLAlchemy model for the students table.

    - email is unique (stored lowercased)
    - course_id is set to NULL when the course is deleted
    - user_id is unique (an identity owns at most one student row) and the
      row is deleted together with the identity
    """
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier")
    name = Column(String(255), nullable=False,
                  doc="Student's full name")
    email = Column(String(255), nullable=False, unique=True,
                   doc="Student email, unique across all students")
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True,
                       doc="Course the student is enrolled in (nullable)")
    user_id = Column(String(36), ForeignKey("identities.id", ondelete="CASCADE"),
                     nullable=True, unique=True,
                     doc="Identity that owns this student record (nullable)")
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))

    course = relationship("Course", back_populates="students")

    __table_args__ = (
        Index("ix_students_course_id", "course_id"),
    )

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', email='{self.email}')>"
