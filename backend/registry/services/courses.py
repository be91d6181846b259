"""
Course data access.

Plain, unfiltered reads and writes on the courses table. Callers are
expected to have passed the policy check in registry.authz first.
"""

from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from registry.errors import DuplicateError
from registry.models.course import Course
from registry.models.student import Student
from registry.schemas import CourseIn
from registry.services.persistence import commit_or_duplicate
from registry.logging_config import get_logger, log_with_context

logger = get_logger("db")


def list_courses(db: Session, search: Optional[str] = None) -> List[Course]:
    """All courses ordered by name, optionally narrowed by a name/code substring."""
    query = db.query(Course)
    if search:
        term = search.strip()
        query = query.filter(or_(Course.course_name.icontains(term, autoescape=True),
                                 Course.course_code.icontains(term, autoescape=True)))
    return query.order_by(Course.course_name, Course.course_code).all()


def get_course(db: Session, course_id: str) -> Optional[Course]:
    return db.query(Course).filter(Course.id == course_id).first()


def find_by_code(db: Session, course_code: str) -> Optional[Course]:
    """Look up a course by code. Codes are stored uppercased."""
    return db.query(Course).filter(Course.course_code == course_code.upper()).first()


def _ensure_code_free(db: Session, course_code: str, exclude_id: Optional[str] = None):
    existing = find_by_code(db, course_code)
    if existing is not None and existing.id != exclude_id:
        raise DuplicateError("A course with this code already exists", field="course_code")


def create_course(db: Session, data: CourseIn) -> Course:
    _ensure_code_free(db, data.course_code)

    course = Course(
        course_name=data.course_name,
        course_code=data.course_code.upper(),
        course_duration=data.course_duration,
    )
    db.add(course)
    commit_or_duplicate(db, "A course with this code already exists", field="course_code")
    db.refresh(course)

    log_with_context(logger, "INFO", "Created course {}".format(course.course_code),
                     context={"course_id": course.id})
    return course


def update_course(db: Session, course: Course, data: CourseIn) -> Course:
    """Replace all editable fields of a course."""
    _ensure_code_free(db, data.course_code, exclude_id=course.id)

    course.course_name = data.course_name
    course.course_code = data.course_code.upper()
    course.course_duration = data.course_duration
    commit_or_duplicate(db, "A course with this code already exists", field="course_code")
    db.refresh(course)

    log_with_context(logger, "INFO", "Updated course {}".format(course.course_code),
                     context={"course_id": course.id})
    return course


def delete_course(db: Session, course: Course) -> int:
    """
    Delete a course. Enrolled students stay and lose their course link.
    They are unlinked here before the delete; the ON DELETE SET NULL rule
    only catches rows enrolled after that query.

    Returns:
        Number of students that were enrolled in the course
    """
    course_id = course.id
    # Unlinked through the ORM so the updated_at hook fires for each student
    enrolled_students = db.query(Student).filter(Student.course_id == course_id).all()
    for student in enrolled_students:
        student.course_id = None
    db.flush()
    enrolled = len(enrolled_students)

    db.delete(course)
    db.commit()
    # Course.students may still be loaded with the unlinked rows
    db.expire_all()

    log_with_context(logger, "INFO", "Deleted course {}".format(course_id),
                     context={"course_id": course_id},
                     extra_data={"students_unlinked": enrolled})
    return enrolled
