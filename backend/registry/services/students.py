"""
Student data access.

Unfiltered reads and writes on the students table, plus the reference
checks (course and owning identity must exist) done before writing.
"""

from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from registry.errors import DuplicateError, InvalidReferenceError
from registry.models.course import Course
from registry.models.identity import Identity
from registry.models.student import Student
from registry.schemas import StudentIn
from registry.services.persistence import commit_or_duplicate
from registry.logging_config import get_logger, log_with_context

logger = get_logger("db")


def list_students(db: Session, search: Optional[str] = None,
                  course_id: Optional[str] = None) -> List[Student]:
    """
    Students newest first, optionally narrowed by a case-insensitive
    name/email substring and by course.
    """
    query = db.query(Student).options(joinedload(Student.course))

    if search:
        term = search.strip()
        query = query.filter(or_(Student.name.icontains(term, autoescape=True),
                                 Student.email.icontains(term, autoescape=True)))
    if course_id:
        query = query.filter(Student.course_id == course_id)

    return query.order_by(Student.created_at.desc(), Student.name).all()


def get_student(db: Session, student_id: str) -> Optional[Student]:
    return db.query(Student).options(joinedload(Student.course)).filter(
        Student.id == student_id
    ).first()


def _check_references(db: Session, data: StudentIn, exclude_id: Optional[str] = None):
    existing = db.query(Student).filter(Student.email == data.email).first()
    if existing is not None and existing.id != exclude_id:
        raise DuplicateError("A student with this email already exists", field="email")

    if data.course_id and db.get(Course, data.course_id) is None:
        raise InvalidReferenceError("Course {} does not exist".format(data.course_id),
                                    field="course_id")

    if data.user_id:
        if db.get(Identity, data.user_id) is None:
            raise InvalidReferenceError("Identity {} does not exist".format(data.user_id),
                                        field="user_id")
        owner = db.query(Student).filter(Student.user_id == data.user_id).first()
        if owner is not None and owner.id != exclude_id:
            raise DuplicateError("This identity is already linked to a student",
                                 field="user_id")


def create_student(db: Session, data: StudentIn) -> Student:
    _check_references(db, data)

    student = Student(
        name=data.name,
        email=data.email,
        course_id=data.course_id,
        user_id=data.user_id,
    )
    db.add(student)
    commit_or_duplicate(db, "A student with this email already exists", field="email")
    db.refresh(student)

    log_with_context(logger, "INFO", "Created student {}".format(student.id),
                     context={"student_id": student.id, "course_id": student.course_id})
    return student


def update_student(db: Session, student: Student, data: StudentIn) -> Student:
    """Replace all editable fields of a student."""
    _check_references(db, data, exclude_id=student.id)

    student.name = data.name
    student.email = data.email
    student.course_id = data.course_id
    student.user_id = data.user_id
    commit_or_duplicate(db, "A student with this email already exists", field="email")
    db.refresh(student)

    log_with_context(logger, "INFO", "Updated student {}".format(student.id),
                     context={"student_id": student.id, "course_id": student.course_id})
    return student


def delete_student(db: Session, student: Student) -> None:
    student_id = student.id
    db.delete(student)
    db.commit()
    log_with_context(logger, "INFO", "Deleted student {}".format(student_id),
                     context={"student_id": student_id})
