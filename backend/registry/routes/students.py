"""
Students API routes.

Admins see and manage every student. Any other identity sees at most
one row: the student record linked to it through user_id.
"""

import time
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from registry.authz.dependencies import get_enforcer, guard
from registry.authz.enforcer import PolicyEnforcer
from registry.authz.policies import Operation, Table
from registry.database import get_db
from registry.models.student import Student
from registry.schemas import StudentIn
from registry.services import students as student_service
from registry.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


def serialize_student(student: Student) -> dict:
    """Serialize a Student ORM object, including a summary of its course."""
    return {
        "id": str(student.id),
        "name": student.name,
        "email": student.email,
        "course_id": str(student.course_id) if student.course_id else None,
        "user_id": student.user_id,
        "course": {
            "id": str(student.course.id),
            "course_name": student.course.course_name,
            "course_code": student.course.course_code,
            "course_duration": student.course.course_duration,
        } if student.course else None,
        "created_at": student.created_at.isoformat() if student.created_at else None,
        "updated_at": student.updated_at.isoformat() if student.updated_at else None,
    }


@router.get("/api/students")
def list_students(
    search: Optional[str] = Query(None, description="Search student name/email"),
    course_id: Optional[str] = Query(None, description="Filter by course ID"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(20, ge=1, le=100, description="Results per page"),
    db: Session = Depends(get_db),
    enforcer: PolicyEnforcer = Depends(get_enforcer),
):
    """List visible students with search, course filter and pagination."""
    start_time = time.time()

    students = enforcer.filter_rows(
        Table.STUDENTS, student_service.list_students(db, search=search, course_id=course_id)
    )
    total_count = len(students)
    offset = (page - 1) * per_page
    page_rows = students[offset:offset + per_page]

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Listed {} students (page {}, total {})".format(len(page_rows), page, total_count),
        extra_data={"duration_ms": round(duration_ms, 2)})

    return {
        "data": [serialize_student(s) for s in page_rows],
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total_count,
            "total_pages": (total_count + per_page - 1) // per_page
        }
    }


@router.get("/api/students/me")
def get_own_student(db: Session = Depends(get_db),
                    enforcer: PolicyEnforcer = Depends(get_enforcer)):
    """The student record linked to the caller, or null."""
    student_id = enforcer.own_student_id()
    if student_id is None:
        return {"data": None}
    student = enforcer.visible(Table.STUDENTS, student_service.get_student(db, student_id),
                               "Student not found")
    return {"data": serialize_student(student)}


@router.get("/api/students/{student_id}")
def get_student(student_id: str, db: Session = Depends(get_db),
                enforcer: PolicyEnforcer = Depends(get_enforcer)):
    student = enforcer.visible(Table.STUDENTS, student_service.get_student(db, student_id),
                               "Student not found")
    return serialize_student(student)


@router.post("/api/students", status_code=201)
def create_student(payload: StudentIn, db: Session = Depends(get_db),
                   enforcer: PolicyEnforcer = Depends(guard(Table.STUDENTS, Operation.INSERT))):
    enforcer.require(Table.STUDENTS, Operation.INSERT, payload)
    student = student_service.create_student(db, payload)
    return serialize_student(student)


@router.put("/api/students/{student_id}")
def update_student(student_id: str, payload: StudentIn, db: Session = Depends(get_db),
                   enforcer: PolicyEnforcer = Depends(guard(Table.STUDENTS, Operation.UPDATE))):
    student = enforcer.visible(Table.STUDENTS, student_service.get_student(db, student_id),
                               "Student not found")
    enforcer.require(Table.STUDENTS, Operation.UPDATE, student)
    return serialize_student(student_service.update_student(db, student, payload))


@router.delete("/api/students/{student_id}")
def delete_student(student_id: str, db: Session = Depends(get_db),
                   enforcer: PolicyEnforcer = Depends(guard(Table.STUDENTS, Operation.DELETE))):
    student = enforcer.visible(Table.STUDENTS, student_service.get_student(db, student_id),
                               "Student not found")
    enforcer.require(Table.STUDENTS, Operation.DELETE, student)

    student_service.delete_student(db, student)
    return {"message": "Student deleted successfully", "student_id": student_id}
