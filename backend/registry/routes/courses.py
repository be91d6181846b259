"""
Courses API routes.

Every authenticated identity may list and read courses; only admins may
create, edit or delete them. Student counts are computed over the
students the caller is allowed to see.
"""

import time
from collections import Counter
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from registry.authz.dependencies import get_enforcer, guard
from registry.authz.enforcer import PolicyEnforcer
from registry.authz.policies import Operation, Table
from registry.database import get_db
from registry.models.course import Course
from registry.schemas import CourseIn
from registry.services import courses as course_service
from registry.services import students as student_service
from registry.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


def serialize_course(course: Course, student_count: int = None) -> dict:
    result = {
        "id": str(course.id),
        "course_name": course.course_name,
        "course_code": course.course_code,
        "course_duration": course.course_duration,
        "created_at": course.created_at.isoformat() if course.created_at else None,
        "updated_at": course.updated_at.isoformat() if course.updated_at else None,
    }
    if student_count is not None:
        result["student_count"] = student_count
    return result


@router.get("/api/courses")
def list_courses(search: Optional[str] = Query(None, description="Name or code substring"),
                 db: Session = Depends(get_db),
                 enforcer: PolicyEnforcer = Depends(get_enforcer)):
    """List courses ordered by name, each with its number of visible students."""
    start_time = time.time()

    courses = enforcer.filter_rows(Table.COURSES, course_service.list_courses(db, search))
    students = enforcer.filter_rows(Table.STUDENTS, student_service.list_students(db))
    counts = Counter(s.course_id for s in students if s.course_id)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO", "Listed {} courses".format(len(courses)),
                     extra_data={"duration_ms": round(duration_ms, 2)})

    return {"data": [serialize_course(c, counts.get(c.id, 0)) for c in courses]}


@router.get("/api/courses/{course_id}")
def get_course(course_id: str, db: Session = Depends(get_db),
               enforcer: PolicyEnforcer = Depends(get_enforcer)):
    course = enforcer.visible(Table.COURSES, course_service.get_course(db, course_id),
                              "Course not found")
    return serialize_course(course)


@router.post("/api/courses", status_code=201)
def create_course(payload: CourseIn, db: Session = Depends(get_db),
                  enforcer: PolicyEnforcer = Depends(guard(Table.COURSES, Operation.INSERT))):
    enforcer.require(Table.COURSES, Operation.INSERT, payload)
    course = course_service.create_course(db, payload)
    return serialize_course(course, 0)


@router.put("/api/courses/{course_id}")
def update_course(course_id: str, payload: CourseIn, db: Session = Depends(get_db),
                  enforcer: PolicyEnforcer = Depends(guard(Table.COURSES, Operation.UPDATE))):
    course = enforcer.visible(Table.COURSES, course_service.get_course(db, course_id),
                              "Course not found")
    enforcer.require(Table.COURSES, Operation.UPDATE, course)
    return serialize_course(course_service.update_course(db, course, payload))


@router.delete("/api/courses/{course_id}")
def delete_course(course_id: str, db: Session = Depends(get_db),
                  enforcer: PolicyEnforcer = Depends(guard(Table.COURSES, Operation.DELETE))):
    """Delete a course. Its students remain, with no course."""
    course = enforcer.visible(Table.COURSES, course_service.get_course(db, course_id),
                              "Course not found")
    enforcer.require(Table.COURSES, Operation.DELETE, course)

    unlinked = course_service.delete_course(db, course)
    return {
        "message": "Course deleted successfully",
        "course_id": course_id,
        "students_unlinked": unlinked,
    }
