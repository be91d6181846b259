"""
Dashboard API route.

Admins get enrollment totals; everyone else gets their own student
record and course.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from registry.authz.dependencies import get_enforcer
from registry.authz.enforcer import PolicyEnforcer
from registry.authz.policies import Table
from registry.database import get_db
from registry.routes.students import serialize_student
from registry.services import courses as course_service
from registry.services import students as student_service

router = APIRouter()


def average_per_course(total_students: int, total_courses: int) -> float:
    """Students per course rounded to one decimal, 0 without courses."""
    if total_courses <= 0:
        return 0.0
    return round(total_students / total_courses, 1)


@router.get("/api/dashboard")
def get_dashboard(db: Session = Depends(get_db),
                  enforcer: PolicyEnforcer = Depends(get_enforcer)):
    if enforcer.is_admin():
        total_students = len(enforcer.filter_rows(Table.STUDENTS, student_service.list_students(db)))
        total_courses = len(enforcer.filter_rows(Table.COURSES, course_service.list_courses(db)))
        return {
            "view": "admin",
            "stats": {
                "total_students": total_students,
                "total_courses": total_courses,
                "average_students_per_course": average_per_course(total_students, total_courses),
            }
        }

    student_id = enforcer.own_student_id()
    student = student_service.get_student(db, student_id) if student_id else None
    if student is not None and not enforcer.filter_rows(Table.STUDENTS, [student]):
        student = None
    return {
        "view": "student",
        "student": serialize_student(student) if student else None,
    }
