"""
updated_at is refreshed on every update of courses, students and
profiles, overriding whatever the caller put there.
"""
from __future__ import annotations

from datetime import datetime, timezone

from conftest import signup

from registry.models.course import Course
from registry.models.profile import Profile
from registry.models.student import Student
from registry.services import courses as course_service

STALE = datetime(2000, 1, 1, tzinfo=timezone.utc)


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None)


def _assert_refreshed(row, before: datetime):
    assert _naive(row.updated_at) > _naive(STALE)
    assert _naive(row.updated_at) >= _naive(before)


def test_course_update_overrides_supplied_timestamp(db):
    course = Course(course_name="Physics", course_code="PHY1", course_duration=6)
    db.add(course)
    db.commit()

    before = datetime.now(timezone.utc)
    course.course_name = "Applied Physics"
    course.updated_at = STALE
    db.commit()
    db.refresh(course)

    _assert_refreshed(course, before)


def test_student_update_overrides_supplied_timestamp(db):
    student = Student(name="Ana", email="ana@school.edu")
    db.add(student)
    db.commit()

    before = datetime.now(timezone.utc)
    student.updated_at = STALE
    db.commit()
    db.refresh(student)

    _assert_refreshed(student, before)


def test_profile_update_overrides_supplied_timestamp(db):
    signup(db, "u-ts", username="ts")
    profile = db.query(Profile).filter(Profile.user_id == "u-ts").one()

    before = datetime.now(timezone.utc)
    profile.username = "renamed"
    profile.updated_at = STALE
    db.commit()
    db.refresh(profile)

    _assert_refreshed(profile, before)
    assert profile.username == "renamed"


def test_course_delete_refreshes_unlinked_students(db):
    course = Course(course_name="Physics", course_code="PHY1", course_duration=6)
    db.add(course)
    db.commit()
    student = Student(name="Ana", email="ana@school.edu", course_id=course.id)
    db.add(student)
    db.commit()
    # bypass the hook so the row really holds the stale value
    db.execute(Student.__table__.update().where(Student.id == student.id)
               .values(updated_at=STALE))
    db.commit()

    before = datetime.now(timezone.utc)
    assert course_service.delete_course(db, course) == 1
    db.refresh(student)

    assert student.course_id is None
    _assert_refreshed(student, before)
