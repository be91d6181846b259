"""
Courses API: anyone signed in reads, only admins write.
"""
from __future__ import annotations

import pytest

from conftest import as_identity, client, signup, signup_admin

from registry.schemas import StudentIn
from registry.services import students as student_service

pytestmark = pytest.mark.anyio

VALID = {"course_name": "Computer Science", "course_code": "cs101", "course_duration": 36}


@pytest.fixture
def people(db):
    signup_admin(db, "u-admin", username="admin")
    signup(db, "u-student", username="stud")
    return {"admin": as_identity("u-admin"), "student": as_identity("u-student")}


async def test_admin_creates_course_with_uppercased_code(people):
    async with client() as c:
        r = await c.post("/api/courses", json=VALID, headers=people["admin"])
        assert r.status_code == 201
        body = r.json()
        assert body["course_code"] == "CS101"
        assert body["student_count"] == 0
        assert r.headers.get("X-Request-ID")


async def test_duplicate_code_is_rejected_case_insensitively(people):
    async with client() as c:
        assert (await c.post("/api/courses", json=VALID, headers=people["admin"])).status_code == 201
        dup = dict(VALID, course_name="Other", course_code=" Cs101 ")
        r = await c.post("/api/courses", json=dup, headers=people["admin"])
        assert r.status_code == 409
        assert r.json()["error"] == "duplicate"
        assert r.json()["field"] == "course_code"


async def test_update_to_existing_code_is_duplicate(people):
    async with client() as c:
        await c.post("/api/courses", json=VALID, headers=people["admin"])
        other = (await c.post("/api/courses", json=dict(VALID, course_code="MA1"),
                              headers=people["admin"])).json()
        r = await c.put(f"/api/courses/{other['id']}", json=VALID, headers=people["admin"])
        assert r.status_code == 409
        assert r.json()["error"] == "duplicate"


@pytest.mark.parametrize("payload", [
    VALID,
    {"course_name": "x", "course_code": "", "course_duration": 0},
    {},
])
async def test_non_admin_writes_refused_regardless_of_payload(people, payload):
    async with client() as c:
        created = (await c.post("/api/courses", json=VALID, headers=people["admin"])).json()

        r = await c.post("/api/courses", json=payload, headers=people["student"])
        assert r.status_code == 403
        assert r.json()["error"] == "forbidden"

        r = await c.put(f"/api/courses/{created['id']}", json=payload, headers=people["student"])
        assert r.status_code == 403

        r = await c.delete(f"/api/courses/{created['id']}", headers=people["student"])
        assert r.status_code == 403

        # Nothing changed
        r = await c.get(f"/api/courses/{created['id']}", headers=people["student"])
        assert r.status_code == 200
        assert r.json()["course_name"] == VALID["course_name"]


async def test_non_admin_cannot_probe_missing_course(people):
    async with client() as c:
        r = await c.delete("/api/courses/does-not-exist", headers=people["student"])
        assert r.status_code == 403
        r = await c.delete("/api/courses/does-not-exist", headers=people["admin"])
        assert r.status_code == 404


@pytest.mark.parametrize("payload", [
    {"course_name": "A", "course_code": "AB", "course_duration": 6},
    {"course_name": "Algebra", "course_code": "A", "course_duration": 6},
    {"course_name": "Algebra", "course_code": "AB", "course_duration": 0},
    {"course_name": "Algebra", "course_code": "AB", "course_duration": 121},
    {"course_name": "Algebra", "course_code": "AB", "course_duration": "6"},
    {"course_name": "Algebra", "course_code": "AB"},
])
async def test_invalid_course_payloads(people, payload):
    async with client() as c:
        r = await c.post("/api/courses", json=payload, headers=people["admin"])
        assert r.status_code == 422


async def test_update_without_duration_is_validation_error(people):
    async with client() as c:
        created = (await c.post("/api/courses", json=VALID, headers=people["admin"])).json()
        r = await c.put(f"/api/courses/{created['id']}",
                        json={"course_name": "CS", "course_code": "CS101"},
                        headers=people["admin"])
        assert r.status_code == 422


async def test_list_is_ordered_by_name_with_student_counts(db, people):
    async with client() as c:
        z = (await c.post("/api/courses", json={"course_name": "Zoology", "course_code": "ZO1",
                                                "course_duration": 12},
                          headers=people["admin"])).json()
        await c.post("/api/courses", json=VALID, headers=people["admin"])

    for i in range(2):
        student_service.create_student(
            db, StudentIn(name=f"Zed {i}", email=f"zed{i}@school.edu", course_id=z["id"]))

    async with client() as c:
        r = await c.get("/api/courses", headers=people["admin"])
        names = [(row["course_name"], row["student_count"]) for row in r.json()["data"]]
        assert names == [("Computer Science", 0), ("Zoology", 2)]

        # A student only counts the students it can see
        r = await c.get("/api/courses", headers=people["student"])
        assert [row["student_count"] for row in r.json()["data"]] == [0, 0]


async def test_list_search_matches_name_or_code(people):
    async with client() as c:
        await c.post("/api/courses", json=VALID, headers=people["admin"])
        await c.post("/api/courses", json={"course_name": "Zoology", "course_code": "ZO1",
                                           "course_duration": 12},
                     headers=people["admin"])

        r = await c.get("/api/courses", params={"search": "zoo"}, headers=people["student"])
        assert [row["course_code"] for row in r.json()["data"]] == ["ZO1"]

        r = await c.get("/api/courses", params={"search": "cs1"}, headers=people["student"])
        assert [row["course_code"] for row in r.json()["data"]] == ["CS101"]

        r = await c.get("/api/courses", params={"search": "_"}, headers=people["student"])
        assert r.json()["data"] == []


async def test_deleting_course_unlinks_its_students(db, people):
    async with client() as c:
        course = (await c.post("/api/courses", json=VALID, headers=people["admin"])).json()

    ids = [
        student_service.create_student(
            db, StudentIn(name=f"Student {i}", email=f"s{i}@school.edu", course_id=course["id"])).id
        for i in range(3)
    ]

    async with client() as c:
        r = await c.delete(f"/api/courses/{course['id']}", headers=people["admin"])
        assert r.status_code == 200
        assert r.json()["students_unlinked"] == 3

        r = await c.get("/api/students", headers=people["admin"])
        rows = {row["id"]: row for row in r.json()["data"]}
        assert set(rows) == set(ids)
        assert all(row["course_id"] is None and row["course"] is None for row in rows.values())


async def test_requests_without_identity_are_unauthenticated(people):
    async with client() as c:
        r = await c.get("/api/courses")
        assert r.status_code == 401
        assert r.json()["error"] == "unauthenticated"

        r = await c.get("/api/courses", headers=as_identity("never-signed-up"))
        assert r.status_code == 401
