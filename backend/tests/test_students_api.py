"""
Students API: admins manage everything, a student sees only the row
linked to its identity.
"""
from __future__ import annotations

import pytest

from conftest import as_identity, client, signup, signup_admin

pytestmark = pytest.mark.anyio


@pytest.fixture
def people(db):
    signup_admin(db, "u-admin")
    signup(db, "u-alice", username="alice")
    signup(db, "u-bob", username="bob")
    return {
        "admin": as_identity("u-admin"),
        "alice": as_identity("u-alice"),
        "bob": as_identity("u-bob"),
    }


async def _seed(c, admin):
    course = (await c.post("/api/courses", json={"course_name": "Biology", "course_code": "BIO1",
                                                 "course_duration": 12}, headers=admin)).json()
    alice = (await c.post("/api/students", json={"name": "Alice", "email": "Alice@School.edu",
                                                 "course_id": course["id"], "user_id": "u-alice"},
                          headers=admin)).json()
    other = (await c.post("/api/students", json={"name": "Carla", "email": "carla@school.edu"},
                          headers=admin)).json()
    return course, alice, other


async def test_admin_creates_student_with_course(people):
    async with client() as c:
        course, alice, _ = await _seed(c, people["admin"])
        assert alice["email"] == "alice@school.edu"
        assert alice["course"]["course_code"] == "BIO1"
        assert alice["user_id"] == "u-alice"


async def test_student_sees_only_own_row(people):
    async with client() as c:
        _, alice, other = await _seed(c, people["admin"])

        r = await c.get("/api/students", headers=people["alice"])
        assert [row["id"] for row in r.json()["data"]] == [alice["id"]]
        assert r.json()["pagination"]["total"] == 1

        r = await c.get("/api/students", headers=people["bob"])
        assert r.json()["data"] == []

        r = await c.get(f"/api/students/{other['id']}", headers=people["alice"])
        assert r.status_code == 404
        r = await c.get(f"/api/students/{alice['id']}", headers=people["alice"])
        assert r.status_code == 200

        r = await c.get("/api/students", headers=people["admin"])
        assert r.json()["pagination"]["total"] == 2


async def test_own_student_record(people):
    async with client() as c:
        _, alice, _ = await _seed(c, people["admin"])

        r = await c.get("/api/students/me", headers=people["alice"])
        assert r.json()["data"]["id"] == alice["id"]

        r = await c.get("/api/students/me", headers=people["bob"])
        assert r.json() == {"data": None}


async def test_duplicate_email_is_rejected(people):
    async with client() as c:
        await _seed(c, people["admin"])
        r = await c.post("/api/students", json={"name": "Alicia", "email": "alice@school.edu"},
                         headers=people["admin"])
        assert r.status_code == 409
        assert r.json() == {"error": "duplicate", "detail": "A student with this email already exists",
                            "field": "email"}


async def test_identity_owns_at_most_one_student(people):
    async with client() as c:
        await _seed(c, people["admin"])
        r = await c.post("/api/students", json={"name": "Alice Two", "email": "a2@school.edu",
                                                "user_id": "u-alice"},
                         headers=people["admin"])
        assert r.status_code == 409
        assert r.json()["field"] == "user_id"


async def test_unknown_references_are_rejected(people):
    async with client() as c:
        r = await c.post("/api/students", json={"name": "Dan", "email": "dan@school.edu",
                                                "course_id": "missing"},
                         headers=people["admin"])
        assert r.status_code == 422
        assert r.json()["error"] == "invalid_reference"

        r = await c.post("/api/students", json={"name": "Dan", "email": "dan@school.edu",
                                                "user_id": "missing"},
                         headers=people["admin"])
        assert r.status_code == 422
        assert r.json()["field"] == "user_id"


async def test_non_admin_cannot_write_students(people):
    async with client() as c:
        _, alice, _ = await _seed(c, people["admin"])
        payload = {"name": "Alice", "email": "alice@school.edu"}

        assert (await c.post("/api/students", json=payload,
                             headers=people["alice"])).status_code == 403
        # Even the owner cannot edit or delete its own record
        assert (await c.put(f"/api/students/{alice['id']}", json=payload,
                            headers=people["alice"])).status_code == 403
        assert (await c.delete(f"/api/students/{alice['id']}",
                               headers=people["alice"])).status_code == 403


async def test_admin_updates_and_deletes(people):
    async with client() as c:
        course, alice, other = await _seed(c, people["admin"])

        r = await c.put(f"/api/students/{other['id']}",
                        json={"name": "Carla Diaz", "email": "carla@school.edu",
                              "course_id": course["id"]},
                        headers=people["admin"])
        assert r.status_code == 200
        assert r.json()["name"] == "Carla Diaz"
        assert r.json()["course_id"] == course["id"]

        r = await c.put(f"/api/students/{other['id']}",
                        json={"name": "Carla Diaz", "email": "alice@school.edu"},
                        headers=people["admin"])
        assert r.status_code == 409

        r = await c.delete(f"/api/students/{other['id']}", headers=people["admin"])
        assert r.status_code == 200
        r = await c.get(f"/api/students/{other['id']}", headers=people["admin"])
        assert r.status_code == 404


async def test_search_and_course_filter(people):
    async with client() as c:
        course, alice, other = await _seed(c, people["admin"])

        r = await c.get("/api/students", params={"search": "CARLA"}, headers=people["admin"])
        assert [row["id"] for row in r.json()["data"]] == [other["id"]]

        for literal in ("%", "_"):
            r = await c.get("/api/students", params={"search": literal}, headers=people["admin"])
            assert r.json()["pagination"]["total"] == 0

        r = await c.get("/api/students", params={"course_id": course["id"]},
                        headers=people["admin"])
        assert [row["id"] for row in r.json()["data"]] == [alice["id"]]

        r = await c.get("/api/students", params={"per_page": 1, "page": 2},
                        headers=people["admin"])
        body = r.json()
        assert len(body["data"]) == 1
        assert body["pagination"]["total_pages"] == 2


@pytest.mark.parametrize("payload", [
    {"name": "A", "email": "a@school.edu"},
    {"name": "Anna", "email": "not-an-email"},
    {"name": "Anna"},
])
async def test_invalid_student_payloads(people, payload):
    async with client() as c:
        r = await c.post("/api/students", json=payload, headers=people["admin"])
        assert r.status_code == 422
