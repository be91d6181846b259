"""
Auth provider hooks: identity creation provisions, deletion cascades.
"""
from __future__ import annotations

import pytest

from conftest import HOOK_HEADERS, as_identity, client, signup_admin

pytestmark = pytest.mark.anyio


async def test_identity_created_provisions_profile_and_role():
    async with client() as c:
        r = await c.post("/api/auth/hooks/identity-created",
                         json={"id": "u1", "email": "alice@school.edu",
                               "raw_user_meta_data": {"username": "alice"}},
                         headers=HOOK_HEADERS)
        assert r.status_code == 201
        body = r.json()
        assert body["profile"]["username"] == "alice"
        assert [(role["user_id"], role["role"]) for role in body["roles"]] == [("u1", "student")]

        r = await c.get("/api/roles/me", headers=as_identity("u1"))
        assert r.json()["roles"] == ["student"]
        assert r.json()["is_admin"] is False


async def test_second_signup_fails_atomically():
    async with client() as c:
        event = {"id": "u1", "raw_user_meta_data": {"username": "alice"}}
        assert (await c.post("/api/auth/hooks/identity-created", json=event,
                             headers=HOOK_HEADERS)).status_code == 201

        r = await c.post("/api/auth/hooks/identity-created",
                         json={"id": "u1", "raw_user_meta_data": {"username": "mallory"}},
                         headers=HOOK_HEADERS)
        assert r.status_code == 409
        assert r.json()["error"] == "provisioning_failed"

        r = await c.get("/api/profiles", headers=as_identity("u1"))
        assert [p["username"] for p in r.json()["data"]] == ["alice"]
        r = await c.get("/api/roles", headers=as_identity("u1"))
        assert len(r.json()["data"]) == 1


async def test_hooks_require_secret():
    async with client() as c:
        r = await c.post("/api/auth/hooks/identity-created", json={"id": "u1"})
        assert r.status_code == 403
        r = await c.post("/api/auth/hooks/identity-created", json={"id": "u1"},
                         headers={"X-Hook-Secret": "wrong"})
        assert r.status_code == 403


async def test_identity_deletion_cascades(db):
    signup_admin(db, "u-admin")
    admin = as_identity("u-admin")

    async with client() as c:
        await c.post("/api/auth/hooks/identity-created", json={"id": "u2"}, headers=HOOK_HEADERS)
        student = (await c.post("/api/students",
                                json={"name": "Bea", "email": "bea@school.edu", "user_id": "u2"},
                                headers=admin)).json()

        r = await c.delete("/api/auth/hooks/identities/u2", headers=HOOK_HEADERS)
        assert r.status_code == 204

        assert (await c.get(f"/api/students/{student['id']}", headers=admin)).status_code == 404
        r = await c.get("/api/roles", params={"user_id": "u2"}, headers=admin)
        assert r.json()["data"] == []
        r = await c.get("/api/profiles", headers=admin)
        assert all(p["user_id"] != "u2" for p in r.json()["data"])

        # The identity can no longer authenticate
        assert (await c.get("/api/courses", headers=as_identity("u2"))).status_code == 401

        r = await c.delete("/api/auth/hooks/identities/u2", headers=HOOK_HEADERS)
        assert r.status_code == 404
