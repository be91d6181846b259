"""
Shared fixtures.

The application reads its configuration at import time, so the test
database and hook secret are exported before anything from registry is
imported. Every test starts from empty tables.
"""
from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="course-registry-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "registry.db")
os.environ["AUTH_HOOK_SECRET"] = "test-hook-secret"
os.environ["IDENTITY_HEADER"] = "X-Identity-Id"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport  # noqa: E402

import registry.models  # noqa: E402,F401
from registry.database import SessionLocal, create_tables, drop_tables  # noqa: E402
from registry.models.user_role import AppRole  # noqa: E402
from registry.schemas import IdentityCreatedEvent  # noqa: E402
from registry.services import identities as identity_service  # noqa: E402
from registry.services import roles as role_service  # noqa: E402

HOOK_HEADERS = {"X-Hook-Secret": "test-hook-secret"}


@pytest.fixture(autouse=True)
def _clean_tables():
    drop_tables()
    create_tables()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def signup(db, identity_id: str, username: str | None = None, email: str | None = None):
    """Register (and provision) an identity the way the auth hook does."""
    metadata = {"username": username} if username is not None else {}
    return identity_service.register_identity(
        db, IdentityCreatedEvent(id=identity_id, email=email, raw_user_meta_data=metadata)
    )


def signup_admin(db, identity_id: str, username: str | None = None):
    identity = signup(db, identity_id, username=username)
    role_service.assign_role(db, identity_id, AppRole.ADMIN)
    return identity


def as_identity(identity_id: str) -> dict:
    return {"X-Identity-Id": identity_id}


def client() -> httpx.AsyncClient:
    from registry import main  # imported lazily so the env above is in place

    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")
