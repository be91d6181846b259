"""
Pydantic request schemas.

These carry the write-side validation rules: length limits, the course
code uppercasing, the 1-120 month duration range and email syntax.
Update endpoints are full replacements, so every required field must be
sent again; an omitted course_duration is a validation error, never a
default.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from registry.models.user_role import AppRole


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ── Courses ──────────────────────────────────────────────────

class CourseIn(_Payload):
    """Body of POST /api/courses and PUT /api/courses/{id}."""
    course_name: str = Field(..., min_length=2, max_length=255)
    course_code: str = Field(..., min_length=2, max_length=50)
    course_duration: int = Field(..., ge=1, le=120, strict=True,
                                 description="Duration in months")

    @field_validator("course_code")
    @classmethod
    def uppercase_code(cls, value: str) -> str:
        return value.upper()


# ── Students ─────────────────────────────────────────────────

class StudentIn(_Payload):
    """Body of POST /api/students and PUT /api/students/{id}."""
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    course_id: Optional[str] = Field(None, max_length=36)
    user_id: Optional[str] = Field(None, max_length=36,
                                   description="Identity that may read this record")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        value = value.strip().lower()
        if len(value) > 255:
            raise ValueError("Email must be at most 255 characters")
        return value

    @field_validator("course_id", "user_id", mode="before")
    @classmethod
    def empty_reference_is_none(cls, value):
        return _blank_to_none(value)


# ── Roles ────────────────────────────────────────────────────

class RoleAssignmentIn(_Payload):
    user_id: str = Field(..., min_length=1, max_length=36)
    role: AppRole


class RoleUpdateIn(_Payload):
    role: AppRole


# ── Profiles ─────────────────────────────────────────────────

class ProfileIn(_Payload):
    """Body of POST /api/profiles. user_id defaults to the caller."""
    user_id: Optional[str] = Field(None, max_length=36)
    username: Optional[str] = Field(None, min_length=2, max_length=50)

    @field_validator("username", mode="before")
    @classmethod
    def empty_username_is_none(cls, value):
        return _blank_to_none(value)


class ProfileUpdateIn(_Payload):
    username: Optional[str] = Field(None, min_length=2, max_length=50)

    @field_validator("username", mode="before")
    @classmethod
    def empty_username_is_none(cls, value):
        return _blank_to_none(value)


# ── Auth hooks ───────────────────────────────────────────────

class IdentityCreatedEvent(BaseModel):
    """Identity creation event sent by the auth provider."""
    id: str = Field(..., min_length=1, max_length=36)
    email: Optional[str] = Field(None, max_length=255)
    raw_user_meta_data: dict = Field(default_factory=dict,
                                     description="Signup metadata, may carry 'username'")
