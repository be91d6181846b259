"""
Row triggers implemented as SQLAlchemy mapper events.

- Timestamp maintenance: every UPDATE of a course, student or profile
  overwrites updated_at with the current time, whatever the caller set.
- Provisioning: every INSERT of an identity creates its profile and its
  default "student" role on the same connection, so the three rows are
  committed or rolled back together.

Imported by registry.models so the listeners are always registered.
"""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import event

from registry.models.course import Course
from registry.models.student import Student
from registry.models.profile import Profile
from registry.models.identity import Identity
from registry.models.user_role import UserRole, AppRole
from registry.logging_config import get_logger, log_with_context

logger = get_logger("provisioning")


# ── Timestamp maintenance ───────────────────────────────────

def touch_updated_at(mapper, connection, target):
    """before_update hook: force updated_at to now."""
    target.updated_at = datetime.now(timezone.utc)


for _model in (Course, Student, Profile):
    event.listen(_model, "before_update", touch_updated_at)


# ── Provisioning ────────────────────────────────────────────

def provision_identity(connection, identity_id: str, username: Optional[str]) -> None:
    """
    Insert the profile row and the default role row for a new identity.

    Runs on the caller's connection and never commits. A second call for
    the same identity violates profiles.user_id uniqueness and raises
    IntegrityError; the caller's transaction must then be rolled back.
    """
    connection.execute(
        Profile.__table__.insert().values(user_id=identity_id, username=username)
    )
    connection.execute(
        UserRole.__table__.insert().values(user_id=identity_id, role=AppRole.STUDENT)
    )
    log_with_context(logger, "INFO", "Provisioned identity {}".format(identity_id),
                     context={"identity_id": identity_id},
                     extra_data={"username": username, "role": AppRole.STUDENT.value})


@event.listens_for(Identity, "after_insert")
def on_identity_created(mapper, connection, target):
    """after_insert hook on identities: provision within the same flush."""
    username = target.metadata_dict.get("username")
    if username is not None and not isinstance(username, str):
        username = str(username)
    provision_identity(connection, target.id, username)
