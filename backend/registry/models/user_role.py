"""
Role assignment model - attaches an application role to an identity.

An identity may hold several roles, but each (user_id, role) pair exists
at most once. New identities receive the "student" role from the
provisioning trigger (see registry.models.triggers).
"""

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, UniqueConstraint
from registry.database import Base


class AppRole(str, enum.Enum):
    """Application roles. Stored by value ('admin', 'student')."""
    ADMIN = "admin"
    STUDENT = "student"


class UserRole(Base):
    """SQLAlchemy model for the user_roles table."""
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique role assignment identifier")
    user_id = Column(String(36), ForeignKey("identities.id", ondelete="CASCADE"), nullable=False,
                     doc="Identity holding the role")
    role = Column(Enum(AppRole, name="app_role", values_callable=lambda e: [m.value for m in e]),
                  nullable=False, default=AppRole.STUDENT,
                  doc="admin | student")
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_id_role"),
    )

    def __repr__(self):
        return f"<UserRole(user={self.user_id}, role='{self.role.value if self.role else None}')>"
