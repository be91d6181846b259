"""
Profile model - display metadata for an identity, one row per identity.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, String
from registry.database import Base


class Profile(Base):
    """
    SQLAlchemy model for the profiles table.

    Rows are created by the provisioning trigger at signup. The unique
    user_id is what makes a second provisioning of the same identity fail.
    """
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique profile identifier")
    user_id = Column(String(36), ForeignKey("identities.id", ondelete="CASCADE"),
                     nullable=False, unique=True,
                     doc="Identity this profile belongs to")
    username = Column(String(255), nullable=True,
                      doc="Display name from signup metadata (nullable)")
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Profile(user={self.user_id}, username='{self.username}')>"
