"""
Identity model - local mirror of the auth provider's users.

Identities are issued by the external auth provider and reach us through
the auth hooks. They exist so that students, roles and profiles have a
foreign key target that cascades on deletion.
"""

import json
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String, Text
from registry.database import Base


class Identity(Base):
    """SQLAlchemy model for the identities table."""
    __tablename__ = "identities"

    id = Column(String(36), primary_key=True,
                doc="Subject id issued by the auth provider")
    email = Column(String(255), nullable=True,
                   doc="Login email as reported by the auth provider")
    raw_user_meta_data = Column(Text, nullable=False, default="{}",
                                doc="Signup metadata as JSON, e.g. {\"username\": \"alice\"}")
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))

    @property
    def metadata_dict(self):
        """Parse raw_user_meta_data JSON string to dict."""
        if isinstance(self.raw_user_meta_data, dict):
            return self.raw_user_meta_data
        try:
            value = json.loads(self.raw_user_meta_data) if self.raw_user_meta_data else {}
        except (json.JSONDecodeError, TypeError):
            return {}
        return value if isinstance(value, dict) else {}

    def __repr__(self):
        return f"<Identity(id={self.id}, email='{self.email}')>"
