"""
Role and ownership resolvers.

Both read storage directly, without going through the policy layer, so
that the predicates protecting user_roles and students can consult those
same tables without recursing into their own checks. Only the policy
layer (registry.authz) calls them.
"""

from typing import FrozenSet, Optional
from sqlalchemy import exists
from sqlalchemy.orm import Session

from registry.models.student import Student
from registry.models.user_role import AppRole, UserRole


def has_role(db: Session, identity_id: Optional[str], role: AppRole) -> bool:
    """True iff a (identity_id, role) row exists. Never raises for an absent identity."""
    if not identity_id:
        return False
    return bool(db.query(
        exists().where(UserRole.user_id == identity_id, UserRole.role == role)
    ).scalar())


def role_set(db: Session, identity_id: Optional[str]) -> FrozenSet[AppRole]:
    """Every role held by the identity; empty when absent or unassigned."""
    if not identity_id:
        return frozenset()
    rows = db.query(UserRole.role).filter(UserRole.user_id == identity_id).all()
    return frozenset(AppRole(row.role) for row in rows)


def student_id_for(db: Session, identity_id: Optional[str]) -> Optional[str]:
    """Id of the single student row owned by the identity, or None."""
    if not identity_id:
        return None
    row = db.query(Student.id).filter(Student.user_id == identity_id).first()
    return row.id if row else None
