"""
Role assignment data access (user_roles table).
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from registry.errors import ConflictError, DuplicateError, InvalidReferenceError
from registry.models.identity import Identity
from registry.models.user_role import AppRole, UserRole
from registry.services.persistence import commit_or_duplicate
from registry.logging_config import get_logger, log_with_context

logger = get_logger("db")


def list_roles(db: Session, user_id: Optional[str] = None) -> List[UserRole]:
    query = db.query(UserRole)
    if user_id:
        query = query.filter(UserRole.user_id == user_id)
    return query.order_by(UserRole.user_id, UserRole.created_at).all()


def get_role(db: Session, role_id: str) -> Optional[UserRole]:
    return db.query(UserRole).filter(UserRole.id == role_id).first()


def _ensure_pair_free(db: Session, user_id: str, role: AppRole, exclude_id: Optional[str] = None):
    existing = db.query(UserRole).filter(
        UserRole.user_id == user_id, UserRole.role == role
    ).first()
    if existing is not None and existing.id != exclude_id:
        raise DuplicateError("Identity already holds the {} role".format(role.value), field="role")


def assign_role(db: Session, user_id: str, role: AppRole) -> UserRole:
    if db.get(Identity, user_id) is None:
        raise InvalidReferenceError("Identity {} does not exist".format(user_id), field="user_id")
    _ensure_pair_free(db, user_id, role)

    assignment = UserRole(user_id=user_id, role=role)
    db.add(assignment)
    commit_or_duplicate(db, "Identity already holds the {} role".format(role.value), field="role")
    db.refresh(assignment)

    log_with_context(logger, "INFO", "Assigned role {} to {}".format(role.value, user_id),
                     context={"identity_id": user_id, "role_id": assignment.id})
    return assignment


def change_role(db: Session, assignment: UserRole, role: AppRole) -> UserRole:
    _ensure_pair_free(db, assignment.user_id, role, exclude_id=assignment.id)

    previous = assignment.role
    assignment.role = role
    commit_or_duplicate(db, "Identity already holds the {} role".format(role.value), field="role")
    db.refresh(assignment)

    log_with_context(logger, "INFO", "Changed role of {} from {} to {}".format(
                         assignment.user_id, previous.value, role.value),
                     context={"identity_id": assignment.user_id, "role_id": assignment.id})
    return assignment


def revoke_role(db: Session, assignment: UserRole) -> None:
    """
    Delete a role assignment.

    Raises:
        ConflictError: if it is the identity's only role; every provisioned
            identity keeps at least one role.
    """
    remaining = db.query(UserRole).filter(
        UserRole.user_id == assignment.user_id, UserRole.id != assignment.id
    ).count()
    if remaining == 0:
        raise ConflictError("Cannot remove the last role of an identity")

    role_id, user_id = assignment.id, assignment.user_id
    db.delete(assignment)
    db.commit()
    log_with_context(logger, "INFO", "Revoked role {} from {}".format(role_id, user_id),
                     context={"identity_id": user_id, "role_id": role_id})
