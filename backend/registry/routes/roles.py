"""
Role assignment API routes.

Identities read their own role rows; admins read and manage all of them.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from registry.authz.dependencies import get_enforcer, guard
from registry.authz.enforcer import PolicyEnforcer
from registry.authz.policies import Operation, Table
from registry.database import get_db
from registry.models.user_role import AppRole, UserRole
from registry.schemas import RoleAssignmentIn, RoleUpdateIn
from registry.services import roles as role_service

router = APIRouter()


def serialize_role(assignment: UserRole) -> dict:
    return {
        "id": str(assignment.id),
        "user_id": assignment.user_id,
        "role": AppRole(assignment.role).value,
        "created_at": assignment.created_at.isoformat() if assignment.created_at else None,
    }


@router.get("/api/roles")
def list_roles(user_id: Optional[str] = Query(None, description="Filter by identity"),
               db: Session = Depends(get_db),
               enforcer: PolicyEnforcer = Depends(get_enforcer)):
    rows = enforcer.filter_rows(Table.USER_ROLES, role_service.list_roles(db, user_id=user_id))
    return {"data": [serialize_role(r) for r in rows]}


@router.get("/api/roles/me")
def my_roles(db: Session = Depends(get_db),
             enforcer: PolicyEnforcer = Depends(get_enforcer)):
    """
    Roles of the caller. An identity without role rows is treated as a
    plain student by clients, but satisfies no admin check.
    """
    rows = enforcer.filter_rows(
        Table.USER_ROLES, role_service.list_roles(db, user_id=enforcer.identity_id)
    )
    roles = sorted(AppRole(r.role).value for r in rows)
    return {
        "user_id": enforcer.identity_id,
        "roles": roles,
        "is_admin": AppRole.ADMIN.value in roles,
    }


@router.post("/api/roles", status_code=201)
def assign_role(payload: RoleAssignmentIn, db: Session = Depends(get_db),
                enforcer: PolicyEnforcer = Depends(guard(Table.USER_ROLES, Operation.INSERT))):
    enforcer.require(Table.USER_ROLES, Operation.INSERT, payload)
    return serialize_role(role_service.assign_role(db, payload.user_id, payload.role))


@router.put("/api/roles/{role_id}")
def change_role(role_id: str, payload: RoleUpdateIn, db: Session = Depends(get_db),
                enforcer: PolicyEnforcer = Depends(guard(Table.USER_ROLES, Operation.UPDATE))):
    assignment = enforcer.visible(Table.USER_ROLES, role_service.get_role(db, role_id),
                                  "Role assignment not found")
    enforcer.require(Table.USER_ROLES, Operation.UPDATE, assignment)
    return serialize_role(role_service.change_role(db, assignment, payload.role))


@router.delete("/api/roles/{role_id}")
def revoke_role(role_id: str, db: Session = Depends(get_db),
                enforcer: PolicyEnforcer = Depends(guard(Table.USER_ROLES, Operation.DELETE))):
    assignment = enforcer.visible(Table.USER_ROLES, role_service.get_role(db, role_id),
                                  "Role assignment not found")
    enforcer.require(Table.USER_ROLES, Operation.DELETE, assignment)

    role_service.revoke_role(db, assignment)
    return {"message": "Role revoked successfully", "role_id": role_id}
