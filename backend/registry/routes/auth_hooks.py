"""
Auth provider hooks.

The external auth provider calls these when an identity is created or
deleted. Creation provisions the profile and default student role in the
same transaction; deletion cascades to the identity's student record,
roles and profile.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from registry.authz.dependencies import verify_hook_secret
from registry.database import get_db
from registry.schemas import IdentityCreatedEvent
from registry.services import identities as identity_service
from registry.services import profiles as profile_service
from registry.services import roles as role_service
from registry.routes.profiles import serialize_profile
from registry.routes.roles import serialize_role

router = APIRouter(dependencies=[Depends(verify_hook_secret)])


@router.post("/api/auth/hooks/identity-created", status_code=201)
def identity_created(event: IdentityCreatedEvent, db: Session = Depends(get_db)):
    identity = identity_service.register_identity(db, event)
    profile = profile_service.get_profile_for(db, identity.id)
    return {
        "id": identity.id,
        "email": identity.email,
        "profile": serialize_profile(profile) if profile else None,
        "roles": [serialize_role(r) for r in role_service.list_roles(db, user_id=identity.id)],
    }


@router.delete("/api/auth/hooks/identities/{identity_id}", status_code=204)
def identity_deleted(identity_id: str, db: Session = Depends(get_db)):
    identity_service.delete_identity(db, identity_id)
    return Response(status_code=204)
