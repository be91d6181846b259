"""
Profiles API routes.

An identity reads and edits its own profile; admins may read every
profile but edit none but their own. Profiles are normally created by
the signup provisioning; POST only exists to recreate a missing one.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from registry.authz.dependencies import get_enforcer
from registry.authz.enforcer import PolicyEnforcer
from registry.authz.policies import Operation, Table
from registry.database import get_db
from registry.models.profile import Profile
from registry.schemas import ProfileIn, ProfileUpdateIn
from registry.services import profiles as profile_service

router = APIRouter()


def serialize_profile(profile: Profile) -> dict:
    return {
        "id": str(profile.id),
        "user_id": profile.user_id,
        "username": profile.username,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
        "updated_at": profile.updated_at.isoformat() if profile.updated_at else None,
    }


@router.get("/api/profiles")
def list_profiles(db: Session = Depends(get_db),
                  enforcer: PolicyEnforcer = Depends(get_enforcer)):
    rows = enforcer.filter_rows(Table.PROFILES, profile_service.list_profiles(db))
    return {"data": [serialize_profile(p) for p in rows]}


@router.get("/api/profiles/me")
def get_own_profile(db: Session = Depends(get_db),
                    enforcer: PolicyEnforcer = Depends(get_enforcer)):
    profile = enforcer.visible(Table.PROFILES,
                               profile_service.get_profile_for(db, enforcer.identity_id),
                               "Profile not found")
    return serialize_profile(profile)


@router.post("/api/profiles", status_code=201)
def create_profile(payload: ProfileIn, db: Session = Depends(get_db),
                   enforcer: PolicyEnforcer = Depends(get_enforcer)):
    user_id = payload.user_id or enforcer.identity_id
    enforcer.require(Table.PROFILES, Operation.INSERT, {"user_id": user_id})
    return serialize_profile(profile_service.create_profile(db, user_id, payload.username))


@router.put("/api/profiles/me")
def update_own_profile(payload: ProfileUpdateIn, db: Session = Depends(get_db),
                       enforcer: PolicyEnforcer = Depends(get_enforcer)):
    return update_profile(enforcer.identity_id, payload, db, enforcer)


@router.put("/api/profiles/{user_id}")
def update_profile(user_id: str, payload: ProfileUpdateIn, db: Session = Depends(get_db),
                   enforcer: PolicyEnforcer = Depends(get_enforcer)):
    """Update the username of a profile. Only its owner may do so."""
    profile = enforcer.visible(Table.PROFILES, profile_service.get_profile_for(db, user_id),
                               "Profile not found")
    enforcer.require(Table.PROFILES, Operation.UPDATE, profile)
    return serialize_profile(profile_service.update_profile(db, profile, payload.username))
