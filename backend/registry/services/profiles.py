"""
Profile data access.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from registry.errors import DuplicateError
from registry.models.profile import Profile
from registry.services.persistence import commit_or_duplicate
from registry.logging_config import get_logger, log_with_context

logger = get_logger("db")


def list_profiles(db: Session) -> List[Profile]:
    return db.query(Profile).order_by(Profile.created_at).all()


def get_profile_for(db: Session, user_id: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def create_profile(db: Session, user_id: str, username: Optional[str]) -> Profile:
    if get_profile_for(db, user_id) is not None:
        raise DuplicateError("A profile already exists for this identity", field="user_id")

    profile = Profile(user_id=user_id, username=username)
    db.add(profile)
    commit_or_duplicate(db, "A profile already exists for this identity", field="user_id")
    db.refresh(profile)

    log_with_context(logger, "INFO", "Created profile for {}".format(user_id),
                     context={"identity_id": user_id})
    return profile


def update_profile(db: Session, profile: Profile, username: Optional[str]) -> Profile:
    profile.username = username
    db.commit()
    db.refresh(profile)
    log_with_context(logger, "INFO", "Updated profile for {}".format(profile.user_id),
                     context={"identity_id": profile.user_id})
    return profile
