"""
Identity lifecycle, driven by the auth provider hooks.

Registering an identity inserts the identities row; the provisioning
trigger (registry.models.triggers) adds the profile and default role in
the same flush. One commit covers all three rows.
"""

import json
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from registry.errors import NotFoundError, ProvisioningError
from registry.models.identity import Identity
from registry.schemas import IdentityCreatedEvent
from registry.logging_config import get_logger, log_with_context

logger = get_logger("provisioning")


def get_identity(db: Session, identity_id: str) -> Optional[Identity]:
    return db.get(Identity, identity_id)


def register_identity(db: Session, event: IdentityCreatedEvent) -> Identity:
    """
    Create and provision an identity as one transaction.

    Raises:
        ProvisioningError: identity, profile or role insert failed (for
            instance a second signup for the same identity). Nothing is
            left behind; the error is not retried.
    """
    identity = Identity(
        id=event.id,
        email=event.email,
        raw_user_meta_data=json.dumps(event.raw_user_meta_data),
    )
    db.add(identity)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log_with_context(logger, "ERROR", "Provisioning failed for {}".format(event.id),
                         context={"identity_id": event.id},
                         extra_data={"error": str(e.orig)})
        raise ProvisioningError(
            "Could not provision identity {}: already provisioned".format(event.id)
        ) from e

    db.refresh(identity)
    log_with_context(logger, "INFO", "Registered identity {}".format(identity.id),
                     context={"identity_id": identity.id})
    return identity


def delete_identity(db: Session, identity_id: str) -> None:
    """
    Remove an identity. Its student record, roles and profile are
    deleted by the database (ON DELETE CASCADE).
    """
    identity = db.get(Identity, identity_id)
    if identity is None:
        raise NotFoundError("Identity {} not found".format(identity_id))

    db.delete(identity)
    db.commit()
    db.expire_all()
    log_with_context(logger, "INFO", "Deleted identity {}".format(identity_id),
                     context={"identity_id": identity_id})
