"""
Grant the admin role to an identity, directly in the database.

Only admins can assign roles through the API, so the first admin has to
be created here. If the identity is unknown it is registered (and
provisioned) first.

Usage:
    python bootstrap_admin.py <identity-id> [email] [username]
"""

import sys

from registry.database import SessionLocal, create_tables
from registry.config import DATABASE_URL
from registry.errors import DuplicateError
from registry.logging_config import setup_logging
from registry.models.user_role import AppRole
from registry.schemas import IdentityCreatedEvent
from registry.services import identities as identity_service
from registry.services import roles as role_service


def main():
    if len(sys.argv) < 2:
        print("Usage: python bootstrap_admin.py <identity-id> [email] [username]")
        sys.exit(1)

    identity_id = sys.argv[1]
    email = sys.argv[2] if len(sys.argv) > 2 else None
    username = sys.argv[3] if len(sys.argv) > 3 else None

    setup_logging()
    if DATABASE_URL.startswith("sqlite"):
        create_tables()

    db = SessionLocal()
    try:
        if identity_service.get_identity(db, identity_id) is None:
            metadata = {"username": username} if username else {}
            identity_service.register_identity(
                db, IdentityCreatedEvent(id=identity_id, email=email, raw_user_meta_data=metadata)
            )
            print(f"Registered identity {identity_id}")

        try:
            role_service.assign_role(db, identity_id, AppRole.ADMIN)
            print(f"✅ {identity_id} is now an admin")
        except DuplicateError:
            print(f"{identity_id} is already an admin")
    finally:
        db.close()


if __name__ == "__main__":
    main()
