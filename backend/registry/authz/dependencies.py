"""
FastAPI dependencies resolving the caller.

The auth gateway in front of the service authenticates the user and
forwards the identity id in a header (IDENTITY_HEADER). The identity
must be known locally, i.e. it went through the identity-created hook.
"""

import hmac
from typing import Optional
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from registry.authz.enforcer import PolicyEnforcer
from registry.authz.policies import Operation, Table
from registry.config import AUTH_HOOK_SECRET, IDENTITY_HEADER
from registry.database import get_db
from registry.errors import AuthenticationRequired, AuthorizationDenied
from registry.models.identity import Identity


def get_current_identity(request: Request, db: Session = Depends(get_db)) -> str:
    identity_id = (request.headers.get(IDENTITY_HEADER) or "").strip()
    if not identity_id:
        raise AuthenticationRequired("Missing {} header".format(IDENTITY_HEADER))
    if db.get(Identity, identity_id) is None:
        raise AuthenticationRequired("Unknown identity")
    return identity_id


def get_enforcer(identity_id: str = Depends(get_current_identity),
                 db: Session = Depends(get_db)) -> PolicyEnforcer:
    return PolicyEnforcer(db, identity_id)


def verify_hook_secret(x_hook_secret: Optional[str] = Header(None)) -> None:
    """Auth hooks must present AUTH_HOOK_SECRET when one is configured."""
    if not AUTH_HOOK_SECRET:
        return
    supplied = (x_hook_secret or "").encode()
    if not hmac.compare_digest(supplied, AUTH_HOOK_SECRET.encode()):
        raise AuthorizationDenied("identities", "hook")


def guard(table: Table, operation: Operation):
    """
    Dependency factory for mutating routes.

    Row-independent rules (admin-only tables) are decided here, before the
    request body is validated or the target row is loaded, so a caller
    without the right is refused whatever it sent.
    """
    def dependency(enforcer: PolicyEnforcer = Depends(get_enforcer)) -> PolicyEnforcer:
        enforcer.precheck(table, operation)
        return enforcer
    return dependency
