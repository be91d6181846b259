"""
Domain exceptions.

Services and the authorization layer raise these; the handlers registered
in registry.main turn them into JSON error responses. Each class carries
the error ``kind`` reported to clients and the HTTP status it maps to.
"""

from typing import Optional


class RegistryError(Exception):
    """Base class for all errors reported to API callers."""

    kind = "error"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


class AuthenticationRequired(RegistryError):
    kind = "unauthenticated"
    status_code = 401


class AuthorizationDenied(RegistryError):
    """A policy predicate evaluated to false. Nothing was written."""

    kind = "forbidden"
    status_code = 403

    def __init__(self, table: str, operation: str):
        super().__init__(f"Permission denied for {operation} on {table}")
        self.table = table
        self.operation = operation


class NotFoundError(RegistryError):
    kind = "not_found"
    status_code = 404


class DuplicateError(RegistryError):
    """A unique constraint (course code, student email, ...) was violated."""

    kind = "duplicate"
    status_code = 409

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class ConflictError(RegistryError):
    kind = "conflict"
    status_code = 409


class ProvisioningError(RegistryError):
    """Profile + default role creation failed; the signup was rolled back."""

    kind = "provisioning_failed"
    status_code = 409


class InvalidReferenceError(RegistryError):
    """A payload points at a course or identity that does not exist."""

    kind = "invalid_reference"
    status_code = 422

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body
