"""
Commit helpers shared by the data-access services.

Uniqueness and references are checked with queries before writing, but
two requests can still race past those checks. The database constraints
are the final word: an IntegrityError on commit is rolled back and
reported as a duplicate when a unique constraint fired, and as an
invalid reference when a foreign key did.
"""

from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from registry.errors import DuplicateError, InvalidReferenceError
from registry.logging_config import get_logger, log_with_context

logger = get_logger("db")

# Columns with a unique constraint, in the order they are reported
UNIQUE_COLUMNS = ("course_code", "email", "user_id", "role")

# SQLite: "UNIQUE constraint failed", PostgreSQL: "duplicate key value violates unique constraint"
UNIQUE_MARKERS = ("unique constraint", "duplicate key")


def _is_unique_violation(message: str) -> bool:
    return any(marker in message for marker in UNIQUE_MARKERS)


def _violated_column(message: str) -> Optional[str]:
    for column in UNIQUE_COLUMNS:
        if column in message:
            return column
    return None


def commit_or_duplicate(db: Session, detail: str, field: Optional[str] = None):
    """
    Commit the session, translating constraint failures into domain errors.

    Args:
        db: Session with pending changes
        detail: Message reported to the caller on a unique violation
        field: Field to report when the violated column cannot be read
               from the driver error

    Raises:
        DuplicateError: a unique constraint was violated
        InvalidReferenceError: a referenced course or identity vanished
                               between the pre-check and the commit
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        message = str(e.orig).lower()
        if "foreign key" in message:
            log_with_context(logger, "WARNING", "Foreign key violated on commit",
                             extra_data={"error": str(e.orig)})
            raise InvalidReferenceError("A referenced record no longer exists") from e
        if not _is_unique_violation(message):
            raise

        column = _violated_column(message) or field
        log_with_context(logger, "WARNING", "Unique constraint violated on commit",
                         extra_data={"field": column, "error": str(e.orig)})
        raise DuplicateError(detail, field=column) from e
