"""
Row-level policy table.

Every (table, operation) pair maps to a tuple of predicate clauses. A
clause is a pure function of the requesting principal and the row (the
stored row for select/update/delete, the candidate row for insert).
Clauses are OR-combined: any true clause grants access. There is no deny
override, and a pair without an entry is always denied.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple
from collections.abc import Mapping

from registry.models.user_role import AppRole


class Table(str, enum.Enum):
    COURSES = "courses"
    STUDENTS = "students"
    USER_ROLES = "user_roles"
    PROFILES = "profiles"


class Operation(str, enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Principal:
    """The requesting identity and the roles it held when the check ran."""
    identity_id: Optional[str]
    roles: FrozenSet[AppRole] = field(default_factory=frozenset)

    def has_role(self, role: AppRole) -> bool:
        return role in self.roles


Predicate = Callable[[Principal, Any], bool]


def row_owner(row: Any) -> Optional[str]:
    """user_id of an ORM row, a mapping or a pydantic payload."""
    if row is None:
        return None
    if isinstance(row, Mapping):
        return row.get("user_id")
    return getattr(row, "user_id", None)


# ── Clauses ──────────────────────────────────────────────────

def authenticated(principal: Principal, row: Any) -> bool:
    return bool(principal.identity_id)


def is_admin(principal: Principal, row: Any) -> bool:
    return principal.has_role(AppRole.ADMIN)


def owns_row(principal: Principal, row: Any) -> bool:
    return bool(principal.identity_id) and row_owner(row) == principal.identity_id


POLICIES: Dict[Tuple[Table, Operation], Tuple[Predicate, ...]] = {
    (Table.COURSES, Operation.SELECT): (authenticated,),
    (Table.COURSES, Operation.INSERT): (is_admin,),
    (Table.COURSES, Operation.UPDATE): (is_admin,),
    (Table.COURSES, Operation.DELETE): (is_admin,),

    (Table.STUDENTS, Operation.SELECT): (is_admin, owns_row),
    (Table.STUDENTS, Operation.INSERT): (is_admin,),
    (Table.STUDENTS, Operation.UPDATE): (is_admin,),
    (Table.STUDENTS, Operation.DELETE): (is_admin,),

    (Table.USER_ROLES, Operation.SELECT): (owns_row, is_admin),
    (Table.USER_ROLES, Operation.INSERT): (is_admin,),
    (Table.USER_ROLES, Operation.UPDATE): (is_admin,),
    (Table.USER_ROLES, Operation.DELETE): (is_admin,),

    (Table.PROFILES, Operation.SELECT): (owns_row, is_admin),
    (Table.PROFILES, Operation.INSERT): (owns_row,),
    (Table.PROFILES, Operation.UPDATE): (owns_row,),
}

# Clauses that never look at the row. Operations guarded only by these
# can be decided before the target row is fetched.
ROW_INDEPENDENT = frozenset({authenticated, is_admin})


def clauses_for(table: Table, operation: Operation) -> Tuple[Predicate, ...]:
    return POLICIES.get((table, operation), ())


def evaluate(principal: Principal, table: Table, operation: Operation, row: Any = None) -> bool:
    """OR-combine the clauses of (table, operation). No clauses means deny."""
    return any(clause(principal, row) for clause in clauses_for(table, operation))


def is_row_independent(table: Table, operation: Operation) -> bool:
    clauses = clauses_for(table, operation)
    return bool(clauses) and all(clause in ROW_INDEPENDENT for clause in clauses)
