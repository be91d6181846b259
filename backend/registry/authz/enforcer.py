"""
Policy enforcement point.

Routes talk to storage through a PolicyEnforcer bound to the request's
session and identity. The principal (identity + roles) is resolved again
for every check, so a role granted or revoked is honoured by the very
next operation.

Denials follow row-level-security conventions:
- collections are filtered, invisible rows are simply absent;
- a single row the caller cannot select is reported as not found;
- a refused insert/update/delete raises AuthorizationDenied.
"""

from typing import Any, Iterable, List, Optional
from sqlalchemy.orm import Session

from registry.authz import resolvers
from registry.authz.policies import Operation, Principal, Table, evaluate, is_row_independent
from registry.errors import AuthorizationDenied, NotFoundError
from registry.models.user_role import AppRole
from registry.logging_config import get_logger, log_with_context

logger = get_logger("authz")


class PolicyEnforcer:
    """Evaluates the policy table for one identity on one session."""

    def __init__(self, db: Session, identity_id: Optional[str]):
        self.db = db
        self.identity_id = identity_id

    def principal(self) -> Principal:
        return Principal(
            identity_id=self.identity_id,
            roles=resolvers.role_set(self.db, self.identity_id),
        )

    def is_admin(self) -> bool:
        return resolvers.has_role(self.db, self.identity_id, AppRole.ADMIN)

    def own_student_id(self) -> Optional[str]:
        return resolvers.student_id_for(self.db, self.identity_id)

    def allows(self, table: Table, operation: Operation, row: Any = None) -> bool:
        return evaluate(self.principal(), table, operation, row)

    def require(self, table: Table, operation: Operation, row: Any = None) -> None:
        """Raise AuthorizationDenied unless the operation is allowed on row."""
        if self.allows(table, operation, row):
            return
        log_with_context(logger, "WARNING",
                         "Denied {} on {}".format(operation.value, table.value),
                         context={"identity_id": self.identity_id,
                                  "row_id": getattr(row, "id", None)})
        raise AuthorizationDenied(table.value, operation.value)

    def precheck(self, table: Table, operation: Operation) -> None:
        """
        Decide row-independent mutations before the target is looked up,
        so that callers without the right cannot probe for existence.
        """
        if is_row_independent(table, operation):
            self.require(table, operation)

    def filter_rows(self, table: Table, rows: Iterable[Any]) -> List[Any]:
        """Keep the rows the principal may select."""
        principal = self.principal()
        return [row for row in rows if evaluate(principal, table, Operation.SELECT, row)]

    def visible(self, table: Table, row: Any, detail: str) -> Any:
        """
        Return row if the principal may select it.

        Raises:
            NotFoundError: row is None or hidden from the principal
        """
        if row is None or not self.allows(table, Operation.SELECT, row):
            raise NotFoundError(detail)
        return row
