"""
Module: stock_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors, plus the
    one place where a Scope is turned into a SQL predicate.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.
    Selectors NEVER create, modify, or delete data.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: selectors return frozen snapshots from
      stock_kernel.domain.movements, NOT ORM instances.  The single exception is
      BatchSelector.lock_eligible(), which hands ORM rows to StockWriter inside
      the same unit of work.
    - Scope branching happens only in scope_clause(); no other module tests
      project_id for NULL.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy import ColumnElement
from sqlalchemy.orm import InstrumentedAttribute, Session

from stock_kernel.db.base import Base
from stock_kernel.domain.scope import GeneralScope, ProjectScope, Scope

ModelType = TypeVar("ModelType", bound=Base)


def scope_clause(column: InstrumentedAttribute, scope: Scope) -> ColumnElement[bool]:
    """
    SQL predicate selecting rows that belong to ``scope``.

    ProjectScope matches the project id; GeneralScope matches NULL.
    """
    match scope:
        case ProjectScope(project_id=project_id):
            return column == project_id
        case GeneralScope():
            return column.is_(None)
        case _:
            raise TypeError(f"Not a scope: {scope!r}")


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return snapshots or computed results.

    Guarantees:
        - session is stored as a public attribute for subclass query use.
        - No commit, flush, add, or delete operations are performed.
    """

    def __init__(self, session: Session):
        self.session = session
