"""
Scope -- the stock partition key.

Responsibility:
    Models where stock lives: either a specific project or the general
    (unscoped) store.  Every batch, issue, statistic and FIFO ordering is
    partitioned by (scope, material).

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  The SQL predicate for a
    scope lives in selectors/base.py (``scope_clause``); this module never
    imports SQLAlchemy.

Invariants enforced:
    - Scope is a tagged variant: ``ProjectScope(project_id)`` or
      ``GeneralScope()``.  Code branches on the variant, never on a nullable id.
    - Project ids are positive integers.  Zero is reserved for the general
      store's synthetic reporting entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ScopeKind(str, Enum):
    """Discriminator for the two scope variants."""

    PROJECT = "project"
    GENERAL = "general"


@dataclass(frozen=True, slots=True)
class ProjectScope:
    """Stock tied to one project."""

    project_id: int

    def __post_init__(self) -> None:
        if isinstance(self.project_id, bool) or not isinstance(self.project_id, int):
            raise TypeError(f"project_id must be an int, got {self.project_id!r}")
        if self.project_id <= 0:
            raise ValueError(f"project_id must be positive, got {self.project_id}")

    @property
    def kind(self) -> ScopeKind:
        return ScopeKind.PROJECT

    @property
    def key(self) -> str:
        return f"project:{self.project_id}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True, slots=True)
class GeneralScope:
    """Stock not tied to any project (the general store)."""

    @property
    def kind(self) -> ScopeKind:
        return ScopeKind.GENERAL

    @property
    def key(self) -> str:
        return "general"

    def __str__(self) -> str:
        return self.key


Scope = Union[ProjectScope, GeneralScope]

GENERAL_STORE = GeneralScope()


def scope_for_project(project_id: int | None) -> Scope:
    """Build a scope from a stored project reference (None = general store)."""
    if project_id is None:
        return GENERAL_STORE
    return ProjectScope(project_id)


def project_id_of(scope: Scope) -> int | None:
    """Storage form of a scope: the project id, or None for the general store."""
    if isinstance(scope, ProjectScope):
        return scope.project_id
    if isinstance(scope, GeneralScope):
        return None
    raise TypeError(f"Not a scope: {scope!r}")


@dataclass(frozen=True, slots=True)
class Partition:
    """(scope, material) -- the unit of FIFO ordering and of issue serialization."""

    scope: Scope
    material_id: int

    @property
    def key(self) -> str:
        return f"{self.scope.key}/material:{self.material_id}"

    def __str__(self) -> str:
        return self.key
