"""
Display names for reports.

Project and material names belong to the surrounding application.  Reports
ask a ``NameResolver`` for them; ``ScopeDirectory`` adds the general store's
reserved id and label on top so that every report renders scopes the same way.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from stock_kernel.domain.scope import GeneralScope, ProjectScope, Scope


@runtime_checkable
class NameResolver(Protocol):
    """Looks up display names owned by the surrounding application."""

    def project_name(self, project_id: int) -> str | None: ...

    def material_name(self, material_id: int) -> str | None: ...


class NullNameResolver:
    """Resolver that knows no names; reports fall back to ids."""

    def project_name(self, project_id: int) -> str | None:
        return None

    def material_name(self, material_id: int) -> str | None:
        return None


@dataclass(frozen=True)
class MappingNameResolver:
    """Resolver backed by two plain dicts."""

    projects: Mapping[int, str] = field(default_factory=dict)
    materials: Mapping[int, str] = field(default_factory=dict)

    def project_name(self, project_id: int) -> str | None:
        return self.projects.get(project_id)

    def material_name(self, material_id: int) -> str | None:
        return self.materials.get(material_id)


@dataclass(frozen=True)
class ScopeDirectory:
    """
    Renders scopes and materials for reporting.

    Guarantees:
        - The general store always reports as ``general_store_project_id``
          with ``general_store_label``, whatever the resolver says.
        - ``sort_label`` never returns None, so breakdowns sort totally.
    """

    names: NameResolver = field(default_factory=NullNameResolver)
    general_store_project_id: int = 0
    general_store_label: str = "General Store"

    def project_id(self, scope: Scope) -> int:
        match scope:
            case ProjectScope(project_id=project_id):
                return project_id
            case GeneralScope():
                return self.general_store_project_id
            case _:
                raise TypeError(f"Not a scope: {scope!r}")

    def project_name(self, scope: Scope) -> str | None:
        match scope:
            case ProjectScope(project_id=project_id):
                return self.names.project_name(project_id)
            case GeneralScope():
                return self.general_store_label
            case _:
                raise TypeError(f"Not a scope: {scope!r}")

    def material_name(self, material_id: int) -> str | None:
        return self.names.material_name(material_id)

    def scope_sort_label(self, scope: Scope) -> str:
        return self.project_name(scope) or f"Project {self.project_id(scope)}"

    def material_sort_label(self, material_id: int) -> str:
        return self.material_name(material_id) or f"Material {material_id}"
