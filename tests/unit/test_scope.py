"""Scope variants and partition keys."""

import pytest

from stock_kernel.domain.scope import (
    GENERAL_STORE,
    GeneralScope,
    Partition,
    ProjectScope,
    ScopeKind,
    project_id_of,
    scope_for_project,
)


class TestProjectScope:
    def test_key_and_kind(self):
        scope = ProjectScope(7)
        assert scope.kind is ScopeKind.PROJECT
        assert scope.key == "project:7"
        assert str(scope) == "project:7"

    def test_value_equality(self):
        assert ProjectScope(3) == ProjectScope(3)
        assert ProjectScope(3) != ProjectScope(4)
        assert len({ProjectScope(3), ProjectScope(3)}) == 1

    @pytest.mark.parametrize("bad", [0, -1])
    def test_non_positive_id_rejected(self, bad):
        with pytest.raises(ValueError):
            ProjectScope(bad)

    @pytest.mark.parametrize("bad", ["1", 1.0, None, True])
    def test_non_int_id_rejected(self, bad):
        with pytest.raises(TypeError):
            ProjectScope(bad)


class TestGeneralScope:
    def test_singleton_semantics(self):
        assert GeneralScope() == GENERAL_STORE
        assert GENERAL_STORE.kind is ScopeKind.GENERAL
        assert GENERAL_STORE.key == "general"

    def test_never_equal_to_a_project(self):
        assert GENERAL_STORE != ProjectScope(1)


class TestStorageMapping:
    def test_none_is_general_store(self):
        assert scope_for_project(None) is GENERAL_STORE

    def test_int_is_project(self):
        assert scope_for_project(5) == ProjectScope(5)

    def test_project_id_of(self):
        assert project_id_of(ProjectScope(5)) == 5
        assert project_id_of(GENERAL_STORE) is None

    def test_project_id_of_rejects_non_scopes(self):
        with pytest.raises(TypeError):
            project_id_of(5)
        with pytest.raises(TypeError):
            project_id_of(None)


class TestPartition:
    def test_key_combines_scope_and_material(self):
        assert Partition(ProjectScope(1), 10).key == "project:1/material:10"
        assert Partition(GENERAL_STORE, 10).key == "general/material:10"

    def test_same_material_different_scopes_are_distinct(self):
        assert Partition(ProjectScope(1), 10) != Partition(GENERAL_STORE, 10)
        assert Partition(ProjectScope(1), 10) != Partition(ProjectScope(2), 10)
