"""
Tests for the role hierarchy and the entity-ownership authorizer.

Covers:
- Rank table and has_minimum_role (reflexivity, ordering, invalid input)
- is_admin_or_owner / is_viewer / can_edit
- can_modify across all four roles, ownership and unknown roles
"""

from __future__ import annotations

import uuid

import pytest

from app.core.permissions import (
    ROLE_RANK,
    can_edit,
    can_modify,
    has_minimum_role,
    is_admin_or_owner,
    is_viewer,
)
from nct_shared.schemas.common import Role

ALL_ROLES = list(Role)


# ---------------------------------------------------------------------------
# Role hierarchy
# ---------------------------------------------------------------------------

class TestRoleHierarchy:
    def test_rank_values(self):
        assert ROLE_RANK == {Role.OWNER: 4, Role.ADMIN: 3, Role.EDITOR: 2, Role.VIEWER: 1}

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_reflexive(self, role):
        assert has_minimum_role(role, role)

    def test_total_order(self):
        assert has_minimum_role(Role.OWNER, Role.ADMIN)
        assert has_minimum_role(Role.ADMIN, Role.EDITOR)
        assert has_minimum_role(Role.EDITOR, Role.VIEWER)
        assert not has_minimum_role(Role.VIEWER, Role.EDITOR)
        assert not has_minimum_role(Role.ADMIN, Role.OWNER)

    def test_accepts_plain_strings(self):
        assert has_minimum_role("admin", "editor")
        assert not has_minimum_role("viewer", "admin")

    def test_invalid_role_is_rejected(self):
        with pytest.raises(ValueError):
            has_minimum_role("superuser", Role.VIEWER)

    def test_is_admin_or_owner(self):
        assert is_admin_or_owner(Role.OWNER)
        assert is_admin_or_owner("admin")
        assert not is_admin_or_owner(Role.EDITOR)
        assert not is_admin_or_owner(Role.VIEWER)

    def test_is_viewer(self):
        assert is_viewer("viewer")
        assert not is_viewer(Role.EDITOR)

    def test_can_edit(self):
        assert can_edit(Role.VIEWER) is False
        assert can_edit(Role.EDITOR) is True
        assert can_edit(Role.ADMIN) is True
        assert can_edit(Role.OWNER) is True


# ---------------------------------------------------------------------------
# Ownership authorizer
# ---------------------------------------------------------------------------

class TestCanModify:
    def test_viewer_denied_even_as_owner_of_entity(self):
        u = uuid.uuid4()
        assert can_modify(Role.VIEWER, u, u) is False

    def test_editor_only_own_entities(self):
        u1, u2 = uuid.uuid4(), uuid.uuid4()
        assert can_modify(Role.EDITOR, u1, u1) is True
        assert can_modify(Role.EDITOR, u1, u2) is False

    @pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN, "owner", "admin"])
    def test_elevated_roles_modify_anything(self, role):
        assert can_modify(role, uuid.uuid4(), uuid.uuid4()) is True

    @pytest.mark.parametrize("role", ["superuser", "", "OWNER"])
    def test_unknown_role_denied(self, role):
        u = uuid.uuid4()
        assert can_modify(role, u, u) is False
