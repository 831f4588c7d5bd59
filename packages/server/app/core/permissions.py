"""
Role hierarchy and entity-ownership authorization.

Roles are totally ordered: owner > admin > editor > viewer. A role only has
meaning inside one workspace membership. Every function here is pure; callers
turn a False into an HTTP rejection.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from nct_shared.schemas.common import Role

log = structlog.get_logger()

ROLE_RANK: dict[Role, int] = {
    Role.OWNER: 4,
    Role.ADMIN: 3,
    Role.EDITOR: 2,
    Role.VIEWER: 1,
}


def _parse_role(role: Role | str) -> Optional[Role]:
    try:
        return Role(role)
    except ValueError:
        return None


def has_minimum_role(actual: Role | str, required: Role | str) -> bool:
    """True iff `actual` ranks at or above `required`.

    Raises ValueError for values outside the role set; roles are validated
    where they enter the system (schemas and stored memberships).
    """
    return ROLE_RANK[Role(actual)] >= ROLE_RANK[Role(required)]


def is_admin_or_owner(role: Role | str) -> bool:
    return role in (Role.OWNER, Role.ADMIN)


def is_viewer(role: Role | str) -> bool:
    return role == Role.VIEWER


def can_edit(role: Role | str) -> bool:
    """Editors and above may create content."""
    return has_minimum_role(role, Role.EDITOR)


def can_modify(role: Role | str, user_id: Any, entity_owner_id: Any) -> bool:
    """Decide whether `user_id` may update or delete an entity owned by `entity_owner_id`.

    Owners and admins may modify anything in the workspace, editors only what
    they own, viewers nothing. Unknown roles are denied.
    """
    parsed = _parse_role(role)
    if parsed is None:
        log.warning("permissions.unknown_role", role=str(role))
        return False

    if parsed is Role.VIEWER:
        return False
    if parsed is Role.OWNER or parsed is Role.ADMIN:
        return True
    if parsed is Role.EDITOR:
        return user_id == entity_owner_id

    raise AssertionError(f"Unhandled role: {parsed!r}")
