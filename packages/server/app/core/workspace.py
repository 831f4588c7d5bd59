"""
Workspace resolution.

The client keeps the id of its active workspace in a cookie. That value is
only a hint: it is re-validated against the caller's memberships on every
request, and when it does not check out the caller's first membership is
used instead.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.workspace import Workspace
from app.models.workspace_member import WorkspaceMember
from nct_shared.schemas.common import Role

log = structlog.get_logger()


@dataclass(frozen=True)
class SessionUser:
    id: uuid.UUID
    email: str
    name: str


@dataclass(frozen=True)
class Identity:
    """An authenticated session, as decoded from the session token."""

    user: SessionUser
    jti: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class WorkspaceContext:
    """The (session, workspace, role) triple every workspace-scoped route runs in."""

    identity: Identity
    workspace: Workspace
    membership: WorkspaceMember
    role: Role

    @property
    def user_id(self) -> uuid.UUID:
        return self.identity.user.id

    @property
    def workspace_id(self) -> uuid.UUID:
        return self.workspace.id


def parse_workspace_id(value: Optional[str]) -> Optional[uuid.UUID]:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


async def get_membership(
    session: AsyncSession, user_id: uuid.UUID, workspace_id: uuid.UUID
) -> Optional[WorkspaceMember]:
    result = await session.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.user_id == user_id,
            WorkspaceMember.workspace_id == workspace_id,
        )
    )
    return result.scalars().first()


async def resolve_workspace(
    session: AsyncSession,
    identity: Identity,
    preferred_workspace_id: Optional[str],
) -> Optional[WorkspaceContext]:
    """Resolve the active workspace for `identity`.

    1. A preferred id naming a workspace the user belongs to wins.
    2. Otherwise the user's earliest membership is used.
    3. No memberships at all yields None.
    """
    user_id = identity.user.id

    preferred = parse_workspace_id(preferred_workspace_id)
    if preferred is not None:
        membership = await get_membership(session, user_id, preferred)
        if membership is not None:
            workspace = await session.get(Workspace, preferred)
            if workspace is not None:
                return WorkspaceContext(identity, workspace, membership, Role(membership.role))
            log.warning("workspace.dangling_membership", workspace_id=str(preferred), user_id=str(user_id))

    result = await session.execute(
        select(Workspace, WorkspaceMember)
        .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
        .where(WorkspaceMember.user_id == user_id)
        .order_by(WorkspaceMember.created_at, WorkspaceMember.id)
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    workspace, membership = row
    return WorkspaceContext(identity, workspace, membership, Role(membership.role))


async def list_user_workspaces(
    session: AsyncSession, user_id: uuid.UUID
) -> list[tuple[Workspace, WorkspaceMember]]:
    """All workspaces the user belongs to, oldest membership first."""
    result = await session.execute(
        select(Workspace, WorkspaceMember)
        .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
        .where(WorkspaceMember.user_id == user_id)
        .order_by(WorkspaceMember.created_at, WorkspaceMember.id)
    )
    return [(ws, m) for ws, m in result.all()]


async def count_workspace_roles(session: AsyncSession, workspace_id: uuid.UUID) -> dict[str, int]:
    """Seat usage: owners, admins and editors all occupy editor seats."""
    result = await session.execute(
        select(WorkspaceMember.role, func.count())
        .where(WorkspaceMember.workspace_id == workspace_id)
        .group_by(WorkspaceMember.role)
    )
    counts = {role: n for role, n in result.all()}
    editors = sum(counts.get(r.value, 0) for r in (Role.OWNER, Role.ADMIN, Role.EDITOR))
    viewers = counts.get(Role.VIEWER.value, 0)
    return {"editors": editors, "viewers": viewers, "total": editors + viewers}
