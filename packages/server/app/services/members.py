"""
Membership service: listing members, changing roles and removing members.

Rules:
- Nobody changes their own role or removes themselves.
- The owner's membership is immutable here.
- Only the owner promotes to admin, changes an admin or removes an admin.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.workspace import WorkspaceContext
from app.models.user import User
from app.models.workspace_member import WorkspaceMember
from app.services.common import get_scoped_or_404
from nct_shared.schemas.common import Role, UserSummary
from nct_shared.schemas.members import MemberRead

log = structlog.get_logger()

ASSIGNABLE_ROLES = (Role.ADMIN, Role.EDITOR, Role.VIEWER)


def _member_read(member: WorkspaceMember, user: User) -> MemberRead:
    return MemberRead(
        id=member.id,
        user_id=member.user_id,
        role=Role(member.role),
        created_at=member.created_at,
        user=UserSummary(id=user.id, name=user.name, email=user.email, image=user.image),
    )


async def list_members(session: AsyncSession, workspace_id: uuid.UUID) -> list[MemberRead]:
    result = await session.execute(
        select(WorkspaceMember, User)
        .join(User, User.id == WorkspaceMember.user_id)
        .where(WorkspaceMember.workspace_id == workspace_id)
        .order_by(WorkspaceMember.created_at)
    )
    return [_member_read(m, u) for m, u in result.all()]


async def get_member_or_404(
    session: AsyncSession, member_id: uuid.UUID, workspace_id: uuid.UUID
) -> WorkspaceMember:
    return await get_scoped_or_404(session, WorkspaceMember, member_id, workspace_id, "Member")


async def change_member_role(
    session: AsyncSession,
    ctx: WorkspaceContext,
    target: WorkspaceMember,
    new_role: Role,
) -> MemberRead:
    if target.user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="Cannot change your own role")
    if new_role not in ASSIGNABLE_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")
    if new_role is Role.ADMIN and ctx.role is not Role.OWNER:
        raise HTTPException(status_code=403, detail="Only the owner can promote to admin")
    if target.role == Role.ADMIN.value and ctx.role is not Role.OWNER:
        raise HTTPException(status_code=403, detail="Only the owner can change admin roles")
    if target.role == Role.OWNER.value:
        raise HTTPException(status_code=400, detail="Cannot change the owner's role")

    old_role = target.role
    target.role = new_role.value
    session.add(target)
    await session.flush()

    log.info(
        "member.role_changed",
        member_id=str(target.id),
        workspace_id=str(ctx.workspace_id),
        from_role=old_role,
        to_role=new_role.value,
        by=str(ctx.user_id),
    )
    user = await session.get(User, target.user_id)
    return _member_read(target, user)


async def remove_member(session: AsyncSession, ctx: WorkspaceContext, target: WorkspaceMember) -> None:
    if target.user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="Cannot remove yourself")
    if target.role == Role.OWNER.value:
        raise HTTPException(status_code=400, detail="Cannot remove the workspace owner")
    if target.role == Role.ADMIN.value and ctx.role is not Role.OWNER:
        raise HTTPException(status_code=403, detail="Only the owner can remove admins")

    await session.delete(target)
    await session.flush()

    log.info("member.removed", member_id=str(target.id), workspace_id=str(ctx.workspace_id), by=str(ctx.user_id))
