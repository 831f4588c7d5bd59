"""
Invite service: issuing, revoking, validating and accepting workspace invites.

Email invites are single-use and bound to one address; link invites can be
used until revoked or expired. Seat limits of the workspace's plan are checked
when an invite is issued.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.email import EmailClient
from app.core.plans import get_plan, within_limit
from app.core.workspace import Identity, WorkspaceContext, count_workspace_roles, get_membership
from app.models.base import as_utc
from app.models.subscription import Subscription
from app.models.user import User
from app.models.workspace import Workspace
from app.models.workspace_invite import WorkspaceInvite
from app.models.workspace_member import WorkspaceMember
from app.services.common import get_scoped_or_404
from nct_shared.schemas.common import Role
from nct_shared.schemas.invites import (
    InviteAcceptResult,
    InviteCreate,
    InviteCreated,
    InviteRead,
    InviteType,
    InviteValidation,
)

log = structlog.get_logger()


def invite_url(code: str) -> str:
    return f"{get_settings().app_url.rstrip('/')}/invite/{code}"


def invite_problem(invite: WorkspaceInvite, now: datetime) -> Optional[str]:
    """Why an invite can no longer be used, or None if it can."""
    if invite.revoked_at is not None:
        return "Invite has been revoked"
    if invite.expires_at is not None and as_utc(invite.expires_at) < now:
        return "Invite has expired"
    if invite.max_uses is not None and invite.use_count >= invite.max_uses:
        return "Invite has reached max uses"
    return None


async def _find_by_code(session: AsyncSession, code: str) -> Optional[WorkspaceInvite]:
    result = await session.execute(select(WorkspaceInvite).where(WorkspaceInvite.code == code))
    return result.scalars().first()


async def list_invites(session: AsyncSession, workspace_id: uuid.UUID) -> list[WorkspaceInvite]:
    result = await session.execute(
        select(WorkspaceInvite)
        .where(
            WorkspaceInvite.workspace_id == workspace_id,
            WorkspaceInvite.revoked_at.is_(None),
        )
        .order_by(WorkspaceInvite.created_at)
    )
    return list(result.scalars().all())


async def check_seat_limits(session: AsyncSession, workspace_id: uuid.UUID, role: Role) -> None:
    """Reject an invite that would exceed the plan's editor or viewer seats."""
    result = await session.execute(select(Subscription.plan).where(Subscription.workspace_id == workspace_id))
    plan = get_plan(result.scalars().first())
    counts = await count_workspace_roles(session, workspace_id)

    if role is not Role.VIEWER and not within_limit(counts["editors"], plan.limits.editors):
        raise HTTPException(
            status_code=403,
            detail="Editor limit reached. Upgrade your plan to invite more editors.",
        )
    if role is Role.VIEWER and not within_limit(counts["viewers"], plan.limits.viewers):
        raise HTTPException(
            status_code=403,
            detail="Viewer limit reached. Upgrade your plan to invite more viewers.",
        )


async def create_invite(
    session: AsyncSession,
    ctx: WorkspaceContext,
    req: InviteCreate,
    email_client: EmailClient,
    *,
    now: Optional[datetime] = None,
) -> InviteCreated:
    now = now or datetime.now(timezone.utc)

    if req.type is InviteType.EMAIL and not req.email:
        raise HTTPException(status_code=400, detail="Email required for email invites")
    if req.role is Role.OWNER:
        raise HTTPException(status_code=400, detail="Invalid role")
    if req.role is Role.ADMIN and ctx.role is not Role.OWNER:
        raise HTTPException(status_code=403, detail="Only the owner can invite admins")

    await check_seat_limits(session, ctx.workspace_id, req.role)

    is_email = req.type is InviteType.EMAIL
    invite = WorkspaceInvite(
        workspace_id=ctx.workspace_id,
        invited_by=ctx.user_id,
        type=req.type.value,
        email=req.email.lower() if is_email else None,
        role=req.role.value,
        code=secrets.token_hex(16),
        expires_at=now + timedelta(days=req.expires_in_days) if req.expires_in_days else None,
        max_uses=1 if is_email else None,
        use_count=0,
    )
    session.add(invite)
    await session.flush()

    url = invite_url(invite.code)
    log.info(
        "invite.created",
        invite_id=str(invite.id),
        workspace_id=str(ctx.workspace_id),
        type=invite.type,
        role=invite.role,
    )

    if is_email:
        await email_client.send_workspace_invite(
            invite.email,
            inviter_name=ctx.identity.user.name,
            workspace_name=ctx.workspace.name,
            role=invite.role,
            invite_url=url,
        )

    return InviteCreated(**InviteRead.model_validate(invite).model_dump(), invite_url=url)


async def revoke_invite(session: AsyncSession, ctx: WorkspaceContext, invite_id: uuid.UUID) -> WorkspaceInvite:
    invite = await get_scoped_or_404(session, WorkspaceInvite, invite_id, ctx.workspace_id, "Invite")
    invite.revoked_at = datetime.now(timezone.utc)
    session.add(invite)
    await session.flush()

    log.info("invite.revoked", invite_id=str(invite.id), workspace_id=str(ctx.workspace_id))
    return invite


async def validate_invite(
    session: AsyncSession, code: str, *, now: Optional[datetime] = None
) -> InviteValidation:
    """Public preview of an invite code."""
    now = now or datetime.now(timezone.utc)
    invite = await _find_by_code(session, code)
    if invite is None:
        return InviteValidation(valid=False, error="Invite not found")
    problem = invite_problem(invite, now)
    if problem:
        return InviteValidation(valid=False, error=problem)

    workspace = await session.get(Workspace, invite.workspace_id)
    inviter = await session.get(User, invite.invited_by)
    return InviteValidation(
        valid=True,
        workspace_name=workspace.name if workspace else "Unknown workspace",
        inviter_name=inviter.name if inviter else "Someone",
        role=Role(invite.role),
        type=InviteType(invite.type),
    )


async def accept_invite(
    session: AsyncSession,
    identity: Identity,
    code: str,
    *,
    now: Optional[datetime] = None,
) -> InviteAcceptResult:
    now = now or datetime.now(timezone.utc)
    if not code:
        raise HTTPException(status_code=400, detail="Missing code")

    invite = await _find_by_code(session, code)
    if invite is None:
        raise HTTPException(status_code=404, detail="Invite not found")
    problem = invite_problem(invite, now)
    if problem:
        raise HTTPException(status_code=400, detail=problem)

    if (
        invite.type == InviteType.EMAIL.value
        and invite.email
        and identity.user.email.lower() != invite.email.lower()
    ):
        raise HTTPException(status_code=403, detail="This invite was sent to a different email address")

    user_id = identity.user.id
    if await get_membership(session, user_id, invite.workspace_id) is not None:
        return InviteAcceptResult(workspace_id=invite.workspace_id, already_member=True)

    # Ownership is never granted through an invite
    role = Role.EDITOR.value if invite.role == Role.OWNER.value else invite.role
    session.add(WorkspaceMember(workspace_id=invite.workspace_id, user_id=user_id, role=role))

    invite.accepted_at = now
    invite.accepted_by = user_id
    invite.use_count += 1
    session.add(invite)
    await session.flush()

    log.info(
        "invite.accepted",
        invite_id=str(invite.id),
        workspace_id=str(invite.workspace_id),
        user_id=str(user_id),
        role=role,
    )
    return InviteAcceptResult(workspace_id=invite.workspace_id, already_member=False)
