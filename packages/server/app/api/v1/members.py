"""Workspace member endpoints: listing, role changes and removal."""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_admin, require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import members as svc
from nct_shared.schemas.common import MessageResponse
from nct_shared.schemas.members import MemberRead, MemberRoleUpdate

router = APIRouter()


@router.get("/", response_model=List[MemberRead])
async def list_members(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.list_members(session, ctx.workspace_id)


@router.put("/{member_id}", response_model=MemberRead)
async def change_role(
    member_id: uuid.UUID,
    body: MemberRoleUpdate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    target = await svc.get_member_or_404(session, member_id, ctx.workspace_id)
    member = await svc.change_member_role(session, ctx, target, body.role)
    await session.commit()
    return member


@router.delete("/{member_id}", response_model=MessageResponse)
async def remove_member(
    member_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    target = await svc.get_member_or_404(session, member_id, ctx.workspace_id)
    await svc.remove_member(session, ctx, target)
    await session.commit()
    return MessageResponse(message="Member removed")
