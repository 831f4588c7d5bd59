"""Planning cycle endpoints."""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_admin, require_editor, require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import strategy as svc
from nct_shared.schemas.common import MessageResponse
from nct_shared.schemas.strategy import CycleCreate, CycleRead, CycleUpdate

router = APIRouter()


@router.get("/", response_model=List[CycleRead])
async def list_cycles(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """All cycles, newest first."""
    return await svc.list_cycles(session, ctx.workspace_id)


@router.post("/", response_model=CycleRead, status_code=201)
async def create_cycle(
    body: CycleCreate,
    ctx: WorkspaceContext = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
):
    cycle = await svc.create_cycle(session, ctx, body)
    await session.commit()
    return cycle


@router.get("/{cycle_id}", response_model=CycleRead)
async def get_cycle(
    cycle_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.get_cycle_or_404(session, cycle_id, ctx.workspace_id)


@router.put("/{cycle_id}", response_model=CycleRead)
async def update_cycle(
    cycle_id: uuid.UUID,
    body: CycleUpdate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    cycle = await svc.get_cycle_or_404(session, cycle_id, ctx.workspace_id)
    cycle = await svc.update_cycle(session, cycle, body)
    await session.commit()
    return cycle


@router.delete("/{cycle_id}", response_model=MessageResponse)
async def delete_cycle(
    cycle_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    cycle = await svc.get_cycle_or_404(session, cycle_id, ctx.workspace_id)
    await svc.delete_cycle(session, cycle)
    await session.commit()
    return MessageResponse(message="Cycle deleted")
