"""Workspace strategy: vision, strategy document and active pillars."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_admin, require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import strategy as svc
from nct_shared.schemas.strategy import StrategyRead, StrategyUpdate

router = APIRouter()


@router.get("/", response_model=StrategyRead)
async def get_strategy(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.get_strategy(session, ctx.workspace)


@router.put("/", response_model=StrategyRead)
async def update_strategy(
    body: StrategyUpdate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    workspace = await svc.update_strategy(session, ctx.workspace, body)
    await session.commit()
    return await svc.get_strategy(session, workspace)
