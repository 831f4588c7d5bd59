"""Strategic pillar endpoints (current planning year)."""

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
from nct_shared.schemas.strategy import (
    KpiCreate,
    KpiRead,
    PillarCreate,
    PillarDetail,
    PillarUpdate,
)

router = APIRouter()


@router.get("/", response_model=List[PillarDetail])
async def list_pillars(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Pillars of the current year with their KPIs and linked-narrative counts."""
    return await svc.list_current_pillars(session, ctx.workspace_id)


@router.post("/", response_model=PillarDetail, status_code=201)
async def create_pillar(
    body: PillarCreate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    pillar = await svc.create_pillar(session, ctx, body)
    await session.commit()
    return (await svc.enrich_pillars(session, [pillar]))[0]


@router.get("/{pillar_id}", response_model=PillarDetail)
async def get_pillar(
    pillar_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    pillar = await svc.get_pillar_or_404(session, pillar_id, ctx.workspace_id)
    return (await svc.enrich_pillars(session, [pillar]))[0]


@router.put("/{pillar_id}", response_model=PillarDetail)
async def update_pillar(
    pillar_id: uuid.UUID,
    body: PillarUpdate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    pillar = await svc.get_pillar_or_404(session, pillar_id, ctx.workspace_id)
    pillar = await svc.update_pillar(session, pillar, body)
    await session.commit()
    return (await svc.enrich_pillars(session, [pillar]))[0]


@router.delete("/{pillar_id}", response_model=MessageResponse)
async def delete_pillar(
    pillar_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    pillar = await svc.get_pillar_or_404(session, pillar_id, ctx.workspace_id)
    await svc.delete_pillar(session, pillar)
    await session.commit()
    return MessageResponse(message="Pillar deleted")


# ---------------------------------------------------------------------------
# Pillar KPIs
# ---------------------------------------------------------------------------


@router.get("/{pillar_id}/kpis", response_model=List[KpiRead])
async def list_pillar_kpis(
    pillar_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    pillar = await svc.get_pillar_or_404(session, pillar_id, ctx.workspace_id)
    return (await svc.list_kpis(session, [pillar.id]))[pillar.id]


@router.post("/{pillar_id}/kpis", response_model=KpiRead, status_code=201)
async def create_pillar_kpi(
    pillar_id: uuid.UUID,
    body: KpiCreate,
    ctx: WorkspaceContext = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
):
    pillar = await svc.get_pillar_or_404(session, pillar_id, ctx.workspace_id)
    kpi = await svc.create_kpi(session, pillar, body)
    await session.commit()
    return kpi
