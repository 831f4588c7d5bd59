"""KPI endpoints. KPIs are created under a pillar (see pillars.py)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_admin
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import strategy as svc
from nct_shared.schemas.common import MessageResponse
from nct_shared.schemas.strategy import KpiRead, KpiUpdate

router = APIRouter()


@router.put("/{kpi_id}", response_model=KpiRead)
async def update_kpi(
    kpi_id: uuid.UUID,
    body: KpiUpdate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    kpi = await svc.get_kpi_or_404(session, kpi_id, ctx.workspace_id)
    kpi = await svc.update_kpi(session, kpi, body)
    await session.commit()
    return kpi


@router.delete("/{kpi_id}", response_model=MessageResponse)
async def delete_kpi(
    kpi_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    kpi = await svc.get_kpi_or_404(session, kpi_id, ctx.workspace_id)
    await svc.delete_kpi(session, kpi)
    await session.commit()
    return MessageResponse(message="KPI deleted")
