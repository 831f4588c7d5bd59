"""
Strategy service: planning years, cycles, strategic pillars and their KPIs.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.workspace import WorkspaceContext
from app.models.cycle import Cycle
from app.models.kpi import KPI
from app.models.narrative import Narrative
from app.models.pillar import StrategicPillar
from app.models.workspace import Workspace
from app.models.year import Year
from app.services.common import apply_updates, get_scoped_or_404
from nct_shared.schemas.common import CycleStatus, PillarStatus
from nct_shared.schemas.strategy import (
    CycleCreate,
    CycleUpdate,
    KpiCreate,
    KpiRead,
    KpiUpdate,
    PillarCreate,
    PillarDetail,
    PillarRead,
    PillarUpdate,
    StrategyRead,
    StrategyUpdate,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Years
# ---------------------------------------------------------------------------

async def get_year_record(
    session: AsyncSession, workspace_id: uuid.UUID, year: Optional[int] = None
) -> Optional[Year]:
    """The workspace's row for `year` (default: the current calendar year)."""
    year = year or datetime.now(timezone.utc).year
    result = await session.execute(
        select(Year).where(Year.workspace_id == workspace_id, Year.year == year).limit(1)
    )
    return result.scalars().first()


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------

async def list_cycles(session: AsyncSession, workspace_id: uuid.UUID) -> list[Cycle]:
    result = await session.execute(
        select(Cycle).where(Cycle.workspace_id == workspace_id).order_by(Cycle.start_date.desc())
    )
    return list(result.scalars().all())


async def get_cycle_or_404(session: AsyncSession, cycle_id: uuid.UUID, workspace_id: uuid.UUID) -> Cycle:
    return await get_scoped_or_404(session, Cycle, cycle_id, workspace_id, "Cycle")


async def create_cycle(session: AsyncSession, ctx: WorkspaceContext, req: CycleCreate) -> Cycle:
    await get_scoped_or_404(session, Year, req.year_id, ctx.workspace_id, "Year")
    cycle = Cycle(
        workspace_id=ctx.workspace_id,
        year_id=req.year_id,
        name=req.name,
        start_date=req.start_date,
        end_date=req.end_date,
        status=CycleStatus.PLANNING.value,
    )
    session.add(cycle)
    await session.flush()

    log.info("cycle.created", cycle_id=str(cycle.id), workspace_id=str(ctx.workspace_id))
    return cycle


async def update_cycle(session: AsyncSession, cycle: Cycle, req: CycleUpdate) -> Cycle:
    data = req.model_dump(exclude_unset=True)
    apply_updates(cycle, data, required=("name", "start_date", "end_date", "status"))
    session.add(cycle)
    await session.flush()

    log.info("cycle.updated", cycle_id=str(cycle.id), fields=sorted(data))
    return cycle


async def delete_cycle(session: AsyncSession, cycle: Cycle) -> None:
    """Delete a cycle; its narratives stay, detached from any cycle."""
    await session.execute(update(Narrative).where(Narrative.cycle_id == cycle.id).values(cycle_id=None))
    await session.delete(cycle)
    await session.flush()

    log.info("cycle.deleted", cycle_id=str(cycle.id), workspace_id=str(cycle.workspace_id))


# ---------------------------------------------------------------------------
# Pillars
# ---------------------------------------------------------------------------

async def get_pillar_or_404(
    session: AsyncSession, pillar_id: uuid.UUID, workspace_id: uuid.UUID
) -> StrategicPillar:
    return await get_scoped_or_404(session, StrategicPillar, pillar_id, workspace_id, "Pillar")


async def list_kpis(session: AsyncSession, pillar_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, list[KPI]]:
    grouped: dict[uuid.UUID, list[KPI]] = {pid: [] for pid in pillar_ids}
    if not pillar_ids:
        return grouped
    result = await session.execute(
        select(KPI).where(KPI.pillar_id.in_(list(pillar_ids))).order_by(KPI.created_at)
    )
    for kpi in result.scalars().all():
        grouped[kpi.pillar_id].append(kpi)
    return grouped


async def count_narratives_by_pillar(
    session: AsyncSession, pillar_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, int]:
    if not pillar_ids:
        return {}
    result = await session.execute(
        select(Narrative.pillar_id, func.count())
        .where(Narrative.pillar_id.in_(list(pillar_ids)))
        .group_by(Narrative.pillar_id)
    )
    return {pid: n for pid, n in result.all()}


async def enrich_pillars(session: AsyncSession, pillars: Sequence[StrategicPillar]) -> list[PillarDetail]:
    """Attach KPIs and linked-narrative counts."""
    ids = [p.id for p in pillars]
    kpis = await list_kpis(session, ids)
    counts = await count_narratives_by_pillar(session, ids)
    return [
        PillarDetail(
            **PillarRead.model_validate(p).model_dump(),
            kpis=[KpiRead.model_validate(k) for k in kpis.get(p.id, [])],
            narrative_count=counts.get(p.id, 0),
        )
        for p in pillars
    ]


async def list_current_pillars(
    session: AsyncSession, workspace_id: uuid.UUID, *, active_only: bool = False
) -> list[PillarDetail]:
    """Pillars of the current year; empty when that year has no record yet."""
    year = await get_year_record(session, workspace_id)
    if year is None:
        return []
    stmt = select(StrategicPillar).where(
        StrategicPillar.workspace_id == workspace_id,
        StrategicPillar.year_id == year.id,
    )
    if active_only:
        stmt = stmt.where(StrategicPillar.status == PillarStatus.ACTIVE.value)
    result = await session.execute(stmt.order_by(StrategicPillar.order))
    return await enrich_pillars(session, result.scalars().all())


async def create_pillar(session: AsyncSession, ctx: WorkspaceContext, req: PillarCreate) -> StrategicPillar:
    if req.year_id is not None:
        year = await get_scoped_or_404(session, Year, req.year_id, ctx.workspace_id, "Year")
    else:
        year = await get_year_record(session, ctx.workspace_id)
        if year is None:
            raise HTTPException(status_code=400, detail="No year record found. Create a cycle first.")

    result = await session.execute(
        select(func.max(StrategicPillar.order)).where(
            StrategicPillar.workspace_id == ctx.workspace_id,
            StrategicPillar.year_id == year.id,
        )
    )
    max_order = result.scalar_one_or_none() or 0

    pillar = StrategicPillar(
        workspace_id=ctx.workspace_id,
        year_id=year.id,
        title=req.title,
        description=req.description,
        order=max_order + 1,
    )
    session.add(pillar)
    await session.flush()

    if req.kpi is not None:
        session.add(KPI(pillar_id=pillar.id, **req.kpi.model_dump()))
        await session.flush()

    log.info("pillar.created", pillar_id=str(pillar.id), workspace_id=str(ctx.workspace_id))
    return pillar


async def update_pillar(session: AsyncSession, pillar: StrategicPillar, req: PillarUpdate) -> StrategicPillar:
    data = req.model_dump(exclude_unset=True)
    apply_updates(pillar, data, required=("title", "order", "status"))
    session.add(pillar)
    await session.flush()

    log.info("pillar.updated", pillar_id=str(pillar.id), fields=sorted(data))
    return pillar


async def delete_pillar(session: AsyncSession, pillar: StrategicPillar) -> None:
    """Delete a pillar with its KPIs; linked narratives are unlinked."""
    await session.execute(update(Narrative).where(Narrative.pillar_id == pillar.id).values(pillar_id=None))
    for kpi in (await list_kpis(session, [pillar.id]))[pillar.id]:
        await session.delete(kpi)
    await session.delete(pillar)
    await session.flush()

    log.info("pillar.deleted", pillar_id=str(pillar.id), workspace_id=str(pillar.workspace_id))


# ---------------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------------

async def create_kpi(session: AsyncSession, pillar: StrategicPillar, req: KpiCreate) -> KPI:
    kpi = KPI(pillar_id=pillar.id, **req.model_dump())
    session.add(kpi)
    await session.flush()

    log.info("kpi.created", kpi_id=str(kpi.id), pillar_id=str(pillar.id))
    return kpi


async def get_kpi_or_404(session: AsyncSession, kpi_id: uuid.UUID, workspace_id: uuid.UUID) -> KPI:
    """KPIs have no workspace column; they are scoped through their pillar."""
    kpi = await session.get(KPI, kpi_id)
    if kpi is not None:
        pillar = await session.get(StrategicPillar, kpi.pillar_id)
        if pillar is not None and pillar.workspace_id == workspace_id:
            return kpi
    raise HTTPException(status_code=404, detail="KPI not found")


async def update_kpi(session: AsyncSession, kpi: KPI, req: KpiUpdate) -> KPI:
    data = req.model_dump(exclude_unset=True)
    apply_updates(kpi, data, required=("name", "target_value"))
    session.add(kpi)
    await session.flush()

    log.info("kpi.updated", kpi_id=str(kpi.id), fields=sorted(data))
    return kpi


async def delete_kpi(session: AsyncSession, kpi: KPI) -> None:
    await session.delete(kpi)
    await session.flush()
    log.info("kpi.deleted", kpi_id=str(kpi.id))


# ---------------------------------------------------------------------------
# Strategy overview
# ---------------------------------------------------------------------------

async def get_strategy(session: AsyncSession, workspace: Workspace) -> StrategyRead:
    pillars = await list_current_pillars(session, workspace.id, active_only=True)
    return StrategyRead(
        vision=workspace.vision,
        strategy_doc_url=workspace.strategy_doc_url,
        pillars=pillars,
    )


async def update_strategy(session: AsyncSession, workspace: Workspace, req: StrategyUpdate) -> Workspace:
    data = req.model_dump(exclude_unset=True)
    apply_updates(workspace, data)
    session.add(workspace)
    await session.flush()

    log.info("strategy.updated", workspace_id=str(workspace.id), fields=sorted(data))
    return workspace
