"""
Narrative service: CRUD for the top level of the N -> C -> T hierarchy.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.permissions import can_modify
from app.core.workspace import WorkspaceContext
from app.models.commitment import Commitment
from app.models.cycle import Cycle
from app.models.narrative import Narrative
from app.models.pillar import StrategicPillar
from app.models.task import Task
from app.models.team import Team
from app.services.common import apply_updates, ensure_in_workspace, get_scoped_or_404
from nct_shared.schemas.common import NctStatus
from nct_shared.schemas.nct import NarrativeCreate, NarrativeUpdate

log = structlog.get_logger()


async def get_narrative_or_404(
    session: AsyncSession, narrative_id: uuid.UUID, workspace_id: uuid.UUID
) -> Narrative:
    return await get_scoped_or_404(session, Narrative, narrative_id, workspace_id, "Narrative")


def ensure_can_modify(ctx: WorkspaceContext, owner_id: uuid.UUID) -> None:
    if not can_modify(ctx.role, ctx.user_id, owner_id):
        raise HTTPException(status_code=403, detail="Forbidden")


async def _check_references(session: AsyncSession, data: dict, workspace_id: uuid.UUID) -> None:
    await ensure_in_workspace(session, Cycle, data.get("cycle_id"), workspace_id, "Cycle")
    await ensure_in_workspace(session, Team, data.get("team_id"), workspace_id, "Team")
    await ensure_in_workspace(session, StrategicPillar, data.get("pillar_id"), workspace_id, "Pillar")


async def list_narratives(
    session: AsyncSession,
    workspace_id: uuid.UUID,
    *,
    cycle_id: Optional[uuid.UUID] = None,
    team_id: Optional[uuid.UUID] = None,
) -> list[Narrative]:
    stmt = select(Narrative).where(Narrative.workspace_id == workspace_id)
    if cycle_id:
        stmt = stmt.where(Narrative.cycle_id == cycle_id)
    if team_id:
        stmt = stmt.where(Narrative.team_id == team_id)
    result = await session.execute(stmt.order_by(Narrative.created_at))
    return list(result.scalars().all())


async def create_narrative(
    session: AsyncSession, ctx: WorkspaceContext, req: NarrativeCreate
) -> Narrative:
    data = req.model_dump()
    await _check_references(session, data, ctx.workspace_id)

    narrative = Narrative(
        **data,
        status=NctStatus.ACTIVE.value,
        owner_id=ctx.user_id,
        workspace_id=ctx.workspace_id,
    )
    session.add(narrative)
    await session.flush()

    log.info("narrative.created", narrative_id=str(narrative.id), workspace_id=str(ctx.workspace_id))
    return narrative


async def update_narrative(
    session: AsyncSession, ctx: WorkspaceContext, narrative: Narrative, req: NarrativeUpdate
) -> Narrative:
    ensure_can_modify(ctx, narrative.owner_id)
    data = req.model_dump(exclude_unset=True)
    await _check_references(session, data, ctx.workspace_id)

    apply_updates(narrative, data, required=("title", "status"))
    session.add(narrative)
    await session.flush()

    log.info("narrative.updated", narrative_id=str(narrative.id), fields=sorted(data))
    return narrative


async def delete_narrative(session: AsyncSession, ctx: WorkspaceContext, narrative: Narrative) -> None:
    """Delete a narrative together with its commitments and their tasks."""
    ensure_can_modify(ctx, narrative.owner_id)

    commitment_ids = select(Commitment.id).where(Commitment.narrative_id == narrative.id)
    await session.execute(delete(Task).where(Task.commitment_id.in_(commitment_ids)))
    await session.execute(delete(Commitment).where(Commitment.narrative_id == narrative.id))
    await session.delete(narrative)
    await session.flush()

    log.info("narrative.deleted", narrative_id=str(narrative.id), workspace_id=str(ctx.workspace_id))
