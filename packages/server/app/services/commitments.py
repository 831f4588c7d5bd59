"""
Commitment service: CRUD for commitments under a narrative.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.workspace import WorkspaceContext
from app.models.commitment import Commitment
from app.models.narrative import Narrative
from app.models.task import Task
from app.models.team import Team
from app.services.common import apply_updates, ensure_in_workspace, get_scoped_or_404
from app.services.narratives import ensure_can_modify
from nct_shared.schemas.nct import CommitmentCreate, CommitmentUpdate

log = structlog.get_logger()


async def get_commitment_or_404(
    session: AsyncSession, commitment_id: uuid.UUID, workspace_id: uuid.UUID
) -> Commitment:
    return await get_scoped_or_404(session, Commitment, commitment_id, workspace_id, "Commitment")


async def count_tasks(session: AsyncSession, commitment_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count()).select_from(Task).where(Task.commitment_id == commitment_id)
    )
    return result.scalar_one()


async def list_commitments(
    session: AsyncSession,
    workspace_id: uuid.UUID,
    *,
    narrative_id: Optional[uuid.UUID] = None,
) -> list[Commitment]:
    stmt = select(Commitment).where(Commitment.workspace_id == workspace_id)
    if narrative_id:
        stmt = stmt.where(Commitment.narrative_id == narrative_id)
    result = await session.execute(stmt.order_by(Commitment.created_at))
    return list(result.scalars().all())


async def create_commitment(
    session: AsyncSession, ctx: WorkspaceContext, req: CommitmentCreate
) -> Commitment:
    await get_scoped_or_404(session, Narrative, req.narrative_id, ctx.workspace_id, "Narrative")
    await ensure_in_workspace(session, Team, req.team_id, ctx.workspace_id, "Team")

    commitment = Commitment(
        title=req.title,
        outcome=req.outcome,
        key_results=req.key_results,
        status=req.status.value,
        due_date=req.due_date,
        narrative_id=req.narrative_id,
        team_id=req.team_id,
        owner_id=ctx.user_id,
        workspace_id=ctx.workspace_id,
    )
    session.add(commitment)
    await session.flush()

    log.info(
        "commitment.created",
        commitment_id=str(commitment.id),
        narrative_id=str(req.narrative_id),
        workspace_id=str(ctx.workspace_id),
    )
    return commitment


async def update_commitment(
    session: AsyncSession, ctx: WorkspaceContext, commitment: Commitment, req: CommitmentUpdate
) -> Commitment:
    ensure_can_modify(ctx, commitment.owner_id)
    data = req.model_dump(exclude_unset=True)
    await ensure_in_workspace(session, Team, data.get("team_id"), ctx.workspace_id, "Team")

    apply_updates(commitment, data, required=("title", "status"))
    session.add(commitment)
    await session.flush()

    log.info("commitment.updated", commitment_id=str(commitment.id), fields=sorted(data))
    return commitment


async def delete_commitment(session: AsyncSession, ctx: WorkspaceContext, commitment: Commitment) -> None:
    """Delete a commitment and its tasks."""
    ensure_can_modify(ctx, commitment.owner_id)

    await session.execute(delete(Task).where(Task.commitment_id == commitment.id))
    await session.delete(commitment)
    await session.flush()

    log.info("commitment.deleted", commitment_id=str(commitment.id), workspace_id=str(ctx.workspace_id))
